"""Root conftest — shared test configuration."""

import os
import tempfile

# Ensure tests never touch a real database, secret or upload directory
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="spex-uploads-"))
os.environ.setdefault("BASE_URL", "http://api.test")
os.environ.setdefault("LOG_FORMAT", "text")
