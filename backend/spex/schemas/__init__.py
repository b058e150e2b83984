"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Profile payloads leave this layer as core Profile value objects

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
