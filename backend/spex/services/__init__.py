"""Services Layer — card store, claim state machine and analytics sink.

Invariants:
    - Services own every database round-trip; routes never query directly
    - Business rules live in core/; services orchestrate IO around them

Design Decisions:
    - One service per concern, constructed per request with its session
"""
