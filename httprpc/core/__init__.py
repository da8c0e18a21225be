"""Core Layer — pure dispatch logic: types, coercion, encoding. No IO, no HTTP.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Everything here is synchronous and deterministic

Design Decisions:
    - Functional core separated from imperative shell
"""
