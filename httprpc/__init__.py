"""HTTP-RPC — name-based operation dispatch over HTTP with self-describing metadata.

Invariants:
    - Package root contains no executable code beyond the version constant

Design Decisions:
    - Explicit imports only, no star exports
"""

__version__ = "1.0.0"
