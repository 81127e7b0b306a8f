"""Core Layer — pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Everything here is deterministic given its inputs (clocks are injected)

Design Decisions:
    - Functional core separated from imperative shell: sanitization, rate limiting
      and attempt-state rules are testable without a database or network
"""
