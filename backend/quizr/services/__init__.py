"""Services Layer — orchestrate repositories and outbound clients around the pure core.

Invariants:
    - Services depend on Protocols (core/repository_protocols), never on SQLAlchemy
    - "today" is always an argument, never recomputed inside a service
"""
