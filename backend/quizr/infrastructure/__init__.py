"""Infrastructure Layer — database, outbound HTTP clients, repositories, logging.

Invariants:
    - Everything that touches the network or the database lives here
    - Driver exceptions never cross this boundary: they become QuizrError subclasses
      or InsertOutcome values
"""
