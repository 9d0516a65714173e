"""
Errors
======
Exception taxonomy for the quality gate.

    StructuralError        — template contract broken; fatal, never retried.
    RepairInvocationError  — one repair attempt failed; recorded in the fix
                             log and the loop moves on.

Analysis never raises and exhausted retries are reported through
RepairResult, so neither has an exception type.
"""


class GameQAError(Exception):
    """Base class for all game_qa errors."""


class StructuralError(GameQAError):
    """Raised when a structure template is missing or misorders its markers."""


class RepairInvocationError(GameQAError):
    """Raised by an ExternalCodeRepairer that could not produce a program."""
