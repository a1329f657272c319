"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Error taxonomy shared by the engines, the store and the HTTP layer.

* ValidationError        – bad input, raised before any side effect
* FormatError            – a backup / export file failed structural checks
* NotAuthenticatedError  – store used without a user session
* NotFoundError          – target id / slot / index does not exist
* ConflictError          – insert of an id that already exists
* ScheduleMutationError  – a schedule write failed; message names the action
"""
from __future__ import annotations


class PlannerError(Exception):
    """Base class for everything this service raises on purpose."""


class ValidationError(PlannerError):
    pass


class FormatError(ValidationError):
    pass


class NotAuthenticatedError(PlannerError):
    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message)


class NotFoundError(PlannerError):
    pass


class ConflictError(PlannerError):
    pass


class ScheduleMutationError(PlannerError):
    def __init__(self, action: str, cause: BaseException | str) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to {action}: {cause}")
