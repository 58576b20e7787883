# errors.py
from __future__ import annotations


class EngineError(Exception):
    """Base class for record-level calculation failures.

    ``field`` names the offending WorkDay field and ``index`` the position of
    the record in the collection being processed (set by the aggregation step).
    """

    def __init__(self, message: str, *, field: str | None = None, index: int | None = None):
        super().__init__(message)
        self.field = field
        self.index = index

    def __str__(self) -> str:
        msg = super().__str__()
        if self.index is not None:
            msg = f"record #{self.index}: {msg}"
        return msg


class InvalidTimeRange(EngineError):
    """A required time field is missing or the break window is half-filled."""


class UnknownRole(EngineError):
    """The record's role has no entry in the rate table."""

    def __init__(self, role: str, *, index: int | None = None):
        super().__init__(f"unknown role: {role!r}", field="role", index=index)
        self.role = role
