"""Aggregate status returned by every recoverable authp operation."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_SUCCESS_MESSAGE = "Success"


@dataclass
class Status:
    """Validity flag, accumulated error messages and a summary message.

    Callers must check ``is_valid`` before trusting ``message``: once any
    error has been added the message reports the failure instead.
    """

    errors: list[str] = field(default_factory=list)
    _message: str = field(default=DEFAULT_SUCCESS_MESSAGE, init=False, repr=False)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def message(self) -> str:
        if self.errors:
            plural = "" if len(self.errors) == 1 else "s"
            return f"Failed with {len(self.errors)} error{plural}"
        return self._message

    @message.setter
    def message(self, value: str) -> None:
        self._message = value

    def add_error(self, error: str) -> Status:
        """Record an error and return self so callers can ``return status.add_error(...)``."""
        self.errors.append(error)
        return self

    def combine(self, other: Status) -> Status:
        """Merge another status into this one.

        Errors concatenate and validity becomes the AND of both. A
        non-default message from ``other`` replaces this one's.
        """
        self.errors.extend(other.errors)
        if other._message != DEFAULT_SUCCESS_MESSAGE:
            self._message = other._message
        return self

    def get_all_errors(self, separator: str = "\n") -> str:
        return separator.join(self.errors)
