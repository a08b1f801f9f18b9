"""Exception types raised by the cyclocartography services.

The numeric core does not validate its inputs and never raises for degenerate
geometry (missing horizon crossings, untracked bodies); those cases produce
empty results instead. Only the parsing helpers and the batch scanners raise.
"""

from __future__ import annotations


class InputParseError(ValueError):
    """A birth date or time string could not be split into calendar parts."""


class ScanCancelled(RuntimeError):
    """A batch scan was stopped by its deadline or cancel event."""

    def __init__(self, reason: str, completed: int = 0, total: int = 0):
        super().__init__(f"scan cancelled ({reason}) after {completed}/{total} samples")
        self.reason = reason
        self.completed = completed
        self.total = total


__all__ = ["InputParseError", "ScanCancelled"]
