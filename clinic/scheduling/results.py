from dataclasses import dataclass
from enum import Enum
from typing import Any


class Outcome(str, Enum):
    OK = 'ok'
    NOT_FOUND = 'not_found'
    CONFLICT = 'conflict'
    INVALID = 'invalid'
    UNAUTHORIZED = 'unauthorized'
    INTERNAL = 'internal'


INTERNAL_ERROR = 'internal_error'


@dataclass(frozen=True)
class OperationResult:
    """The single terminal result of one lifecycle or profile operation."""

    outcome: Outcome
    reason: str | None = None
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, value: Any = None) -> 'OperationResult':
        return cls(Outcome.OK, value=value)

    @classmethod
    def declined(cls, outcome: Outcome, reason: str) -> 'OperationResult':
        return cls(outcome, reason=reason)

    @classmethod
    def internal(cls) -> 'OperationResult':
        return cls(Outcome.INTERNAL, reason=INTERNAL_ERROR)
