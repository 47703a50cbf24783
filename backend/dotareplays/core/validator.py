"""Validator — accumulates field → message violations.

Invariants:
    - check() records a violation only when its condition is False
    - The first message recorded for a key wins; later ones are dropped
    - valid is True iff no violation has been recorded
"""

import re
from typing import Hashable, Iterable

from dotareplays.core.errors import FailedValidationError

# Address shape check, as recommended by the WHATWG HTML living standard.
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Validator:
    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        """Raise FailedValidationError carrying the accumulated map."""
        if not self.valid:
            raise FailedValidationError(self.errors)


def permitted_value(value: Hashable, *permitted: Hashable) -> bool:
    return value in permitted


def matches(value: str, rx: re.Pattern) -> bool:
    return rx.match(value) is not None


def unique(values: Iterable[Hashable]) -> bool:
    seen = set()
    for v in values:
        if v in seen:
            return False
        seen.add(v)
    return True
