"""
Field-keyed validation collector.

Rules are evaluated in full; every failing field ends up in `errors`. When more
than one rule on the same field fails, the message of the last failing rule is
the one kept.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable

from catalog_store.errors import ValidationFailure


class Validator:
    def __init__(self) -> None:
        self.errors: Dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        self.errors[key] = message

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)

    def raise_if_invalid(self) -> None:
        if self.errors:
            raise ValidationFailure(self.errors)


def permitted_value(value: Any, *permitted: Any) -> bool:
    return value in permitted


def unique(values: Iterable[Hashable]) -> bool:
    seen = set()
    for value in values:
        if value in seen:
            return False
        seen.add(value)
    return True


__all__ = ["Validator", "permitted_value", "unique"]
