"""Field resolution policies for the upstream records.

The Wedrop API renames fields between endpoints and versions, so every
canonical field is described by a :class:`FieldPolicy`: an ordered list of
accessors tried in sequence until one yields an accepted value.  Policies are
plain module-level constants, which keeps the priority order of each field
visible and lets the tests exercise a single policy in isolation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from .utils import to_number


Accessor = Union[str, Callable[[Mapping[str, Any]], Any]]

_MISSING = object()


def lookup(raw: Mapping[str, Any], path: str) -> Any:
    """Return the value at dotted ``path`` (``"category.name"``) or ``None``."""

    current: Any = raw
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def is_present(value: Any) -> bool:
    """``??`` semantics: anything but ``None`` counts."""

    return value is not None


def is_truthy(value: Any) -> bool:
    """``||`` semantics: empty strings, zero and ``False`` fall through."""

    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


def is_number(value: Any) -> bool:
    return to_number(value) is not None


def is_nonzero_number(value: Any) -> bool:
    number = to_number(value)
    return number is not None and number != 0


@dataclass(frozen=True)
class FieldPolicy:
    name: str
    accessors: Sequence[Accessor]
    default: Any = None
    accept: Callable[[Any], bool] = is_present

    def candidates(self, raw: Mapping[str, Any]):
        for accessor in self.accessors:
            if callable(accessor):
                yield accessor, accessor(raw)
            else:
                yield accessor, lookup(raw, accessor)

    def resolve(self, raw: Mapping[str, Any]) -> Any:
        value = self.first(raw)
        return self.default if value is _MISSING else value

    def first(self, raw: Mapping[str, Any]) -> Any:
        for _, value in self.candidates(raw):
            if self.accept(value):
                return value
        return _MISSING

    def source(self, raw: Mapping[str, Any]) -> Optional[str]:
        """Name of the accessor that produced the value, for diagnostics."""

        for accessor, value in self.candidates(raw):
            if self.accept(value):
                return accessor if isinstance(accessor, str) else getattr(accessor, "__name__", "callable")
        return None


def number_policy(name: str, *accessors: Accessor, default: Any = None, nonzero: bool = False) -> FieldPolicy:
    """Policy whose candidates must coerce to a number."""

    return FieldPolicy(name, accessors, default=default, accept=is_nonzero_number if nonzero else is_number)


def text_policy(name: str, *accessors: Accessor, default: Any = "") -> FieldPolicy:
    return FieldPolicy(name, accessors, default=default, accept=is_truthy)


__all__ = [
    "FieldPolicy",
    "lookup",
    "is_present",
    "is_truthy",
    "is_number",
    "is_nonzero_number",
    "number_policy",
    "text_policy",
]
