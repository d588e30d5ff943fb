"""Argument matching for invocation rules (core domain)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from channel_mock.core.values import deep_equals, is_mapping


class MatcherKind(Enum):
    EXACT = "exact"
    PARTIAL = "partial"


@dataclass(frozen=True, eq=False)
class ArgumentMatcher:
    """Decide whether call arguments satisfy a registered rule.

    Build instances with :meth:`exactly` or :meth:`contains` rather than the
    constructor.
    """

    kind: MatcherKind
    reference: Any

    @classmethod
    def exactly(cls, reference: Any) -> "ArgumentMatcher":
        """Arguments must equal ``reference``.

        Collections are compared without regard to order, so ``[1, 2, 3]``
        matches ``[3, 2, 1]`` and mapping key order is irrelevant.
        """

        return cls(MatcherKind.EXACT, reference)

    @classmethod
    def contains(cls, reference: Mapping[str, Any]) -> "ArgumentMatcher":
        """Arguments must be a mapping holding every key of ``reference``.

        Values are compared key by key with the same unordered equality as
        :meth:`exactly`; keys not named in ``reference`` are ignored.
        """

        if is_mapping(reference):
            reference = MappingProxyType(dict(reference))
        return cls(MatcherKind.PARTIAL, reference)

    def matches(self, arguments: Any) -> bool:
        if self.kind is MatcherKind.EXACT:
            return deep_equals(self.reference, arguments)

        # Partial matching is only defined for named-style (mapping) arguments.
        if not (is_mapping(arguments) and is_mapping(self.reference)):
            return False

        return all(
            key in arguments and deep_equals(expected, arguments[key])
            for key, expected in self.reference.items()
        )
