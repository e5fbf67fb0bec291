"""
Ordered authorization policy.

The policy is a registration sink: bindings are kept in the order they are
registered, and that order is the evaluation precedence used by the request
authorization runtime (first matching binding wins).
"""

from typing import Iterator, List, Protocol, Sequence, Tuple

from shared.errors import ConfigurationError
from .predicates import AccessPredicate, ResolvedBinding


class PolicyTarget(Protocol):
    """Anything that can register path patterns against an access predicate."""

    def register(self, patterns: Sequence[str], predicate: AccessPredicate) -> None:
        ...


class AuthorizationPolicy:
    """In-memory, append-only list of access rule bindings."""

    def __init__(self):
        self._bindings: List[ResolvedBinding] = []

    def register(self, patterns: Sequence[str], predicate: AccessPredicate) -> None:
        """Append a binding. Registration order is evaluation order."""
        if not patterns:
            raise ConfigurationError(
                "Cannot register an access rule without path patterns",
                details={"predicate": str(predicate)}
            )
        self._bindings.append(ResolvedBinding(tuple(patterns), predicate))

    @property
    def bindings(self) -> Tuple[ResolvedBinding, ...]:
        return tuple(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[ResolvedBinding]:
        return iter(self.bindings)
