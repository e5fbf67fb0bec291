"""
Access predicates and the bindings registered on an authorization policy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Tuple


class PredicateKind(str, Enum):
    """Access decision kinds."""
    PERMIT_ALL = "permit_all"
    AUTHENTICATED = "authenticated"
    HAS_ANY_ROLE = "has_any_role"


@dataclass(frozen=True)
class AccessPredicate:
    """Access decision attached to a set of path patterns.

    ``defaulted`` marks the require-authenticated decision given to rules
    that declared no predicate at all.
    """
    kind: PredicateKind
    roles: Tuple[str, ...] = ()
    defaulted: bool = False

    @classmethod
    def permit_all(cls) -> "AccessPredicate":
        return cls(PredicateKind.PERMIT_ALL)

    @classmethod
    def authenticated(cls) -> "AccessPredicate":
        return cls(PredicateKind.AUTHENTICATED)

    @classmethod
    def default_authenticated(cls) -> "AccessPredicate":
        return cls(PredicateKind.AUTHENTICATED, defaulted=True)

    @classmethod
    def has_any_role(cls, roles: Iterable[str]) -> "AccessPredicate":
        roles = tuple(roles)
        if not roles:
            raise ValueError("has_any_role requires at least one role")
        return cls(PredicateKind.HAS_ANY_ROLE, roles)

    def __str__(self) -> str:
        if self.kind == PredicateKind.HAS_ANY_ROLE:
            return f"{self.kind.value}({','.join(self.roles)})"
        return self.kind.value


@dataclass(frozen=True)
class ResolvedBinding:
    """A registered (patterns, predicate) pair.

    A request path matches the binding when it matches any of its patterns.
    """
    patterns: Tuple[str, ...]
    predicate: AccessPredicate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patterns": list(self.patterns),
            "predicate": self.predicate.kind.value,
            "roles": list(self.predicate.roles),
            "defaulted": self.predicate.defaulted,
        }
