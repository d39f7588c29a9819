"""
Route pattern table for permission lookup.

Patterns are compiled once when the table is built. A "*" in a pattern
matches one or more characters inside a single path segment and never
crosses a "/". Lookup order:

1. Exact key match.
2. Wildcard keys ordered by specificity: more path segments first, then
   fewer wildcards. Registration order breaks any remaining tie.

The first key that matches wins. If that key has no rule for the
requested method the route is unrestricted at this layer.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import AbstractSet, Any, Dict, List, Mapping, Optional, Set, Tuple, Union

logger = logging.getLogger(__name__)

WILDCARD = "*"

SINGLE = "single"
ANY_OF = "any_of"
ALL_OF = "all_of"


@dataclass(frozen=True)
class PermissionRequirement:
    """A required-permission expression: one permission, any of N, or all of N."""
    mode: str
    permissions: Tuple[str, ...]

    def missing(self, granted: AbstractSet[str]) -> List[str]:
        """Return the unmet permissions; an empty list means the requirement is satisfied."""
        if self.mode == ANY_OF:
            if any(p in granted for p in self.permissions):
                return []
            return list(self.permissions)
        return [p for p in self.permissions if p not in granted]

    def is_satisfied_by(self, granted: AbstractSet[str]) -> bool:
        return not self.missing(granted)

    def describe(self) -> str:
        joined = ", ".join(self.permissions)
        if self.mode == ANY_OF:
            return f"Required any permission: {joined}"
        if self.mode == ALL_OF:
            return f"Required all permissions: {joined}"
        return f"Required permission: {joined}"


def requires(permission: str) -> PermissionRequirement:
    return PermissionRequirement(SINGLE, (permission,))


def any_of(*permissions: str) -> PermissionRequirement:
    if not permissions:
        raise ValueError("any_of() needs at least one permission")
    return PermissionRequirement(ANY_OF, tuple(permissions))


def all_of(*permissions: str) -> PermissionRequirement:
    if not permissions:
        raise ValueError("all_of() needs at least one permission")
    return PermissionRequirement(ALL_OF, tuple(permissions))


RequirementLike = Union[str, PermissionRequirement]


def coerce_requirement(value: RequirementLike) -> PermissionRequirement:
    if isinstance(value, PermissionRequirement):
        return value
    if isinstance(value, str):
        return requires(value)
    raise TypeError(f"Unsupported permission requirement: {value!r}")


def normalize_path(path: str) -> str:
    """Drop query string, collapse repeated slashes and strip a trailing slash"""
    path = path.split("?", 1)[0].split("#", 1)[0]
    path = re.sub(r"/{2,}", "/", path) or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def count_segments(path: str) -> int:
    return len([segment for segment in path.split("/") if segment])


def compile_pattern(pattern: str) -> re.Pattern:
    # Escape every literal piece, then join the pieces with a single-segment matcher
    literal_parts = pattern.split(WILDCARD)
    return re.compile("^" + "[^/]+".join(re.escape(part) for part in literal_parts) + "$")


@dataclass
class RoutePattern:
    key: str
    regex: re.Pattern
    segments: int
    wildcards: int
    rules: Dict[str, PermissionRequirement] = field(default_factory=dict)

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None


@dataclass(frozen=True)
class RouteMatch:
    key: str
    rules: Mapping[str, PermissionRequirement]


class RouteTable:
    def __init__(self, routes: Mapping[str, Mapping[str, Any]]):
        self._exact: Dict[str, Dict[str, PermissionRequirement]] = {}
        self._patterns: List[RoutePattern] = []

        for key, methods in routes.items():
            rules = {method.upper(): coerce_requirement(rule) for method, rule in methods.items()}
            if WILDCARD in key:
                self._patterns.append(RoutePattern(
                    key=key,
                    regex=compile_pattern(key),
                    segments=count_segments(key),
                    wildcards=key.count(WILDCARD),
                    rules=rules,
                ))
            else:
                self._exact[normalize_path(key)] = rules

        # sort() is stable, so equal-specificity patterns keep registration order
        self._patterns.sort(key=lambda p: (-p.segments, p.wildcards))

    def __len__(self) -> int:
        return len(self._exact) + len(self._patterns)

    def match(self, path: str) -> Optional[RouteMatch]:
        """Return the winning key for a path, or None when no key matches"""
        path = normalize_path(path)
        rules = self._exact.get(path)
        if rules is not None:
            return RouteMatch(key=path, rules=rules)
        for pattern in self._patterns:
            if pattern.matches(path):
                return RouteMatch(key=pattern.key, rules=pattern.rules)
        return None

    def lookup(self, path: str, method: str) -> Optional[PermissionRequirement]:
        """Required permission expression for (path, method); None means unrestricted"""
        route = self.match(path)
        if route is None:
            logger.debug("No route rule for %s %s", method, path)
            return None
        requirement = route.rules.get(method.upper())
        logger.debug("Route %s %s matched %s -> %s", method, path, route.key, requirement)
        return requirement

    def permission_names(self) -> Set[str]:
        names: Set[str] = set()
        all_rules = list(self._exact.values()) + [p.rules for p in self._patterns]
        for rules in all_rules:
            for requirement in rules.values():
                names.update(requirement.permissions)
        return names
