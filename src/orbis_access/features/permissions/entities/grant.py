"""Parsed permission grants.

Granted permission strings are parsed once, when a principal's permission set
is loaded, into one of three variants. Checks then match against the parsed
form instead of re-splitting strings.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Union

from ....core.exceptions import ValidationError
from .permission import WILDCARD, PermissionCode

logger = logging.getLogger(__name__)

GLOBAL_WILDCARD = "*:*"


@dataclass(frozen=True)
class ExactGrant:
    """Grants exactly one ``resource:action``."""
    resource: str
    action: str


@dataclass(frozen=True)
class ResourceWildcardGrant:
    """Grants every action on one resource (``resource:*``)."""
    resource: str


@dataclass(frozen=True)
class GlobalWildcardGrant:
    """Grants everything (``*:*``)."""


Grant = Union[ExactGrant, ResourceWildcardGrant, GlobalWildcardGrant]


def parse_grant(permission: str) -> Optional[Grant]:
    """Parse a granted permission string, or return None if it is malformed."""
    try:
        code = PermissionCode(permission)
    except ValidationError:
        return None

    if code.value == GLOBAL_WILDCARD:
        return GlobalWildcardGrant()
    if code.action == WILDCARD:
        return ResourceWildcardGrant(code.resource)
    return ExactGrant(code.resource, code.action)


@dataclass(frozen=True)
class GrantSet:
    """
    A principal's effective permissions.

    Each granted string is parsed into its variant once, then indexed:
    exact grants by their string, resource wildcards by resource, and the
    global wildcard as a flag.
    """

    raw: FrozenSet[str] = frozenset()
    has_global: bool = False
    resource_wildcards: FrozenSet[str] = frozenset()

    @classmethod
    def empty(cls) -> "GrantSet":
        return cls()

    @classmethod
    def from_codes(cls, codes: Iterable[str]) -> "GrantSet":
        raw = set()
        resources = set()
        has_global = False
        for code in codes:
            raw.add(code)
            grant = parse_grant(code)
            if grant is None:
                logger.warning(f"Ignoring malformed granted permission: {code!r}")
                continue
            if isinstance(grant, GlobalWildcardGrant):
                has_global = True
            elif isinstance(grant, ResourceWildcardGrant):
                resources.add(grant.resource)
        return cls(
            raw=frozenset(raw),
            has_global=has_global,
            resource_wildcards=frozenset(resources),
        )

    def allows(self, required: PermissionCode) -> bool:
        """Exact membership, then ``*:*``, then ``<resource>:*``."""
        if required.value in self.raw:
            return True
        if self.has_global:
            return True
        return required.resource in self.resource_wildcards

    def codes(self) -> List[str]:
        """Granted strings, sorted for display."""
        return sorted(self.raw)

    def __len__(self) -> int:
        return len(self.raw)

    def __contains__(self, code: str) -> bool:
        return code in self.raw
