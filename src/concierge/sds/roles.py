# src/concierge/sds/roles.py
"""
SDS job role names -> resolution and SNOMED CT cross-mapping.

Notes
-----
- The reference table is parsed once, when a RoleTable is built.
- A trailing "(Closed)" token marks a retired code; it is stripped from the
  title and recorded as Role.deprecated.
- The SDS -> SNOMED CT table is hand-curated and deliberately partial. The
  reverse table is derived by inversion; where several SDS codes share a
  SNOMED CT concept, the first one listed wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from ..exceptions import InvalidIdentifierError
from ..identifiers.base import Identifier
from ..identifiers.registry import SystemRegistry
from ..identifiers.uris import SDS_JOB_ROLE_NAME, SNOMEDCT
from ..snomed import parse_concept_id
from .data import SDS_JOB_ROLES

LOG = logging.getLogger(__name__)

DEPRECATED_MARKER = "(Closed)"

# SDS job role code -> SNOMED CT occupation concept
SDS_TO_SNOMED: Mapping[str, int] = {
    "R0050": 768839008,  # Consultant
    "R0030": 158890004,  # Professor
    "R0040": 768839008,  # no senior lecturer concept; use consultant
    "R0070": 309396002,
    "R0080": 397908005,
    "R0100": 224529009,
    "R0110": 302211009,
    "R0120": 224530004,
    "R0130": 224531000,
    "R0140": 224532007,
    "R0150": 158972004,
    "R0260": 62247001,
    "R0370": 309454000,
    "R0790": 159033005,
    "R0018": 309418004,
    "R1760": 394572006,
}


@dataclass(frozen=True)
class Role:
    """An SDS job role."""

    code: str
    job_title: str
    deprecated: bool = False


class RoleTable:
    """
    Code -> Role and job title -> code indices over the SDS reference table.
    """

    def __init__(self, data: str = SDS_JOB_ROLES) -> None:
        self._roles: Dict[str, Role] = {}
        self._titles: Dict[str, str] = {}
        for line in data.splitlines():
            words = line.split()
            if not words:
                continue
            code = words[0]
            deprecated = False
            if len(words) > 1 and words[-1] == DEPRECATED_MARKER:
                words = words[:-1]
                deprecated = True
            title = " ".join(words[1:])
            self._roles[code] = Role(code=code, job_title=title, deprecated=deprecated)
            self._titles.setdefault(title, code)
        LOG.debug("loaded %d SDS job roles", len(self._roles))

    def __len__(self) -> int:
        return len(self._roles)

    def get(self, code: str) -> Optional[Role]:
        """Return the role for an exact, case-sensitive code."""
        return self._roles.get(code)

    def lookup_title(self, title: str) -> Optional[str]:
        """Return the code for an exact job title."""
        return self._titles.get(title)


def invert(forward: Mapping[str, int]) -> Dict[int, str]:
    """Invert a many-to-one table, keeping the first source for each target."""
    reverse: Dict[int, str] = {}
    for source, target in forward.items():
        reverse.setdefault(target, source)
    return reverse


class RoleResolver:
    """Resolves SDS job role codes to Role records."""

    def __init__(self, table: RoleTable) -> None:
        self.table = table

    def resolve(self, identifier: Identifier) -> Optional[Role]:
        return self.table.get(identifier.value)


class SDSToSNOMEDMapper:
    """Maps SDS job role codes to SNOMED CT occupation concepts."""

    def __init__(self, forward: Mapping[str, int] = SDS_TO_SNOMED) -> None:
        self.forward = forward

    def map(self, identifier: Identifier) -> Optional[Identifier]:
        concept_id = self.forward.get(identifier.value)
        if concept_id is None:
            return None
        return Identifier(system=SNOMEDCT, value=str(concept_id))


class SNOMEDToSDSMapper:
    """
    Maps SNOMED CT occupation concepts back to SDS job role codes.

    The input must be a valid SNOMED CT concept identifier; anything else is
    rejected with InvalidIdentifierError rather than looked up.
    """

    # TODO: accept any descendant of "occupation" once a terminology service
    # is available, rather than only the concepts in the curated table.

    def __init__(self, forward: Mapping[str, int] = SDS_TO_SNOMED) -> None:
        self.reverse = invert(forward)

    def map(self, identifier: Identifier) -> Optional[Identifier]:
        try:
            concept_id = parse_concept_id(identifier.value)
        except InvalidIdentifierError as e:
            raise InvalidIdentifierError(f"cannot map from SNOMED CT: {e}") from e
        code = self.reverse.get(concept_id)
        if code is None:
            return None
        return Identifier(system=SDS_JOB_ROLE_NAME, value=code)


def install(registry: SystemRegistry, table: Optional[RoleTable] = None) -> None:
    """
    Register the SDS job role system, its resolver and both SNOMED CT mappers.
    """
    registry.register("SDS Job Roles", SDS_JOB_ROLE_NAME)
    registry.register("SNOMED CT", SNOMEDCT)
    if table is None:
        table = RoleTable()
    registry.register_resolver(SDS_JOB_ROLE_NAME, RoleResolver(table))
    registry.register_mapper(SDS_JOB_ROLE_NAME, SNOMEDCT, SDSToSNOMEDMapper())
    registry.register_mapper(SNOMEDCT, SDS_JOB_ROLE_NAME, SNOMEDToSDSMapper())
