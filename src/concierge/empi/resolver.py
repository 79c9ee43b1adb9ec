# src/concierge/empi/resolver.py
"""
EMPI-backed resolvers and mappers for the system registry.

The NHS number and EMPI internal identifier systems resolve to Patient
records by asking the EMPI. NHS number -> EMPI identifier is mapped by
reading the identifier list of the resolved patient.
"""

from __future__ import annotations

from typing import Optional

from ..identifiers.base import Identifier
from ..identifiers.registry import SystemRegistry
from ..identifiers.uris import EMPI_NUMBER, NHS_NUMBER
from .authority import Authority
from .client import EMPIClient
from .models import Patient


class EMPIResolver:
    """Resolves identifiers issued by one authority via the EMPI."""

    def __init__(self, client: EMPIClient, authority: Authority) -> None:
        self.client = client
        self.authority = authority

    def resolve(self, identifier: Identifier) -> Optional[Patient]:
        return self.client.lookup(self.authority, identifier.value)


class EMPIMapper:
    """
    Maps a patient identifier from one authority to another by looking the
    patient up and picking the target authority's identifier from the result.
    """

    def __init__(
        self,
        client: EMPIClient,
        source: Authority,
        target: Authority,
        target_system: str,
    ) -> None:
        self.client = client
        self.source = source
        self.target = target
        self.target_system = target_system

    def map(self, identifier: Identifier) -> Optional[Identifier]:
        patient = self.client.lookup(self.source, identifier.value)
        if patient is None:
            return None
        for ident in patient.identifiers:
            if ident.system == self.target.code:
                return Identifier(
                    system=self.target_system,
                    value=ident.value,
                    use=ident.use,
                    period=ident.period,
                    assigner=ident.assigner,
                )
        return None


def install(registry: SystemRegistry, client: EMPIClient) -> None:
    """Register the EMPI-backed systems, resolvers and mapper."""
    registry.register("NHS number", NHS_NUMBER)
    registry.register("NHS Wales EMPI identifier", EMPI_NUMBER)
    registry.register_resolver(NHS_NUMBER, EMPIResolver(client, Authority.NHS))
    registry.register_resolver(EMPI_NUMBER, EMPIResolver(client, Authority.EMPI))
    registry.register_mapper(
        NHS_NUMBER,
        EMPI_NUMBER,
        EMPIMapper(client, Authority.NHS, Authority.EMPI, EMPI_NUMBER),
    )
