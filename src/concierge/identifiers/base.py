# src/concierge/identifiers/base.py
"""
Identifier value types and the resolver/mapper capability protocols.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Protocol, runtime_checkable

__all__ = ["Identifier", "Period", "Resolver", "Mapper"]


@dataclass(frozen=True)
class Period:
    """A time period; either bound may be unknown."""

    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class Identifier:
    """
    A value within an identifier system.

    Attributes
    ----------
    system : str
        URI (or issuing authority code) of the namespace the value belongs to.
    value : str
        The identifier itself; compared as an exact string.
    use : str or None
        FHIR identifier use, e.g. "official".
    period : Period or None
        Time period during which the identifier was valid.
    assigner : str or None
        Code of the organisation that issued the identifier.
    """

    system: str
    value: str
    use: Optional[str] = None
    period: Optional[Period] = None
    assigner: Optional[str] = None


@runtime_checkable
class Resolver(Protocol):
    """
    Interface for identifier resolvers.

    A resolver is bound to exactly one identifier system and turns a value in
    that system into the record it denotes.
    """

    def resolve(self, identifier: Identifier) -> Optional[Any]:
        """
        Return the record denoted by the identifier.

        Parameters
        ----------
        identifier : Identifier
            Identifier whose system matches the system this resolver serves.

        Returns
        -------
        Any or None
            The record, or None when the value is not known to the system.
        """
        ...


@runtime_checkable
class Mapper(Protocol):
    """
    Interface for cross-system identifier mappers.

    A mapper is bound to one ordered (source, target) pair of systems.
    """

    def map(self, identifier: Identifier) -> Optional[Identifier]:
        """
        Return the corresponding identifier in the target system.

        Parameters
        ----------
        identifier : Identifier
            Identifier in the source system.

        Returns
        -------
        Identifier or None
            The mapped identifier, or None when no correspondence is known.
        """
        ...
