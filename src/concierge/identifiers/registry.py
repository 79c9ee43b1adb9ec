# src/concierge/identifiers/registry.py
"""
Registry of identifier systems.

Provides:
- registration of identifier systems by URI, with a display name,
- binding of one resolver per system and one mapper per ordered system pair,
- dispatch of resolve and map requests to the bound capability.

A registry is populated once at startup and treated as read-only afterwards;
it is not synchronized for registration while requests are being served.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import UnknownSystemError
from .base import Identifier, Mapper, Resolver

LOG = logging.getLogger(__name__)


class SystemRegistry:
    """
    Table of identifier systems and the capabilities bound to them.

    Example
    -------
        registry = SystemRegistry()
        registry.register("SDS Job Roles", SDS_JOB_ROLE_NAME)
        registry.register_resolver(SDS_JOB_ROLE_NAME, RoleResolver(table))
        role = registry.resolve(Identifier(SDS_JOB_ROLE_NAME, "R0050"))
    """

    def __init__(self) -> None:
        self._names: Dict[str, str] = {}
        self._resolvers: Dict[str, Resolver] = {}
        self._mappers: Dict[Tuple[str, str], Mapper] = {}

    # --------------------------------------------------------------------------
    # registration
    # --------------------------------------------------------------------------

    def register(self, name: str, uri: str) -> None:
        """
        Record a display name for a system URI.

        Re-registering a URI replaces its name.
        """
        if not uri:
            raise ValueError("system uri must be a non-empty string")
        self._names[uri] = name

    def register_resolver(self, uri: str, resolver: Resolver) -> None:
        """
        Bind a resolver to a system URI.

        Raises
        ------
        TypeError
            If the object does not implement the Resolver protocol.
        ValueError
            If a resolver is already bound to the URI.
        """
        if not callable(getattr(resolver, "resolve", None)):
            raise TypeError(
                f"{type(resolver).__name__} does not implement Resolver protocol"
            )
        if uri in self._resolvers:
            raise ValueError(f"Resolver already registered for system {uri!r}")
        self._resolvers[uri] = resolver
        LOG.debug("registered resolver %s for %s", type(resolver).__name__, uri)

    def register_mapper(self, source: str, target: str, mapper: Mapper) -> None:
        """
        Bind a mapper to the ordered pair (source, target).

        The reverse direction is not implied and must be registered separately.

        Raises
        ------
        TypeError
            If the object does not implement the Mapper protocol.
        ValueError
            If a mapper is already bound to the pair.
        """
        if not callable(getattr(mapper, "map", None)):
            raise TypeError(
                f"{type(mapper).__name__} does not implement Mapper protocol"
            )
        key = (source, target)
        if key in self._mappers:
            raise ValueError(f"Mapper already registered for {source!r} -> {target!r}")
        self._mappers[key] = mapper
        LOG.debug(
            "registered mapper %s for %s -> %s", type(mapper).__name__, source, target
        )

    # --------------------------------------------------------------------------
    # introspection
    # --------------------------------------------------------------------------

    def name(self, uri: str) -> Optional[str]:
        """Return the display name of a system, or None if unregistered."""
        return self._names.get(uri)

    def systems(self) -> List[Tuple[str, str]]:
        """List registered (uri, name) pairs sorted by URI."""
        return sorted(self._names.items())

    def mappings(self) -> List[Tuple[str, str]]:
        """List (source, target) pairs that have a mapper, sorted."""
        return sorted(self._mappers)

    # --------------------------------------------------------------------------
    # dispatch
    # --------------------------------------------------------------------------

    def resolve(self, identifier: Identifier) -> Optional[Any]:
        """
        Resolve an identifier using the resolver bound to its system.

        Parameters
        ----------
        identifier : Identifier
            Identifier to resolve.

        Returns
        -------
        Any or None
            The record, or None if the value is not known to the system.

        Raises
        ------
        UnknownSystemError
            If no resolver is bound to identifier.system.
        """
        resolver = self._resolvers.get(identifier.system)
        if resolver is None:
            raise UnknownSystemError(
                f"No resolver registered for system {identifier.system!r}"
            )
        return resolver.resolve(identifier)

    def map(self, identifier: Identifier, target: str) -> Optional[Identifier]:
        """
        Map an identifier into the target system.

        Only the mapper bound to (identifier.system, target) is consulted;
        mappers are never chained.

        Returns
        -------
        Identifier or None
            The mapped identifier, or None if no correspondence is known.

        Raises
        ------
        UnknownSystemError
            If no mapper is bound to the pair.
        """
        mapper = self._mappers.get((identifier.system, target))
        if mapper is None:
            raise UnknownSystemError(
                f"No mapper registered for {identifier.system!r} -> {target!r}"
            )
        return mapper.map(identifier)
