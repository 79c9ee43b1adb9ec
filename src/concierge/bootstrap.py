# src/concierge/bootstrap.py
"""
Startup wiring: build a registry with every supported identifier system.
"""

from __future__ import annotations

from typing import Optional

from . import empi, sds
from .config import AppConfig
from .empi.client import EMPIClient
from .identifiers.registry import SystemRegistry


def install_default_systems(
    registry: SystemRegistry,
    config: AppConfig,
    client: Optional[EMPIClient] = None,
) -> SystemRegistry:
    """
    Register the SDS and EMPI systems on registry and return it.

    Parameters
    ----------
    registry : SystemRegistry
        A registry that has not served any requests yet.
    config : AppConfig
        Used to build the EMPI client when none is given.
    client : EMPIClient or None
        Pre-built EMPI client, e.g. one with a mock transport.
    """
    sds.install(registry)
    empi.install(registry, client or EMPIClient.from_config(config))
    return registry


def build_registry(config: AppConfig) -> SystemRegistry:
    """Return a new registry populated with the default systems."""
    return install_default_systems(SystemRegistry(), config)
