# src/concierge/identifiers/__init__.py
"""
Identifier systems: value types, well-known URIs and the system registry.
"""

from __future__ import annotations

from .base import Identifier, Mapper, Period, Resolver
from .registry import SystemRegistry

__all__ = ["Identifier", "Mapper", "Period", "Resolver", "SystemRegistry"]
