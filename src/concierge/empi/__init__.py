# src/concierge/empi/__init__.py
"""
NHS Wales Enterprise Master Patient Index (EMPI) adapter.
"""

from __future__ import annotations

from .authority import Authority, Endpoint
from .cache import PatientCache, cache_key
from .client import EMPIClient, lookup
from .models import Address, ContactPoint, Patient
from .resolver import EMPIMapper, EMPIResolver, install

__all__ = [
    "Address",
    "Authority",
    "ContactPoint",
    "EMPIClient",
    "EMPIMapper",
    "EMPIResolver",
    "Endpoint",
    "Patient",
    "PatientCache",
    "cache_key",
    "install",
    "lookup",
]
