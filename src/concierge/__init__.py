# src/concierge/__init__.py
"""
concierge: identifier resolution and cross-mapping services.

This package provides:
- A system registry binding identifier-system URIs to resolvers and mappers.
- A static-table plugin for the NHS SDS job role code system.
- An adapter for the NHS Wales EMPI patient demographics query service.
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    "__version__",
]
