# src/concierge/sds/__init__.py
"""
NHS Spine Directory Service (SDS) code systems.
"""

from __future__ import annotations

from .roles import Role, RoleResolver, RoleTable, install

__all__ = ["Role", "RoleResolver", "RoleTable", "install"]
