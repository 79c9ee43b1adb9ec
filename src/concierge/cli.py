# src/concierge/cli.py
"""
Command-line interface for concierge.

Subcommands
-----------
systems
    List registered identifier systems and the mappings between them.

resolve
    Resolve a value within an identifier system and print the record as JSON.

map
    Map a value from one identifier system to another and print the result.

empi
    Search the EMPI by authority code and identifier; print the patient as
    JSON (canonical form, or a FHIR Patient with --fhir).

Systems may be given by URI or by one of the short names listed by
`concierge systems` (sct, sds, nhs, empi).

Exit codes
----------
0  success
1  handled, expected error (ConciergeError, not found, or KeyboardInterrupt)
2  CLI usage or configuration error
"""

from __future__ import annotations

import argparse
import dataclasses
import datetime as _dt
import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import yaml

from . import __version__
from .bootstrap import build_registry
from .config import AppConfig, load_config
from .empi.client import EMPIClient
from .exceptions import ConciergeError
from .identifiers.base import Identifier
from .identifiers.registry import SystemRegistry
from .identifiers.uris import EMPI_NUMBER, NHS_NUMBER, SDS_JOB_ROLE_NAME, SNOMEDCT
from .logging_utils import configure_logging

# ------------------------------------------------------------------------------
# globals
# ------------------------------------------------------------------------------

LOG = logging.getLogger("concierge")

EXIT_OK = 0
EXIT_ERR = 1
EXIT_CLI = 2

SYSTEM_ALIASES = {
    "sct": SNOMEDCT,
    "sds": SDS_JOB_ROLE_NAME,
    "nhs": NHS_NUMBER,
    "empi": EMPI_NUMBER,
}

# ------------------------------------------------------------------------------
# Parser construction
# ------------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argparse parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with subcommands: systems, resolve, map, empi.
    """
    parser = argparse.ArgumentParser(
        prog="concierge",
        description="Resolve and cross-map healthcare identifiers.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML config file (overrides defaults).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging, including HTTP client internals.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"concierge {__version__}",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output.",
    )

    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("systems", help="List identifier systems and mappings.")

    s_resolve = sub.add_parser("resolve", help="Resolve an identifier.")
    s_resolve.add_argument("system", help="System URI or short name.")
    s_resolve.add_argument("value", help="Identifier value.")

    s_map = sub.add_parser("map", help="Map an identifier to another system.")
    s_map.add_argument("system", help="Source system URI or short name.")
    s_map.add_argument("value", help="Identifier value.")
    s_map.add_argument("target", help="Target system URI or short name.")

    s_empi = sub.add_parser("empi", help="Search the EMPI by identifier.")
    s_empi.add_argument("authority", help='Authority code, e.g. "NHS" or "140".')
    s_empi.add_argument("value", help="Identifier value.")
    s_empi.add_argument(
        "--endpoint",
        default=None,
        help="(P)roduction, (T)esting or (D)evelopment; overrides config.",
    )
    s_empi.add_argument(
        "--fake",
        action="store_true",
        help="Answer from an in-process fake EMPI service.",
    )
    s_empi.add_argument(
        "--fhir",
        action="store_true",
        help="Print a FHIR Patient resource instead of the canonical record.",
    )

    return parser


# ------------------------------------------------------------------------------
# Output helpers
# ------------------------------------------------------------------------------


def _to_jsonable(obj: Any) -> Any:
    """Normalize records (dataclasses, dates, containers) for json.dumps."""
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (_dt.date, _dt.datetime)):
        return obj.isoformat()
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: _to_jsonable(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_to_jsonable(v) for v in obj]
    return str(obj)


def _print_json(obj: Any, pretty: bool) -> None:
    indent = 2 if pretty else None
    mdj = getattr(obj, "model_dump_json", None)
    if callable(mdj):
        print(mdj(indent=indent))
        return
    print(json.dumps(_to_jsonable(obj), indent=indent))


def _system(name: str) -> str:
    return SYSTEM_ALIASES.get(name.lower(), name)


def _registry(cfg: AppConfig) -> SystemRegistry:
    try:
        return build_registry(cfg)
    except ValueError as e:
        raise ConciergeError(str(e)) from e


def _warn_proxies() -> None:
    """Proxies are a common cause of connection failures inside NHS networks."""
    for var in ("http_proxy", "https_proxy"):
        value = os.environ.get(var)
        if value:
            LOG.warning("%s is set to %s", var, value)


# ------------------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------------------


def _cmd_systems(cfg: AppConfig) -> int:
    registry = _registry(cfg)
    aliases = {uri: alias for alias, uri in SYSTEM_ALIASES.items()}
    print("Identifier systems:")
    for uri, name in registry.systems():
        alias = aliases.get(uri, "")
        print(f"    {alias:<5} {name}: {uri}")
    print("Mappings:")
    for source, target in registry.mappings():
        print(f"    {registry.name(source)} -> {registry.name(target)}")
    return EXIT_OK


def _cmd_resolve(cfg: AppConfig, system: str, value: str, pretty: bool) -> int:
    registry = _registry(cfg)
    record = registry.resolve(Identifier(system=_system(system), value=value))
    if record is None:
        LOG.warning("Not found: %s|%s", system, value)
        return EXIT_ERR
    _print_json(record, pretty)
    return EXIT_OK


def _cmd_map(
    cfg: AppConfig, system: str, value: str, target: str, pretty: bool
) -> int:
    registry = _registry(cfg)
    mapped = registry.map(Identifier(system=_system(system), value=value), _system(target))
    if mapped is None:
        LOG.warning("No mapping for %s|%s to %s", system, value, target)
        return EXIT_ERR
    _print_json(mapped, pretty)
    return EXIT_OK


def _cmd_empi(
    cfg: AppConfig,
    authority: str,
    value: str,
    endpoint: Optional[str],
    fake: bool,
    fhir: bool,
    pretty: bool,
) -> int:
    if endpoint:
        cfg = replace(cfg, endpoint=endpoint)
    if fake:
        cfg = replace(cfg, fake=True)
    if not cfg.fake:
        _warn_proxies()
    try:
        client = EMPIClient.from_config(cfg)
    except ValueError as e:
        raise ConciergeError(str(e)) from e

    patient = client.lookup(authority, value)
    if patient is None:
        LOG.warning("Not found: %s/%s", authority, value)
        return EXIT_ERR
    _print_json(patient.to_fhir() if fhir else patient, pretty)
    return EXIT_OK


# ------------------------------------------------------------------------------
# Entrypoint
# ------------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """
    CLI entrypoint.

    Parameters
    ----------
    argv : list[str] or None, default None
        Argument list for testing; None uses sys.argv[1:].

    Returns
    -------
    int
        Process exit code (EXIT_OK, EXIT_ERR, or EXIT_CLI).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    try:
        cfg = load_config(args.config)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        LOG.error("Invalid configuration: %s", e)
        return EXIT_CLI

    try:
        if args.cmd == "systems":
            return _cmd_systems(cfg)
        if args.cmd == "resolve":
            return _cmd_resolve(cfg, args.system, args.value, args.pretty)
        if args.cmd == "map":
            return _cmd_map(cfg, args.system, args.value, args.target, args.pretty)
        if args.cmd == "empi":
            return _cmd_empi(
                cfg,
                authority=args.authority,
                value=args.value,
                endpoint=args.endpoint,
                fake=bool(args.fake),
                fhir=bool(args.fhir),
                pretty=bool(args.pretty),
            )
        parser.error("Unknown command")
        return EXIT_CLI

    except ConciergeError as e:
        LOG.error("%s", e)
        return EXIT_ERR
    except KeyboardInterrupt:
        LOG.error("Interrupted")
        return EXIT_ERR


if __name__ == "__main__":
    raise SystemExit(main())
