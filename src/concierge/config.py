# src/concierge/config.py
"""
Configuration utilities for concierge.

Provides a dataclass-based configuration object and a loader that reads
YAML configuration files when present. Only the options below are read;
unknown keys are ignored so that a shared config file can carry settings for
other tools.

Example
-------
    endpoint: testing
    cache_minutes: 10
    timeout_seconds: 5
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Attributes
    ----------
    endpoint : str
        EMPI environment name: production, testing or development (any prefix
        of P/T/D is accepted).
    endpoint_url : str or None
        Overrides the default URL of the chosen environment.
    cache_minutes : int
        Lifetime of memoized EMPI lookups; 0 disables caching.
    timeout_seconds : float
        Deadline for a single EMPI request.
    fake : bool
        Answer EMPI lookups from an in-process fake service.
    sender : str
        Sending application/facility code used in request headers.
    receiver : str
        Receiving application/facility code used in request headers.
    """

    endpoint: str = "development"
    endpoint_url: Optional[str] = None
    cache_minutes: int = 5
    timeout_seconds: float = 2
    fake: bool = False
    sender: str = "221"
    receiver: str = "100"


def _number(
    data: Mapping[str, Any],
    key: str,
    default: Any,
    path: Path,
    *,
    integer: bool = False,
    positive: bool = False,
) -> Any:
    value = data.get(key, default)
    kinds = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise TypeError(
            f"Config option {key!r} must be "
            f"{'an integer' if integer else 'a number'}, "
            f"got {type(value).__name__}. Config file: {path}"
        )
    if value < 0 or (positive and value == 0):
        raise ValueError(
            f"Config option {key!r} must be "
            f"{'positive' if positive else 'non-negative'}, got {value}. "
            f"Config file: {path}"
        )
    return value


def load_config(path: Optional[Path]) -> AppConfig:
    """
    Load application configuration from a YAML file.

    Parameters
    ----------
    path : Path or None
        Path to a YAML config file. If None, defaults are used.

    Returns
    -------
    AppConfig
        The loaded configuration.

    Raises
    ------
    TypeError
        If the YAML file does not parse to a mapping at the top level, a
        numeric option has the wrong type, or cache_minutes is not a whole
        number.
    ValueError
        If a numeric option is negative, or timeout_seconds is zero.
    yaml.YAMLError
        If the file is not valid YAML.
    """
    if path is None:
        return AppConfig()

    data: Any = yaml.safe_load(path.read_text())

    if data is None:
        return AppConfig()

    if not isinstance(data, Mapping):
        raise TypeError(
            f"Config file must contain a mapping at top level, "
            f"got {type(data).__name__}. "
            f"Config file: {path}"
        )

    defaults = AppConfig()
    url = data.get("endpoint_url")
    return AppConfig(
        endpoint=str(data.get("endpoint", defaults.endpoint)),
        endpoint_url=str(url) if url else None,
        cache_minutes=_number(
            data, "cache_minutes", defaults.cache_minutes, path, integer=True
        ),
        timeout_seconds=_number(
            data, "timeout_seconds", defaults.timeout_seconds, path, positive=True
        ),
        fake=bool(data.get("fake", defaults.fake)),
        sender=str(data.get("sender", defaults.sender)),
        receiver=str(data.get("receiver", defaults.receiver)),
    )
