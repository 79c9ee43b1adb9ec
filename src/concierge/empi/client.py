# src/concierge/empi/client.py
"""
HTTP client for the NHS Wales EMPI patient demographics query service.

Provides:
- lookup: one bounded request against an explicit endpoint URL,
- EMPIClient: lookups against one configured environment, memoized through
  an optional PatientCache.

Failures are reported, never retried here: RemoteTimeoutError when the
deadline passes, RemoteTransportError for any other transport failure or a
non-2xx status, MalformedResponseError for an unreadable 2xx body.

The timeout is one deadline for the whole call. httpx timeouts apply per
phase, so the body is streamed and the deadline checked after every chunk;
the per-phase timeout is the time left when the request is sent.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Union

import httpx

from ..config import AppConfig
from ..exceptions import RemoteTimeoutError, RemoteTransportError
from .authority import Authority, Endpoint
from .cache import PatientCache, cache_key
from .fake import fake_transport
from .models import Patient
from .request import (
    CONTENT_TYPE,
    DEFAULT_RECEIVER,
    DEFAULT_SENDER,
    SOAP_ACTION,
    build_request,
)
from .response import parse_response

LOG = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0


def _authority(authority: Union[str, Authority]) -> Authority:
    if isinstance(authority, Authority):
        return authority
    return Authority.lookup(authority)


def _remaining(deadline: float, key: str, timeout: float) -> float:
    """Seconds left before deadline; RemoteTimeoutError once it has passed."""
    left = deadline - time.monotonic()
    if left <= 0:
        raise RemoteTimeoutError(f"EMPI request for {key} timed out after {timeout}s")
    return left


def lookup(
    endpoint_url: str,
    processing_id: str,
    authority: Union[str, Authority],
    value: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
    sender: str = DEFAULT_SENDER,
    receiver: str = DEFAULT_RECEIVER,
) -> Optional[Patient]:
    """
    Search the EMPI for a patient by identifier.

    Parameters
    ----------
    endpoint_url : str
        URL of the query web service.
    processing_id : str
        One-letter processing id of the environment behind endpoint_url.
    authority : str or Authority
        Code of the authority that issued value, e.g. "NHS" or "140".
    value : str
        The identifier.
    timeout : float
        Deadline in seconds for the whole call, from connecting to reading
        the last byte of the response.
    transport : httpx.BaseTransport or None
        Alternative transport, e.g. httpx.MockTransport.

    Returns
    -------
    Patient or None
        The patient, or None if the EMPI has no match.

    Raises
    ------
    InvalidAuthorityError
        If the authority code is unsupported; raised before any I/O.
    RemoteTimeoutError
        If the request does not complete within the deadline.
    RemoteTransportError
        If the request fails otherwise or the status is not 2xx.
    MalformedResponseError
        If a 2xx response cannot be read as an EMPI response.
    """
    auth = _authority(authority)
    deadline = time.monotonic() + timeout
    payload = build_request(
        value, auth, processing_id, sender=sender, receiver=receiver
    )
    LOG.debug("EMPI request %s/%s to %s", auth.code, value, endpoint_url)

    key = f"{auth.code}/{value}"
    start = time.monotonic()
    try:
        with httpx.Client(transport=transport, timeout=timeout) as client:
            with client.stream(
                "POST",
                endpoint_url,
                content=payload,
                headers={"Content-Type": CONTENT_TYPE, "SOAPAction": SOAP_ACTION},
                timeout=_remaining(deadline, key, timeout),
            ) as response:
                if not response.is_success:
                    raise RemoteTransportError(
                        f"EMPI returned HTTP {response.status_code} for {key}"
                    )
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    _remaining(deadline, key, timeout)
    except httpx.TimeoutException as e:
        raise RemoteTimeoutError(
            f"EMPI request for {key} timed out after {timeout}s"
        ) from e
    except httpx.HTTPError as e:
        raise RemoteTransportError(
            f"EMPI request for {key} failed: {e}"
        ) from e
    elapsed = time.monotonic() - start

    LOG.info(
        "EMPI response for %s/%s: HTTP %d in %.3fs",
        auth.code,
        value,
        response.status_code,
        elapsed,
    )
    return parse_response(b"".join(chunks))


class EMPIClient:
    """
    EMPI lookups against one environment.

    Example
    -------
        client = EMPIClient(Endpoint.TESTING, cache=PatientCache(300))
        patient = client.lookup("NHS", "7253698428")
    """

    def __init__(
        self,
        endpoint: Endpoint = Endpoint.DEVELOPMENT,
        *,
        url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        cache: Optional[PatientCache] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sender: str = DEFAULT_SENDER,
        receiver: str = DEFAULT_RECEIVER,
    ) -> None:
        self.endpoint = endpoint
        self.url = url or endpoint.url
        self.timeout = timeout
        self.cache = cache
        self.transport = transport
        self.sender = sender
        self.receiver = receiver

    @classmethod
    def from_config(cls, config: AppConfig) -> "EMPIClient":
        """
        Build a client from application configuration.

        Raises
        ------
        ValueError
            If config.endpoint does not name a known environment.
        """
        cache = None
        if config.cache_minutes > 0:
            cache = PatientCache(config.cache_minutes * 60)
        return cls(
            Endpoint.lookup(config.endpoint),
            url=config.endpoint_url,
            timeout=config.timeout_seconds,
            cache=cache,
            transport=fake_transport() if config.fake else None,
            sender=config.sender,
            receiver=config.receiver,
        )

    def lookup(self, authority: Union[str, Authority], value: str) -> Optional[Patient]:
        """
        Search for a patient, serving repeat requests from the cache.

        See the module-level lookup() for errors raised.
        """
        auth = _authority(authority)
        key = cache_key(auth.code, value)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                LOG.debug("serving %s from cache", key)
                return cached

        patient = lookup(
            self.url,
            self.endpoint.processing_id,
            auth,
            value,
            timeout=self.timeout,
            transport=self.transport,
            sender=self.sender,
            receiver=self.receiver,
        )
        if patient is None:
            LOG.info("patient %s not found", key)
        elif self.cache is not None:
            self.cache.set(key, patient)
        return patient
