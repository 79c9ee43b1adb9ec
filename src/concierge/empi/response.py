# src/concierge/empi/response.py
"""
EMPI query response (RSP^K22) XML -> canonical Patient.

Notes
-----
- Elements are matched by local name; namespaces are ignored.
- Fields repeatable in HL7 v2.5 PID (identifiers PID-3, names PID-5,
  addresses PID-11, phones PID-13/PID-14) are always read as lists so that
  repetitions are kept, in document order.
- The service answers a search without a match with an ordinary response.
  A record with neither surname nor given names is treated as "not found".
- Dates use the first 8 characters (YYYYMMDD) of an HL7 timestamp; anything
  unparsable, including all zeros, is an unknown date rather than an error.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from lxml import etree

from ..exceptions import MalformedResponseError
from ..identifiers.base import Identifier, Period
from .models import Address, ContactPoint, Patient

# Envelope/Body/<response>/RSP_K21; the query response group is optional.
RESPONSE_PATH = ("Body", "InvokePatientDemographicsQueryResponse", "RSP_K21")
QUERY_RESPONSE = "RSP_K21.QUERY_RESPONSE"

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


# ------------------------------------------------------------------------------
# generic document reader
# ------------------------------------------------------------------------------


def _local(tag: str) -> str:
    """Return the local (namespace-stripped) tag name."""
    return tag.split("}", 1)[1] if "}" in tag else tag


def children(elem: Optional[etree._Element], name: str) -> List[etree._Element]:
    """All direct children of elem with the given local name, in order."""
    if elem is None:
        return []
    return [c for c in elem if isinstance(c.tag, str) and _local(c.tag) == name]


def child(elem: Optional[etree._Element], name: str) -> Optional[etree._Element]:
    """The first direct child of elem with the given local name."""
    found = children(elem, name)
    return found[0] if found else None


def text_at(elem: Optional[etree._Element], path: str) -> str:
    """
    Text of the element reached by following a slash-separated path of local
    names from elem, taking the first match at each step. Missing elements
    yield an empty string.
    """
    for name in path.split("/"):
        elem = child(elem, name)
        if elem is None:
            return ""
    return (elem.text or "").strip()


def parse_date(text: str) -> Optional[date]:
    """
    Parse the YYYYMMDD prefix of an HL7 timestamp.

    Returns None for empty, short, non-numeric or impossible dates.
    """
    prefix = (text or "").strip()[:8]
    if len(prefix) != 8 or not prefix.isdigit():
        return None
    try:
        return datetime.strptime(prefix, "%Y%m%d").date()
    except ValueError:
        return None


# ------------------------------------------------------------------------------
# document structure
# ------------------------------------------------------------------------------


def _parse_document(body: bytes) -> etree._Element:
    try:
        root = etree.fromstring(body, _PARSER)
    except (etree.XMLSyntaxError, ValueError) as e:
        raise MalformedResponseError(f"EMPI response is not valid XML: {e}") from e
    if root is None or _local(root.tag) != "Envelope":
        raise MalformedResponseError("EMPI response is not a SOAP envelope")
    return root


def _query_response(root: etree._Element) -> Optional[etree._Element]:
    """
    Walk from the envelope to the RSP_K21 query response group.

    Raises MalformedResponseError if the envelope does not contain an RSP_K21
    message; returns None if the message carries no query response.
    """
    fault = child(child(root, "Body"), "Fault")
    if fault is not None:
        reason = text_at(fault, "faultstring") or "no fault string"
        raise MalformedResponseError(f"EMPI returned a SOAP fault: {reason}")

    elem: Optional[etree._Element] = root
    for name in RESPONSE_PATH:
        elem = child(elem, name)
        if elem is None:
            raise MalformedResponseError(f"EMPI response has no {name} element")
    return child(elem, QUERY_RESPONSE)


# ------------------------------------------------------------------------------
# field normalization
# ------------------------------------------------------------------------------


def _first_names(xpn: Optional[etree._Element]) -> str:
    given = f"{text_at(xpn, 'XPN.2')} {text_at(xpn, 'XPN.3')}"
    return " ".join(given.split())


def _identifiers(pid: etree._Element) -> List[Identifier]:
    out: List[Identifier] = []
    for cx in children(pid, "PID.3"):
        authority = text_at(cx, "CX.4/HD.1")
        value = text_at(cx, "CX.1")
        if authority and value:
            out.append(
                Identifier(
                    system=authority,
                    value=value,
                    use="official",
                    assigner=authority,
                )
            )
    return out


def _addresses(pid: etree._Element) -> List[Address]:
    out: List[Address] = []
    for xad in children(pid, "PID.11"):
        line = text_at(xad, "XAD.1/SAD.1")
        city = text_at(xad, "XAD.2")
        district = text_at(xad, "XAD.3")
        country = text_at(xad, "XAD.4")
        postal_code = text_at(xad, "XAD.5")
        start = parse_date(text_at(xad, "XAD.13"))
        end = parse_date(text_at(xad, "XAD.14"))
        out.append(
            Address(
                text="\n".join(
                    p for p in (line, city, district, postal_code, country) if p
                ),
                line=line,
                city=city,
                district=district,
                country=country,
                postal_code=postal_code,
                period=Period(start, end) if start or end else None,
            )
        )
    return out


def _contact_points(pid: etree._Element) -> List[ContactPoint]:
    out: List[ContactPoint] = []
    for field, use in (("PID.13", "home"), ("PID.14", "work")):
        for xtn in children(pid, field):
            number = text_at(xtn, "XTN.1")
            if number:
                out.append(
                    ContactPoint(
                        system="phone",
                        value=number,
                        use=use,
                        description=xtn.get("LongName"),
                    )
                )
            email = text_at(xtn, "XTN.4")
            if email:
                out.append(ContactPoint(system="email", value=email, use=use))
    return out


def to_patient(query_response: Optional[etree._Element]) -> Optional[Patient]:
    """
    Normalize an RSP_K21.QUERY_RESPONSE element into a Patient.

    Returns None when the response names nobody.
    """
    pid = child(query_response, "PID")
    if pid is None:
        return None
    xpn = child(pid, "PID.5")
    last_name = text_at(xpn, "XPN.1/FN.1")
    first_names = _first_names(xpn)
    if not last_name and not first_names:
        return None

    pd1 = child(query_response, "PD1")
    return Patient(
        last_name=last_name,
        first_names=first_names,
        title=text_at(xpn, "XPN.5"),
        gender=text_at(pid, "PID.8"),
        birth_date=parse_date(text_at(pid, "PID.7/TS.1")),
        death_date=parse_date(text_at(pid, "PID.29/TS.1")),
        surgery=text_at(pd1, "PD1.3/XON.3"),
        general_practitioner=text_at(pd1, "PD1.4/XCN.1"),
        identifiers=_identifiers(pid),
        addresses=_addresses(pid),
        telecom=_contact_points(pid),
    )


def parse_response(body: bytes) -> Optional[Patient]:
    """
    Parse an EMPI response document.

    Parameters
    ----------
    body : bytes
        Raw HTTP response body.

    Returns
    -------
    Patient or None
        The patient, or None if the EMPI found no match.

    Raises
    ------
    MalformedResponseError
        If the body is not XML, is a SOAP fault, or lacks the RSP_K21 message.
    """
    return to_patient(_query_response(_parse_document(body)))
