# src/concierge/empi/request.py
"""
EMPI patient demographics query (QBP^Q22) -> XML request document.

The query is an IHE PDQ identifier search wrapped in a SOAP envelope, using
the HL7 v2.5 XML encoding: each segment, field and component is an element
named after its position (e.g. MSH.3 containing HD.1).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from lxml import etree

from .authority import Authority

SOAP_NS = "http://schemas.xmlsoap.org/soap/envelope/"
MPI_NS = "http://apps.wales.nhs.uk/mpi/"
HL7_NS = "urn:hl7-org:v2xml"

SOAP_ACTION = "http://apps.wales.nhs.uk/mpi/InvokePatientDemographicsQuery"
CONTENT_TYPE = 'text/xml; charset="utf-8"'

# PatientCare
DEFAULT_SENDER = "221"
# NHS Wales EMPI
DEFAULT_RECEIVER = "100"

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_NSMAP = {"soapenv": SOAP_NS, "mpi": MPI_NS, None: HL7_NS}


def _el(parent: etree._Element, tag: str, text: Optional[str] = None) -> etree._Element:
    """Append an HL7-namespaced child, optionally with text."""
    child = etree.SubElement(parent, f"{{{HL7_NS}}}{tag}")
    if text is not None:
        child.text = text
    return child


def _composite(parent: etree._Element, tag: str, component: str, text: str) -> None:
    """Append a field holding a single component, e.g. <MSH.3><HD.1>x</HD.1>."""
    _el(_el(parent, tag), component, text)


def build_request(
    value: str,
    authority: Authority,
    processing_id: str,
    *,
    sender: str = DEFAULT_SENDER,
    receiver: str = DEFAULT_RECEIVER,
    now: Optional[datetime] = None,
    message_id: Optional[str] = None,
) -> bytes:
    """
    Build the XML query document for an identifier search.

    Parameters
    ----------
    value : str
        Identifier to search for (PID-3.1).
    authority : Authority
        Authority that issued the identifier (PID-3.4, type in PID-3.5).
    processing_id : str
        One-letter MSH-11 processing id of the target environment.
    sender, receiver : str
        Application/facility codes for MSH-3/4 and MSH-5/6.
    now : datetime or None
        Message timestamp; defaults to the current UTC time.
    message_id : str or None
        MSH-10 message control id; defaults to a fresh UUID.

    Returns
    -------
    bytes
        UTF-8 encoded XML document.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if message_id is None:
        message_id = str(uuid.uuid4())

    envelope = etree.Element(f"{{{SOAP_NS}}}Envelope", nsmap=_NSMAP)
    etree.SubElement(envelope, f"{{{SOAP_NS}}}Header")
    body = etree.SubElement(envelope, f"{{{SOAP_NS}}}Body")
    invoke = etree.SubElement(body, f"{{{MPI_NS}}}InvokePatientDemographicsQuery")
    qbp = _el(invoke, "QBP_Q21")

    msh = _el(qbp, "MSH")
    _el(msh, "MSH.1", "|")
    _el(msh, "MSH.2", "^~\\&")
    _composite(msh, "MSH.3", "HD.1", sender)
    _composite(msh, "MSH.4", "HD.1", sender)
    _composite(msh, "MSH.5", "HD.1", receiver)
    _composite(msh, "MSH.6", "HD.1", receiver)
    _composite(msh, "MSH.7", "TS.1", now.strftime(TIMESTAMP_FORMAT))
    msh9 = _el(msh, "MSH.9")
    _el(msh9, "MSG.1", "QBP")
    _el(msh9, "MSG.2", "Q22")
    _el(msh9, "MSG.3", "QBP_Q21")
    _el(msh, "MSH.10", message_id)
    _composite(msh, "MSH.11", "PT.1", processing_id)
    _composite(msh, "MSH.12", "VID.1", "2.5")
    _el(msh, "MSH.17", "GBR")

    qpd = _el(qbp, "QPD")
    _composite(qpd, "QPD.1", "CE.1", "IHE PDQ Query")
    _el(qpd, "QPD.2", "PatientQuery")
    for field, text in (
        ("@PID.3.1", value),
        ("@PID.3.4", authority.code),
        ("@PID.3.5", authority.type_code),
    ):
        qpd3 = _el(qpd, "QPD.3")
        _el(qpd3, "QIP.1", field)
        _el(qpd3, "QIP.2", text)

    rcp = _el(qbp, "RCP")
    _el(rcp, "RCP.1", "I")
    _composite(rcp, "RCP.2", "CQ.1", "50")

    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")
