"""
Tests for concierge.empi.request (query document builder).
"""

from datetime import datetime

import pytest
from lxml import etree

from concierge.empi.authority import Authority, Endpoint
from concierge.empi.request import HL7_NS, MPI_NS, SOAP_NS, build_request

NS = {"s": SOAP_NS, "m": MPI_NS, "h": HL7_NS}
NOW = datetime(2020, 3, 15, 9, 30, 5)


def _build(value="7253698428", authority=Authority.NHS, processing_id="T", **kw):
    kw.setdefault("now", NOW)
    kw.setdefault("message_id", "msg-1")
    return build_request(value, authority, processing_id, **kw)


def _doc(payload):
    return etree.fromstring(payload)


def _xp(doc, path):
    return doc.xpath(path, namespaces=NS)


def test_envelope_structure():
    doc = _doc(_build())
    assert doc.tag == f"{{{SOAP_NS}}}Envelope"
    assert _xp(doc, "/s:Envelope/s:Header")
    assert _xp(doc, "/s:Envelope/s:Body/m:InvokePatientDemographicsQuery/h:QBP_Q21")


def test_payload_has_xml_declaration():
    assert _build().startswith(b"<?xml version=")


def test_query_parameters_in_order():
    doc = _doc(_build(value="X123456", authority=Authority.CAV))
    names = _xp(doc, "//h:QPD/h:QPD.3/h:QIP.1/text()")
    values = _xp(doc, "//h:QPD/h:QPD.3/h:QIP.2/text()")
    assert names == ["@PID.3.1", "@PID.3.4", "@PID.3.5"]
    assert values == ["X123456", "140", "PI"]


def test_nhs_number_type_code():
    doc = _doc(_build())
    assert _xp(doc, "//h:QPD/h:QPD.3/h:QIP.2/text()") == ["7253698428", "NHS", "NH"]


def test_header_fields():
    doc = _doc(_build(sender="999", receiver="888"))
    msh = _xp(doc, "//h:MSH")[0]

    def text(path):
        return _xp(msh, f"{path}/text()")

    assert text("h:MSH.3/h:HD.1") == ["999"]
    assert text("h:MSH.4/h:HD.1") == ["999"]
    assert text("h:MSH.5/h:HD.1") == ["888"]
    assert text("h:MSH.6/h:HD.1") == ["888"]
    assert text("h:MSH.7/h:TS.1") == ["20200315093005"]
    assert text("h:MSH.9/h:MSG.1") == ["QBP"]
    assert text("h:MSH.9/h:MSG.2") == ["Q22"]
    assert text("h:MSH.10") == ["msg-1"]
    assert text("h:MSH.12/h:VID.1") == ["2.5"]


def test_default_sender_and_receiver():
    doc = _doc(_build())
    assert _xp(doc, "//h:MSH/h:MSH.3/h:HD.1/text()") == ["221"]
    assert _xp(doc, "//h:MSH/h:MSH.5/h:HD.1/text()") == ["100"]


def test_fresh_message_id_per_request():
    a = _doc(build_request("1", Authority.NHS, "T"))
    b = _doc(build_request("1", Authority.NHS, "T"))
    assert _xp(a, "//h:MSH.10/text()") != _xp(b, "//h:MSH.10/text()")


@pytest.mark.parametrize("endpoint", list(Endpoint))
def test_processing_id_follows_environment(endpoint):
    doc = _doc(_build(processing_id=endpoint.processing_id))
    assert _xp(doc, "//h:MSH.11/h:PT.1/text()") == [endpoint.processing_id]


def test_environments_differ_only_in_processing_id():
    production = _build(processing_id=Endpoint.PRODUCTION.processing_id)
    testing = _build(processing_id=Endpoint.TESTING.processing_id)
    assert production.replace(b"<PT.1>P</PT.1>", b"<PT.1>U</PT.1>") == testing


def test_value_is_escaped():
    doc = _doc(_build(value="<a&b>"))
    assert _xp(doc, "//h:QPD.3/h:QIP.2/text()")[0] == "<a&b>"
