# src/concierge/empi/fake.py
"""
In-process stand-in for the EMPI service.

fake_transport() answers every query with a well-formed response describing
the same dummy patient, carrying the identifier that was asked for. It lets
the rest of the stack (request building, HTTP, parsing, caching) run without
access to the NHS Wales network.
"""

from __future__ import annotations

from xml.sax.saxutils import escape

import httpx
from lxml import etree

from .response import child, children, text_at

FAKE_RESPONSE = """\
<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <InvokePatientDemographicsQueryResponse xmlns="http://apps.wales.nhs.uk/mpi/">
      <RSP_K21 xmlns="urn:hl7-org:v2xml">
        <RSP_K21.QUERY_RESPONSE>
          <PID>
            <PID.3><CX.1>{value}</CX.1><CX.4><HD.1>{authority}</HD.1></CX.4></PID.3>
            <PID.3><CX.1>M1147907</CX.1><CX.4><HD.1>103</HD.1></CX.4></PID.3>
            <PID.5>
              <XPN.1><FN.1>DUMMY</FN.1></XPN.1>
              <XPN.2>ALBERT</XPN.2>
              <XPN.5>DR</XPN.5>
            </PID.5>
            <PID.7><TS.1>19600101000000</TS.1></PID.7>
            <PID.8>M</PID.8>
            <PID.11>
              <XAD.1><SAD.1>59 Robins Hill</SAD.1></XAD.1>
              <XAD.2>Brackla</XAD.2>
              <XAD.3>BRIDGEND</XAD.3>
              <XAD.4>WALES</XAD.4>
              <XAD.5>CF31 2PJ</XAD.5>
            </PID.11>
            <PID.14 LongName="Work number">
              <XTN.1>02920747747</XTN.1>
              <XTN.4>test@test.com</XTN.4>
            </PID.14>
          </PID>
          <PD1>
            <PD1.3><XON.3>W95010</XON.3></PD1.3>
            <PD1.4><XCN.1>G9342400</XCN.1></PD1.4>
          </PD1>
        </RSP_K21.QUERY_RESPONSE>
      </RSP_K21>
    </InvokePatientDemographicsQueryResponse>
  </soap:Body>
</soap:Envelope>
"""


def _query_parameters(content: bytes) -> dict:
    """Return the QPD-3 query parameters of a request, keyed by field name."""
    root = etree.fromstring(content)
    query = child(child(child(root, "Body"), "InvokePatientDemographicsQuery"), "QBP_Q21")
    return {
        text_at(qpd3, "QIP.1"): text_at(qpd3, "QIP.2")
        for qpd3 in children(child(query, "QPD"), "QPD.3")
    }


def fake_handler(request: httpx.Request) -> httpx.Response:
    params = _query_parameters(request.read())
    body = FAKE_RESPONSE.format(
        value=escape(params.get("@PID.3.1", "")),
        authority=escape(params.get("@PID.3.4", "")),
    )
    return httpx.Response(
        200,
        content=body.encode("utf-8"),
        headers={"Content-Type": "text/xml; charset=utf-8"},
    )


def fake_transport() -> httpx.MockTransport:
    """Transport that serves fake_handler instead of the network."""
    return httpx.MockTransport(fake_handler)
