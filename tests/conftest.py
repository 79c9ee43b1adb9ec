# tests/conftest.py
"""
Shared fixtures: EMPI response documents and counting mock transports.
"""

import logging
import warnings

import httpx
import pytest

from concierge.identifiers.registry import SystemRegistry

RESPONSE_TEMPLATE = """\
<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <soap:Body>
    <InvokePatientDemographicsQueryResponse xmlns="http://apps.wales.nhs.uk/mpi/">
      <RSP_K21 xmlns="urn:hl7-org:v2xml">
        <MSH>
          <MSH.1>|</MSH.1>
          <MSH.10>0c3c5a0e-7d3c-4b8e-9d0e-4b4c7f1a2b3c</MSH.10>
        </MSH>
        <MSA><MSA.1>AA</MSA.1></MSA>
        {query_response}
      </RSP_K21>
    </InvokePatientDemographicsQueryResponse>
  </soap:Body>
</soap:Envelope>
"""


def pytest_configure(config):
    # Silences Conda warnings during test runs without requiring user config.
    warnings.filterwarnings("ignore", category=FutureWarning, module=r"conda\..*")
    logging.getLogger("conda.cli.main_config").setLevel(logging.ERROR)
    logging.getLogger("conda.base.context").setLevel(logging.ERROR)


def build_response(pid: str = "", pd1: str = "", with_query_response=True) -> bytes:
    """
    Wrap PID and PD1 segment bodies in a complete EMPI response document.
    """
    query_response = ""
    if with_query_response:
        query_response = (
            "<RSP_K21.QUERY_RESPONSE>"
            f"<PID>{pid}</PID><PD1>{pd1}</PD1>"
            "</RSP_K21.QUERY_RESPONSE>"
        )
    return RESPONSE_TEMPLATE.format(query_response=query_response).encode("utf-8")


SMITH_PID = """
<PID.3><CX.1>7253698428</CX.1><CX.4><HD.1>NHS</HD.1></CX.4><CX.5>NH</CX.5></PID.3>
<PID.3><CX.1>X123456</CX.1><CX.4><HD.1>140</HD.1></CX.4><CX.5>PI</CX.5></PID.3>
<PID.5>
  <XPN.1><FN.1>SMITH</FN.1></XPN.1>
  <XPN.2>JOHN</XPN.2>
  <XPN.3>DAVID</XPN.3>
  <XPN.5>MR</XPN.5>
</PID.5>
<PID.7><TS.1>19600101000000</TS.1></PID.7>
<PID.8>M</PID.8>
"""


@pytest.fixture
def registry():
    return SystemRegistry()


@pytest.fixture
def smith_response():
    return build_response(pid=SMITH_PID)


@pytest.fixture
def counting_transport():
    """
    Factory for a MockTransport that answers with a fixed status and body and
    records every request it receives.
    """

    def _make(body: bytes = b"", status: int = 200):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(status, content=body)

        return httpx.MockTransport(handler), calls

    return _make


@pytest.fixture
def make_response():
    return build_response
