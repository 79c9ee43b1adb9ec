# src/concierge/empi/authority.py
"""
EMPI environments and identifier-issuing authorities.

Both are closed sets: anything not listed here is rejected before a request
is ever built.
"""

from __future__ import annotations

from enum import Enum

from ..exceptions import InvalidAuthorityError


class Endpoint(Enum):
    """
    An EMPI environment: default URL and MSH-11 processing id.
    """

    PRODUCTION = (
        "https://mpilivequeries.cymru.nhs.uk/PatientDemographicsQueryWS.asmx",
        "P",
    )
    TESTING = (
        "https://mpitest.cymru.nhs.uk/PatientDemographicsQueryWS.asmx",
        "U",
    )
    DEVELOPMENT = (
        "http://ndc06srvmpidev2.cymru.nhs.uk:23000/PatientDemographicsQueryWS.asmx",
        "T",
    )

    def __init__(self, url: str, processing_id: str) -> None:
        self.url = url
        self.processing_id = processing_id

    @classmethod
    def lookup(cls, name: str) -> "Endpoint":
        """
        Return the environment named by (P)roduction, (T)esting or
        (D)evelopment; only the first letter matters, case-insensitively.

        Raises
        ------
        ValueError
            If the name does not start with P, T or D.
        """
        initial = name.strip()[:1].upper()
        for ep in cls:
            if ep.name[0] == initial:
                return ep
        raise ValueError(f"Unknown EMPI endpoint: {name!r}")


class Authority(Enum):
    """
    An organisation issuing patient identifiers, with its HL7 identifier
    type code (CX.5).
    """

    NHS = ("NHS", "NH")  # NHS number
    EMPI = ("100", "PE")  # internal EMPI identifier; ephemeral
    ABH = ("139", "PI")  # Aneurin Bevan
    ABMU = ("108", "PI")  # Abertawe Bro Morgannwg
    BCU_CENTRAL = ("109", "PI")
    BCU_MAELOR = ("110", "PI")
    BCU_WEST = ("111", "PI")
    CT = ("126", "PI")  # Cwm Taf
    CAV = ("140", "PI")  # Cardiff and Vale
    HD = ("149", "PI")  # Hywel Dda
    POWYS = ("170", "PI")

    def __init__(self, code: str, type_code: str) -> None:
        self.code = code
        self.type_code = type_code

    @classmethod
    def lookup(cls, code: str) -> "Authority":
        """
        Return the authority with exactly this code.

        Raises
        ------
        InvalidAuthorityError
            If the code is not in the supported set.
        """
        for authority in cls:
            if authority.code == code:
                return authority
        raise InvalidAuthorityError(f"Unsupported authority: {code!r}")
