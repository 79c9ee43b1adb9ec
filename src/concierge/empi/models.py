# src/concierge/empi/models.py
"""
Canonical patient record returned by the EMPI adapter.

Notes
-----
- A Patient is either fully populated or absent (None); the adapter never
  returns one with blank names.
- Unknown dates are None, never a sentinel value.
- to_fhir() produces a lenient fhir.resources Patient for callers that speak
  FHIR; gender maps v2 M/F/O/U to male/female/other/unknown.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from fhir.resources.patient import Patient as FHIRPatient

from ..identifiers.base import Identifier, Period

_GENDERS = {"M": "male", "F": "female", "O": "other", "U": "unknown"}


@dataclass(frozen=True)
class Address:
    """A postal address; text is the lines joined by newlines."""

    text: str = ""
    line: str = ""
    city: str = ""
    district: str = ""
    country: str = ""
    postal_code: str = ""
    period: Optional[Period] = None


@dataclass(frozen=True)
class ContactPoint:
    """A phone number or email address."""

    system: str  # phone | email
    value: str
    use: Optional[str] = None  # home | work
    description: Optional[str] = None


@dataclass(frozen=True)
class Patient:
    """A patient's demographic record as held by the EMPI."""

    last_name: str
    first_names: str
    title: str = ""
    gender: str = ""
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    surgery: str = ""
    general_practitioner: str = ""
    identifiers: List[Identifier] = field(default_factory=list)
    addresses: List[Address] = field(default_factory=list)
    telecom: List[ContactPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready dict; dates are ISO 8601 strings."""
        return _jsonable(asdict(self))

    def to_fhir(self) -> FHIRPatient:
        """Render the record as a FHIR Patient resource."""
        try:
            p = FHIRPatient.model_construct()
        except AttributeError:
            p = FHIRPatient.construct()

        name: Dict[str, Any] = {"family": self.last_name}
        if self.first_names:
            name["given"] = self.first_names.split()
        if self.title:
            name["prefix"] = [self.title]
        p.name = [name]

        gender = _GENDERS.get(self.gender.strip().upper()[:1])
        if gender:
            p.gender = gender
        if self.birth_date:
            p.birthDate = self.birth_date.isoformat()
        if self.death_date:
            p.deceasedDateTime = self.death_date.isoformat()

        if self.identifiers:
            p.identifier = [_fhir_identifier(i) for i in self.identifiers]
        if self.addresses:
            p.address = [_fhir_address(a) for a in self.addresses]
        if self.telecom:
            p.telecom = [
                {k: v for k, v in asdict(c).items() if v and k != "description"}
                for c in self.telecom
            ]

        refs = []
        if self.general_practitioner:
            refs.append(
                {
                    "type": "Practitioner",
                    "identifier": {"value": self.general_practitioner},
                }
            )
        if self.surgery:
            refs.append({"type": "Organization", "identifier": {"value": self.surgery}})
        if refs:
            p.generalPractitioner = refs
        return p


# ------------------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------------------


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_jsonable(v) for v in obj]
    return obj


def _fhir_period(period: Optional[Period]) -> Optional[Dict[str, str]]:
    if period is None:
        return None
    out = {}
    if period.start:
        out["start"] = period.start.isoformat()
    if period.end:
        out["end"] = period.end.isoformat()
    return out or None


def _fhir_identifier(ident: Identifier) -> Dict[str, Any]:
    out: Dict[str, Any] = {"system": ident.system, "value": ident.value}
    if ident.use:
        out["use"] = ident.use
    if ident.assigner:
        out["assigner"] = {"display": ident.assigner}
    period = _fhir_period(ident.period)
    if period:
        out["period"] = period
    return out


def _fhir_address(addr: Address) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    if addr.text:
        out["text"] = addr.text
    if addr.line:
        out["line"] = [addr.line]
    if addr.city:
        out["city"] = addr.city
    if addr.district:
        out["district"] = addr.district
    if addr.country:
        out["country"] = addr.country
    if addr.postal_code:
        out["postalCode"] = addr.postal_code
    period = _fhir_period(addr.period)
    if period:
        out["period"] = period
    return out
