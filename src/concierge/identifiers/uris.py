# src/concierge/identifiers/uris.py
"""
Well-known identifier-system URIs.

System URIs are canonical and case-sensitive; compare them exactly.
"""

SNOMEDCT = "http://snomed.info/sct"

NHS_NUMBER = "https://fhir.nhs.uk/Id/nhs-number"

SDS_JOB_ROLE_NAME = (
    "https://fhir.nhs.uk/STU3/CodeSystem/CareConnect-SDSJobRoleName-1"
)

# Ephemeral internal identifier issued by the NHS Wales EMPI.
EMPI_NUMBER = "https://fhir.wales.nhs.uk/Id/empi-number"
