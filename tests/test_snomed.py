"""
Tests for concierge.snomed.
"""

import pytest

from concierge.exceptions import InvalidIdentifierError
from concierge.snomed import parse_concept_id, verhoeff_valid


@pytest.mark.parametrize(
    "digits",
    [
        "2363",
        "768839008",
        "73211009",
        "24700007",
        "22298006",
        "138875005",
        "404684003",
        "158890004",
        "309396002",
        "158972004",
        "394572006",
        "900000000000207008",
    ],
)
def test_verhoeff_accepts_valid_check_digits(digits):
    assert verhoeff_valid(digits)


@pytest.mark.parametrize("digits", ["2364", "768839009", "73211008", "22298007"])
def test_verhoeff_rejects_single_digit_errors(digits):
    assert not verhoeff_valid(digits)


def test_parse_concept_id_returns_int():
    assert parse_concept_id("768839008") == 768839008


def test_parse_concept_id_rejects_non_digits():
    with pytest.raises(InvalidIdentifierError, match=r"^invalid SNOMED CT identifier"):
        parse_concept_id("76883900A")


def test_parse_concept_id_rejects_bad_length():
    with pytest.raises(InvalidIdentifierError):
        parse_concept_id("12345")
    with pytest.raises(InvalidIdentifierError):
        parse_concept_id("1" * 19)


def test_parse_concept_id_rejects_leading_zero():
    with pytest.raises(InvalidIdentifierError, match=r"leading zero"):
        parse_concept_id("0768839008")


def test_parse_concept_id_rejects_bad_check_digit():
    with pytest.raises(InvalidIdentifierError, match=r"check digit"):
        parse_concept_id("768839009")


def test_parse_concept_id_rejects_description_ids():
    # 37436014 is a description id (partition 01)
    with pytest.raises(InvalidIdentifierError):
        parse_concept_id("37436014")


@pytest.mark.parametrize("value", ["138875005", "404684003", "158890004", "394572006"])
def test_parse_concept_id_accepts_published_concepts(value):
    assert parse_concept_id(value) == int(value)
