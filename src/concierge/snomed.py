# src/concierge/snomed.py
"""
SNOMED CT identifier grammar.

A SNOMED CT identifier (SCTID) is 6 to 18 decimal digits. The last digit is a
Verhoeff check digit and the two digits before it are the partition
identifier, which tells concepts ("00", "10") apart from descriptions and
relationships.
"""

from __future__ import annotations

from .exceptions import InvalidIdentifierError

_CONCEPT_PARTITIONS = frozenset({"00", "10"})

# Verhoeff dihedral group multiplication table
_D = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 2, 3, 4, 0, 6, 7, 8, 9, 5),
    (2, 3, 4, 0, 1, 7, 8, 9, 5, 6),
    (3, 4, 0, 1, 2, 8, 9, 5, 6, 7),
    (4, 0, 1, 2, 3, 9, 5, 6, 7, 8),
    (5, 9, 8, 7, 6, 0, 4, 3, 2, 1),
    (6, 5, 9, 8, 7, 1, 0, 4, 3, 2),
    (7, 6, 5, 9, 8, 2, 1, 0, 4, 3),
    (8, 7, 6, 5, 9, 3, 2, 1, 0, 4),
    (9, 8, 7, 6, 5, 4, 3, 2, 1, 0),
)

# Verhoeff permutation table
_P = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9),
    (1, 5, 7, 6, 2, 8, 3, 0, 9, 4),
    (5, 8, 0, 3, 7, 9, 6, 1, 4, 2),
    (8, 9, 1, 6, 0, 4, 3, 5, 2, 7),
    (9, 4, 5, 3, 1, 2, 6, 8, 7, 0),
    (4, 2, 8, 6, 5, 7, 3, 9, 0, 1),
    (2, 7, 9, 3, 8, 0, 6, 4, 1, 5),
    (7, 0, 4, 6, 9, 1, 3, 2, 5, 8),
)


def verhoeff_valid(digits: str) -> bool:
    """Return True if the trailing digit is a correct Verhoeff check digit."""
    c = 0
    for i, ch in enumerate(reversed(digits)):
        c = _D[c][_P[i % 8][int(ch)]]
    return c == 0


def parse_concept_id(value: str) -> int:
    """
    Validate a SNOMED CT concept identifier and return it as an int.

    Parameters
    ----------
    value : str
        Candidate identifier.

    Returns
    -------
    int
        The concept identifier.

    Raises
    ------
    InvalidIdentifierError
        If the value is not a well-formed SCTID, fails its check digit, or
        identifies something other than a concept.
    """
    if not (value.isascii() and value.isdigit()) or not 6 <= len(value) <= 18:
        raise InvalidIdentifierError(f"invalid SNOMED CT identifier: {value!r}")
    if value.startswith("0"):
        raise InvalidIdentifierError(
            f"invalid SNOMED CT identifier (leading zero): {value!r}"
        )
    if not verhoeff_valid(value):
        raise InvalidIdentifierError(
            f"invalid SNOMED CT identifier (check digit): {value!r}"
        )
    if value[-3:-1] not in _CONCEPT_PARTITIONS:
        raise InvalidIdentifierError(
            f"SNOMED CT identifier is not a concept: {value!r}"
        )
    return int(value)
