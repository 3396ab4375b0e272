"""Type definitions for MRZ module.

This module defines the core data structures used throughout the MRZ pipeline:
document formats with their fixed geometry, recognizer candidates, validation
policies and the parsed document record following ICAO 9303.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional, Tuple

from src.utils.constants import (
    EXTRA_DOB,
    EXTRA_DOC_NUM,
    EXTRA_DOC_TYPE,
    EXTRA_EXPIRY,
    EXTRA_MRZ_LINES,
)

from .validator import compute_mrz_key, expand_date


class DocumentFormat(Enum):
    """MRZ layout class of a travel or identity document."""

    TD1 = "td1"  # ID card: 3 lines x 30 characters
    TD2 = "td2"  # Travel document: 2 lines x 36 characters
    TD3 = "td3"  # Passport: 2 lines x 44 characters
    MRVA = "mrva"  # Visa type A: TD3 geometry
    MRVB = "mrvb"  # Visa type B: TD2 geometry
    EEP = "eep"  # China Exit-Entry Permit: 1 line x 30 characters

    @property
    def line_count(self) -> int:
        """Number of MRZ lines printed for this format."""
        return _FORMAT_GEOMETRY[self][0]

    @property
    def line_length(self) -> int:
        """Fixed character width of every MRZ line for this format."""
        return _FORMAT_GEOMETRY[self][1]

    @property
    def display_name(self) -> str:
        """Human-readable document type label."""
        return _FORMAT_GEOMETRY[self][2]


_FORMAT_GEOMETRY = MappingProxyType(
    {
        DocumentFormat.TD1: (3, 30, "ID Card (TD1)"),
        DocumentFormat.TD2: (2, 36, "Travel Document (TD2)"),
        DocumentFormat.TD3: (2, 44, "Passport (TD3)"),
        DocumentFormat.MRVA: (2, 44, "Visa Type A (MRV-A)"),
        DocumentFormat.MRVB: (2, 36, "Visa Type B (MRV-B)"),
        DocumentFormat.EEP: (1, 30, "Exit-Entry Permit (EEP)"),
    }
)


class ValidationPolicy(Enum):
    """How check-digit mismatches are treated.

    LENIENT suits OCR output, where a single misread digit is routine: the
    mismatch is logged and the field is returned as read. STRICT suits MRZ
    text read from a chip, which carries no optical noise: a mismatch on the
    document number or either date aborts the parse.
    """

    LENIENT = "lenient"
    STRICT = "strict"


@dataclass(frozen=True)
class TextCandidate:
    """One line of text reported by an external recognizer.

    Attributes:
        text: Recognized text, possibly containing OCR look-alike symbols.
        vertical_position: Position of the line on the document. By default a
            higher value means earlier in reading order (bottom-left origin,
            as reported by most platform recognizers). Set
            ``extractor.higher_position_first`` to False for top-left origins.
        confidence: Recognizer confidence (0.0-1.0).
    """

    text: str
    vertical_position: float
    confidence: float = 1.0


@dataclass(frozen=True)
class CheckDigitReport:
    """Check digit verification outcome per field.

    Attributes:
        document_number: Document number check digit matched.
        date_of_birth: Date of birth check digit matched.
        expiry_date: Expiry date check digit matched.
        optional_data: Personal number / optional data check digit matched
            (True when the format carries none).
        composite: Final composite check digit matched (True when absent).
    """

    document_number: bool
    date_of_birth: bool
    expiry_date: bool
    optional_data: bool = True
    composite: bool = True

    @property
    def all_valid(self) -> bool:
        """Check if every verified check digit matched."""
        return (
            self.document_number
            and self.date_of_birth
            and self.expiry_date
            and self.optional_data
            and self.composite
        )


@dataclass(frozen=True)
class ParsedDocument:
    """Structured record decoded from an MRZ.

    Attributes:
        document_format: Detected layout class.
        country_code: Issuing state (3 letters).
        surname: Primary identifier, title-cased.
        given_names: Secondary identifier, title-cased, space separated.
        document_number: Document number without filler.
        nationality: Nationality code (3 letters).
        date_of_birth: Date of birth (YYMMDD).
        sex: "Male", "Female", "Unspecified" or the raw MRZ character.
        expiry_date: Date of expiry (YYMMDD).
        personal_number: Personal number / optional data, if any.
        raw_lines: Normalized MRZ lines the record was read from.
        check_digits: Check digit verification outcome.
        century_window: Years past the current year read as 20xx when
            formatting dates.
    """

    document_format: DocumentFormat
    country_code: str
    surname: str
    given_names: str
    document_number: str
    nationality: str
    date_of_birth: str
    sex: str
    expiry_date: str
    personal_number: Optional[str] = None
    raw_lines: Tuple[str, ...] = ()
    check_digits: Optional[CheckDigitReport] = None
    century_window: int = field(default=10, repr=False, compare=False)

    @property
    def document_type(self) -> str:
        """Human-readable document type label."""
        return self.document_format.display_name

    @property
    def full_name(self) -> str:
        """Given names followed by surname."""
        return f"{self.given_names} {self.surname}".strip()

    @property
    def formatted_date_of_birth(self) -> Optional[str]:
        """Date of birth as DD/MM/YYYY, None if not a valid date."""
        return _format_date(self.date_of_birth, self.century_window)

    @property
    def formatted_expiry_date(self) -> Optional[str]:
        """Expiry date as DD/MM/YYYY, None if not a valid date."""
        return _format_date(self.expiry_date, self.century_window)

    @property
    def has_required_fields(self) -> bool:
        """Check if the fields every format guarantees are populated."""
        return bool(self.document_number and self.date_of_birth and self.expiry_date)

    @property
    def mrz_key(self) -> str:
        """Chip access key derived from document number and dates."""
        return compute_mrz_key(
            self.document_number, self.date_of_birth, self.expiry_date
        )

    def to_extras(self) -> Dict[str, str]:
        """Flatten the fields read by presentation collaborators.

        Returns:
            Dictionary keyed by the pass-back data keys.
        """
        return {
            EXTRA_DOC_NUM: self.document_number,
            EXTRA_DOB: self.date_of_birth,
            EXTRA_EXPIRY: self.expiry_date,
            EXTRA_MRZ_LINES: "\n".join(self.raw_lines),
            EXTRA_DOC_TYPE: self.document_type,
        }

    def __str__(self) -> str:
        lines = [
            "ParsedDocument:",
            f"  Document Type: {self.document_type}",
            f"  Country Code: {self.country_code}",
            f"  Full Name: {self.full_name or '-'}",
            f"  Document Number: {self.document_number}",
            f"  Nationality: {self.nationality}",
            f"  Date of Birth: {self.formatted_date_of_birth or '-'}",
            f"  Sex: {self.sex or '-'}",
            f"  Expiry Date: {self.formatted_expiry_date or '-'}",
            f"  Personal Number: {self.personal_number or '-'}",
            "  Raw MRZ:",
        ]
        lines.extend(f"    {line}" for line in self.raw_lines)
        return "\n".join(lines)


def _format_date(yymmdd: str, century_window: int) -> Optional[str]:
    expanded: Optional[date] = expand_date(yymmdd, century_window=century_window)
    if expanded is None:
        return None
    return expanded.strftime("%d/%m/%Y")
