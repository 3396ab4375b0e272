"""Fixed-offset field layouts of the supported MRZ formats.

Each layout is an immutable table of character spans (0-based offsets into
normalized lines) following ICAO Doc 9303 Parts 4-7, plus the single-line
China Exit-Entry Permit. Visa layouts reuse the passport (MRV-A = TD3) and
travel document (MRV-B = TD2) geometry.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Sequence, Tuple

from .types import DocumentFormat


@dataclass(frozen=True)
class FieldSpan:
    """Character range on one MRZ line.

    Attributes:
        line: Index of the MRZ line.
        start: Offset of the first character.
        length: Number of characters.
    """

    line: int
    start: int
    length: int

    def slice(self, text: str) -> str:
        """Cut this span out of a single line."""
        return text[self.start : self.start + self.length]

    def read(self, lines: Sequence[str]) -> str:
        """Cut this span out of its line in a block of MRZ lines."""
        return self.slice(lines[self.line])


@dataclass(frozen=True)
class CheckedField:
    """Field protected by a single check digit.

    Attributes:
        value: Span holding the field contents.
        check: One-character span holding the check digit.
    """

    value: FieldSpan
    check: FieldSpan


@dataclass(frozen=True)
class FormatLayout:
    """Field map of one MRZ format.

    Attributes:
        document_format: Format this layout describes.
        document_code: Document type code (e.g. "P<", "I<", "CS").
        document_number: Document number and its check digit.
        date_of_birth: Date of birth (YYMMDD) and its check digit.
        expiry_date: Expiry date (YYMMDD) and its check digit.
        country: Issuing state, None when implied by the format.
        names: Name zone, None when the format prints no names.
        nationality: Nationality, None when implied by the format.
        sex: Sex marker, None when the format prints none.
        personal_number: Personal number and its check digit, if any.
        composite: Spans covered by the composite check digit.
        composite_check: Composite check digit, None when absent.
    """

    document_format: DocumentFormat
    document_code: FieldSpan
    document_number: CheckedField
    date_of_birth: CheckedField
    expiry_date: CheckedField
    country: Optional[FieldSpan] = None
    names: Optional[FieldSpan] = None
    nationality: Optional[FieldSpan] = None
    sex: Optional[FieldSpan] = None
    personal_number: Optional[CheckedField] = None
    composite: Tuple[FieldSpan, ...] = ()
    composite_check: Optional[FieldSpan] = None

    @property
    def line_count(self) -> int:
        return self.document_format.line_count

    @property
    def line_length(self) -> int:
        return self.document_format.line_length

    def composite_data(self, lines: Sequence[str]) -> str:
        """Concatenate the spans covered by the composite check digit."""
        return "".join(span.read(lines) for span in self.composite)


def _checked(line: int, start: int, length: int) -> CheckedField:
    # Check digit immediately follows the field
    return CheckedField(
        value=FieldSpan(line, start, length),
        check=FieldSpan(line, start + length, 1),
    )


# Passport (2 x 44)
TD3_LAYOUT = FormatLayout(
    document_format=DocumentFormat.TD3,
    document_code=FieldSpan(0, 0, 2),
    country=FieldSpan(0, 2, 3),
    names=FieldSpan(0, 5, 39),
    document_number=_checked(1, 0, 9),
    nationality=FieldSpan(1, 10, 3),
    date_of_birth=_checked(1, 13, 6),
    sex=FieldSpan(1, 20, 1),
    expiry_date=_checked(1, 21, 6),
    personal_number=_checked(1, 28, 14),
    composite=(FieldSpan(1, 0, 10), FieldSpan(1, 13, 7), FieldSpan(1, 21, 22)),
    composite_check=FieldSpan(1, 43, 1),
)

# Travel document (2 x 36)
TD2_LAYOUT = FormatLayout(
    document_format=DocumentFormat.TD2,
    document_code=FieldSpan(0, 0, 2),
    country=FieldSpan(0, 2, 3),
    names=FieldSpan(0, 5, 31),
    document_number=_checked(1, 0, 9),
    nationality=FieldSpan(1, 10, 3),
    date_of_birth=_checked(1, 13, 6),
    sex=FieldSpan(1, 20, 1),
    expiry_date=_checked(1, 21, 6),
    composite=(FieldSpan(1, 0, 10), FieldSpan(1, 13, 7), FieldSpan(1, 21, 14)),
    composite_check=FieldSpan(1, 35, 1),
)

# ID card (3 x 30)
TD1_LAYOUT = FormatLayout(
    document_format=DocumentFormat.TD1,
    document_code=FieldSpan(0, 0, 2),
    country=FieldSpan(0, 2, 3),
    document_number=_checked(0, 5, 9),
    date_of_birth=_checked(1, 0, 6),
    sex=FieldSpan(1, 7, 1),
    expiry_date=_checked(1, 8, 6),
    nationality=FieldSpan(1, 15, 3),
    names=FieldSpan(2, 0, 30),
    composite=(
        FieldSpan(0, 5, 25),
        FieldSpan(1, 0, 7),
        FieldSpan(1, 8, 7),
        FieldSpan(1, 18, 11),
    ),
    composite_check=FieldSpan(1, 29, 1),
)

# China Exit-Entry Permit (1 x 30); fillers at 12, 20 and 28
EEP_LAYOUT = FormatLayout(
    document_format=DocumentFormat.EEP,
    document_code=FieldSpan(0, 0, 2),
    document_number=_checked(0, 2, 9),
    expiry_date=_checked(0, 13, 6),
    date_of_birth=_checked(0, 21, 6),
    composite=(FieldSpan(0, 2, 10), FieldSpan(0, 13, 7), FieldSpan(0, 21, 7)),
    composite_check=FieldSpan(0, 29, 1),
)

LAYOUTS = MappingProxyType(
    {
        DocumentFormat.TD1: TD1_LAYOUT,
        DocumentFormat.TD2: TD2_LAYOUT,
        DocumentFormat.TD3: TD3_LAYOUT,
        DocumentFormat.MRVA: TD3_LAYOUT,
        DocumentFormat.MRVB: TD2_LAYOUT,
        DocumentFormat.EEP: EEP_LAYOUT,
    }
)
