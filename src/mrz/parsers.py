"""Format parsers turning normalized MRZ lines into ParsedDocument records.

All six formats share one extraction core, ``parse_document``, driven by the
layout tables in ``layouts.py``. The per-format functions are thin entry
points that fix the format tag.

Check digits are always verified and reported in ``ParsedDocument.check_digits``.
Under ``ValidationPolicy.LENIENT`` mismatches are only logged; under
``ValidationPolicy.STRICT`` a mismatch on the document number or either date
rejects the document.

Example:
    >>> document = parse_td3([
    ...     "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
    ...     "L898902C36UTO7408122F1204159ZE184226B<<<<<10",
    ... ])
    >>> document.surname, document.given_names
    ('Eriksson', 'Anna Maria')
"""

import logging
from typing import Optional, Sequence, Tuple

from src.utils.constants import EEP_DOCUMENT_CODE, MRZ_FILLER

from .layouts import LAYOUTS, CheckedField, FormatLayout
from .normalizer import MRZNormalizer
from .types import CheckDigitReport, DocumentFormat, ParsedDocument, ValidationPolicy
from .validator import is_valid_date, verify_check_digit

logger = logging.getLogger(__name__)

_DEFAULT_NORMALIZER = MRZNormalizer()

DEFAULT_EEP_COUNTRY_CODE = "CHN"


def clean_document_number(value: str) -> str:
    """Strip filler and surrounding whitespace from a document number."""
    return value.replace(MRZ_FILLER, "").strip()


def parse_names(zone: str) -> Tuple[str, str]:
    """Split an MRZ name zone into surname and given names.

    The zone is split on the first ``<<``; filler runs inside each part
    become single spaces and the result is title-cased.

    Args:
        zone: Name zone as printed (e.g. "ERIKSSON<<ANNA<MARIA<<<").

    Returns:
        (surname, given_names); given names are empty when no separator
        is present.

    Example:
        >>> parse_names("ERIKSSON<<ANNA<MARIA<<<<<<")
        ('Eriksson', 'Anna Maria')
    """
    surname, separator, given = zone.partition(MRZ_FILLER * 2)
    surname = _name_part(surname)
    if not separator:
        return surname, ""
    return surname, _name_part(given)


def _name_part(text: str) -> str:
    # Filler runs of any length become a single space
    return " ".join(text.replace(MRZ_FILLER, " ").split()).title()


def parse_sex(marker: str) -> str:
    """Map the MRZ sex marker to a readable value.

    Returns:
        "Male", "Female", "Unspecified" for '<' or 'X', otherwise the raw
        character.
    """
    if marker == "M":
        return "Male"
    if marker == "F":
        return "Female"
    if marker in (MRZ_FILLER, "X"):
        return "Unspecified"
    return marker


def _read_date(
    field: CheckedField, lines: Sequence[str], normalizer: MRZNormalizer
) -> Optional[str]:
    raw = field.value.read(lines)
    if is_valid_date(raw):
        return raw

    fixed = normalizer.fix_date(raw)
    if is_valid_date(fixed):
        logger.debug(f"Date field corrected: {raw} -> {fixed}")
        return fixed

    logger.debug(f"Invalid date field: {raw}")
    return None


def _verify_field(
    field: CheckedField, lines: Sequence[str], value: str, allow_filler: bool = False
) -> bool:
    return verify_check_digit(value, field.check.read(lines), allow_filler)


def _check_digits(
    layout: FormatLayout, lines: Sequence[str], date_of_birth: str, expiry_date: str
) -> CheckDigitReport:
    optional_data = True
    if layout.personal_number is not None:
        optional_data = _verify_field(
            layout.personal_number,
            lines,
            layout.personal_number.value.read(lines),
            allow_filler=True,
        )

    composite = True
    if layout.composite_check is not None:
        composite = verify_check_digit(
            layout.composite_data(lines), layout.composite_check.read(lines)
        )

    return CheckDigitReport(
        document_number=_verify_field(
            layout.document_number, lines, layout.document_number.value.read(lines)
        ),
        date_of_birth=_verify_field(layout.date_of_birth, lines, date_of_birth),
        expiry_date=_verify_field(layout.expiry_date, lines, expiry_date),
        optional_data=optional_data,
        composite=composite,
    )


def parse_document(
    lines: Sequence[str],
    document_format: DocumentFormat,
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
    eep_country_code: str = DEFAULT_EEP_COUNTRY_CODE,
) -> Optional[ParsedDocument]:
    """Extract a document from MRZ lines using the format's layout.

    Lines are cleaned and resized to the format width before reading, so
    already-normalized input passes through unchanged.

    Args:
        lines: MRZ lines in reading order (at least ``line_count``).
        document_format: Format whose layout is applied.
        policy: Check digit policy.
        normalizer: Normalizer used for resizing and date repair.
        eep_country_code: Issuing country and nationality of EEP documents.

    Returns:
        ParsedDocument, or None when there are too few lines, a date stays
        invalid after correction, or the strict policy rejects the record.
    """
    layout = LAYOUTS[document_format]
    normalizer = normalizer or _DEFAULT_NORMALIZER

    if len(lines) < layout.line_count:
        logger.debug(
            f"{document_format.display_name} needs {layout.line_count} lines, "
            f"got {len(lines)}"
        )
        return None

    mrz = tuple(
        normalizer.normalize_length(normalizer.clean_line(line), layout.line_length)
        for line in lines[: layout.line_count]
    )

    document_code = layout.document_code.read(mrz)
    if (
        policy is ValidationPolicy.STRICT
        and document_format is DocumentFormat.EEP
        and document_code != EEP_DOCUMENT_CODE
    ):
        logger.debug(f"Rejected EEP with document code {document_code!r}")
        return None

    date_of_birth = _read_date(layout.date_of_birth, mrz, normalizer)
    if date_of_birth is None:
        return None
    expiry_date = _read_date(layout.expiry_date, mrz, normalizer)
    if expiry_date is None:
        return None

    report = _check_digits(layout, mrz, date_of_birth, expiry_date)
    if not report.all_valid:
        logger.debug(f"{document_format.display_name} check digit mismatch: {report}")
        if policy is ValidationPolicy.STRICT and not (
            report.document_number and report.date_of_birth and report.expiry_date
        ):
            return None

    if layout.names is not None:
        surname, given_names = parse_names(layout.names.read(mrz))
    else:
        surname, given_names = "", ""

    if document_format is DocumentFormat.EEP:
        country_code = nationality = eep_country_code
    else:
        country_code = clean_document_number(layout.country.read(mrz))
        nationality = clean_document_number(layout.nationality.read(mrz))

    personal_number = None
    if layout.personal_number is not None:
        personal_number = (
            clean_document_number(layout.personal_number.value.read(mrz)) or None
        )

    return ParsedDocument(
        document_format=document_format,
        country_code=country_code,
        surname=surname,
        given_names=given_names,
        document_number=clean_document_number(layout.document_number.value.read(mrz)),
        nationality=nationality,
        date_of_birth=date_of_birth,
        sex=parse_sex(layout.sex.read(mrz)) if layout.sex is not None else "",
        expiry_date=expiry_date,
        personal_number=personal_number,
        raw_lines=mrz,
        check_digits=report,
    )


def parse_td1(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
) -> Optional[ParsedDocument]:
    """Parse a 3 x 30 ID card MRZ."""
    return parse_document(lines, DocumentFormat.TD1, policy, normalizer)


def parse_td2(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
) -> Optional[ParsedDocument]:
    """Parse a 2 x 36 travel document MRZ."""
    return parse_document(lines, DocumentFormat.TD2, policy, normalizer)


def parse_td3(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
) -> Optional[ParsedDocument]:
    """Parse a 2 x 44 passport MRZ."""
    return parse_document(lines, DocumentFormat.TD3, policy, normalizer)


def parse_mrva(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
) -> Optional[ParsedDocument]:
    """Parse a type A visa (passport geometry)."""
    return parse_document(lines, DocumentFormat.MRVA, policy, normalizer)


def parse_mrvb(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
) -> Optional[ParsedDocument]:
    """Parse a type B visa (travel document geometry)."""
    return parse_document(lines, DocumentFormat.MRVB, policy, normalizer)


def parse_eep(
    lines: Sequence[str],
    policy: ValidationPolicy = ValidationPolicy.LENIENT,
    normalizer: Optional[MRZNormalizer] = None,
    country_code: str = DEFAULT_EEP_COUNTRY_CODE,
) -> Optional[ParsedDocument]:
    """Parse a single-line China Exit-Entry Permit MRZ."""
    return parse_document(lines, DocumentFormat.EEP, policy, normalizer, country_code)
