"""ICAO 9303 check digit validation and MRZ line classification.

This module implements the ICAO Doc 9303 check digit algorithm, date integrity
checks for YYMMDD fields, and the heuristics that decide whether a line of
recognized text plausibly belongs to an MRZ or to a China Exit-Entry Permit.

References:
    - ICAO Doc 9303 Part 3 - Specifications common to all MRTDs
    - https://www.icao.int/publications/pages/publication.aspx?docnum=9303
"""

import logging
from datetime import date
from typing import Optional

from src.utils.constants import (
    CHECK_DIGIT_WEIGHTS,
    EEP_DOCUMENT_CODE,
    EEP_LINE_PREFIXES,
    EEP_PREFIXES,
    MRZ_ALPHABET,
    MRZ_DIGITS,
    MRZ_FILLER,
)

from .config_loader import ValidatorConfig

logger = logging.getLogger(__name__)

# Positions of a 30-character EEP line that must hold a digit or filler
EEP_CHECK_POSITIONS = (11, 18, 26, 28, 29)

PASSPORT_LINE1_PREFIXES = ("P<", "PO", "P0")
ID_CARD_PREFIXES = ("I<", "ID", "I0", "A<", "AC", "C<")
VISA_PREFIXES = ("V<", "V0")
DOCUMENT_PREFIXES = PASSPORT_LINE1_PREFIXES + ID_CARD_PREFIXES + VISA_PREFIXES


def _character_value(char: str) -> int:
    if char == MRZ_FILLER:
        return 0
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "A" <= char <= "Z":
        return ord(char) - ord("A") + 10
    return 0


def calculate_check_digit(data: str) -> int:
    """Calculate the ICAO 9303 check digit of an MRZ field.

    Algorithm:
    1. Map each character to a numeric value:
       - Filler '<': 0
       - Digits (0-9): their numeric value
       - Letters (A-Z): A=10, B=11, ..., Z=35
    2. Multiply each value by the repeating weights 7, 3, 1
    3. Check digit = sum mod 10

    Characters outside the MRZ alphabet count as 0.

    Args:
        data: Field contents, fillers included.

    Returns:
        Check digit (0-9)

    Example:
        >>> calculate_check_digit("L898902C3")
        6
        >>> calculate_check_digit("740812")
        2
    """
    total = sum(
        _character_value(char) * CHECK_DIGIT_WEIGHTS[pos % 3]
        for pos, char in enumerate(data)
    )
    return total % 10


def verify_check_digit(data: str, check_char: str, allow_filler: bool = True) -> bool:
    """Verify a field against its printed check digit.

    A filler check character marks an unused optional or composite check
    and is accepted unless ``allow_filler`` is False. Mandatory fields
    (document number, dates) always carry a real digit.

    Args:
        data: Field contents, fillers included.
        check_char: Check digit character as printed in the MRZ.
        allow_filler: Accept a filler in place of the digit.

    Returns:
        True if the check digit matches (or is an accepted filler), False
        otherwise.

    Example:
        >>> verify_check_digit("120415", "9")
        True
        >>> verify_check_digit("120415", "4")
        False
        >>> verify_check_digit("<<<<<<<<<<<<<<", "<")
        True
        >>> verify_check_digit("120415", "<", allow_filler=False)
        False
    """
    if check_char == MRZ_FILLER:
        return allow_filler
    if len(check_char) != 1 or check_char not in MRZ_DIGITS:
        return False
    return calculate_check_digit(data) == int(check_char)


def is_valid_date(yymmdd: str) -> bool:
    """Validate a YYMMDD date field.

    Months must be 1-12 and days 1-31, with April, June, September and
    November limited to 30 days and February to 29.

    Args:
        yymmdd: Six-character date field.

    Returns:
        True if the field is a plausible calendar date.

    Example:
        >>> is_valid_date("740812")
        True
        >>> is_valid_date("991301")
        False
    """
    if len(yymmdd) != 6 or not yymmdd.isdigit() or not yymmdd.isascii():
        return False

    month = int(yymmdd[2:4])
    day = int(yymmdd[4:6])

    if month < 1 or month > 12:
        return False
    if day < 1 or day > 31:
        return False
    if month in (4, 6, 9, 11) and day > 30:
        return False
    if month == 2 and day > 29:
        return False
    return True


def expand_date(
    yymmdd: str, today: Optional[date] = None, century_window: int = 10
) -> Optional[date]:
    """Expand a YYMMDD field into a full date.

    Two-digit years up to ``(today.year % 100 + century_window) % 100`` are
    placed in the 2000s, later ones in the 1900s.

    Args:
        yymmdd: Six-character date field.
        today: Reference date (defaults to the current date).
        century_window: Years past the current year still read as 20xx.

    Returns:
        The expanded date, or None if the field is not a valid date.
    """
    cleaned = yymmdd.replace(MRZ_FILLER, "")
    if not is_valid_date(cleaned):
        return None

    today = today or date.today()
    cutoff = (today.year % 100 + century_window) % 100
    year = int(cleaned[0:2])
    full_year = 2000 + year if year <= cutoff else 1900 + year

    try:
        return date(full_year, int(cleaned[2:4]), int(cleaned[4:6]))
    except ValueError:
        # 29 February outside a leap year
        return None


def _normalize_key_date(value: str) -> str:
    digits = "".join(char for char in value if char.isdigit())
    if len(digits) == 8:
        return digits[-6:]
    return digits.ljust(6, "0")[:6]


def compute_mrz_key(document_number: str, date_of_birth: str, expiry_date: str) -> str:
    """Build the chip access key from the three MRZ key fields.

    The key is the document number (padded to 9 with filler) followed by the
    date of birth and expiry date (YYMMDD), each with its check digit.

    Args:
        document_number: Document number (fillers optional).
        date_of_birth: YYMMDD or YYYYMMDD, separators allowed.
        expiry_date: YYMMDD or YYYYMMDD, separators allowed.

    Returns:
        24-character access key.

    Example:
        >>> compute_mrz_key("L898902C3", "740812", "120415")
        'L898902C3674081221204159'
    """
    number = "".join(
        char for char in document_number.strip().upper() if char.isalnum() and char.isascii()
    )
    number = number.ljust(9, MRZ_FILLER)[:9]
    dob = _normalize_key_date(date_of_birth)
    doe = _normalize_key_date(expiry_date)
    return (
        f"{number}{calculate_check_digit(number)}"
        f"{dob}{calculate_check_digit(dob)}"
        f"{doe}{calculate_check_digit(doe)}"
    )


class MRZValidator:
    """Classifies recognized text lines as MRZ or EEP candidates.

    The validator applies length windows, MRZ-alphabet density and
    structural prefix patterns. It holds no state besides its thresholds
    and is safe to share between threads.

    Args:
        config: Validator thresholds. Defaults are used when None.

    Example:
        >>> validator = MRZValidator()
        >>> validator.is_mrz_line("P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<")
        True
        >>> validator.is_eep_line("CSC123456788<3001019<9001011<4")
        True
    """

    def __init__(self, config: Optional[ValidatorConfig] = None):
        self.config = config or ValidatorConfig()

    # ------------------------------------------------------------------
    # Line classification
    # ------------------------------------------------------------------

    def is_mrz_line(self, text: str) -> bool:
        """Check if text plausibly is one line of an MRZ.

        Args:
            text: Raw recognized text.

        Returns:
            True if the line passes length, density and pattern checks.
        """
        clean_text = text.replace(" ", "").upper()

        if not (
            self.config.min_line_length <= len(clean_text) <= self.config.max_line_length
        ):
            return False

        valid_ratio = sum(1 for char in clean_text if char in MRZ_ALPHABET) / len(
            clean_text
        )
        if valid_ratio < self.config.min_valid_char_ratio:
            return False

        if self._matches_line_pattern(clean_text):
            return True

        return MRZ_FILLER in clean_text and valid_ratio >= self.config.loose_valid_char_ratio

    def is_eep_line(self, text: str) -> bool:
        """Check if text plausibly is a China EEP MRZ line.

        Args:
            text: Raw recognized text.

        Returns:
            True if the line has EEP length, prefix, filler and digit density.
        """
        clean_text = text.replace(" ", "").upper()

        if not (self.config.eep_min_length <= len(clean_text) <= self.config.eep_max_length):
            return False
        if not clean_text.startswith(EEP_LINE_PREFIXES):
            return False
        if MRZ_FILLER not in clean_text:
            return False
        return _count_digits(clean_text) >= self.config.eep_min_digits

    def _matches_line_pattern(self, line: str) -> bool:
        return (
            self._is_eep_pattern(line)
            or self._is_passport_line1_pattern(line)
            or self._is_passport_line2_pattern(line)
            or self._is_id_card_pattern(line)
            or self._is_visa_pattern(line)
            or self._is_generic_pattern(line)
        )

    def _is_eep_pattern(self, line: str) -> bool:
        if not line.startswith(EEP_PREFIXES):
            return False
        if not (self.config.eep_min_length <= len(line) <= self.config.eep_max_length):
            return False
        return _count_digits(line) >= self.config.eep_min_digits

    def _is_passport_line1_pattern(self, line: str) -> bool:
        return line.startswith(PASSPORT_LINE1_PREFIXES) and "<<" in line

    def _is_passport_line2_pattern(self, line: str) -> bool:
        if len(line) < self.config.passport_line2_min_length:
            return False
        return _count_digits(line) >= self.config.eep_min_digits and MRZ_FILLER in line

    def _is_id_card_pattern(self, line: str) -> bool:
        return line.startswith(ID_CARD_PREFIXES)

    def _is_visa_pattern(self, line: str) -> bool:
        return line.startswith(VISA_PREFIXES)

    def _is_generic_pattern(self, line: str) -> bool:
        # Name-separator and digit-density criteria may both match near
        # format boundaries; callers break ties by input order.
        if "<<" in line and len(line) >= 30:
            return True
        has_date_pattern = (
            _count_digits(line) >= self.config.generic_min_digits and MRZ_FILLER in line
        )
        return has_date_pattern and len(line) >= self.config.min_line_length

    # ------------------------------------------------------------------
    # Full MRZ validation
    # ------------------------------------------------------------------

    def validate_mrz(self, mrz: str) -> bool:
        """Validate a complete newline-separated MRZ block.

        A single line is validated as an EEP MRZ; several lines are checked
        for consistent widths, a known document prefix and enough digits.

        Args:
            mrz: MRZ block, lines separated by newlines.

        Returns:
            True if the block is structurally plausible.
        """
        lines = mrz.split("\n")

        if len(lines) == 1:
            return self.validate_eep_mrz(lines[0])

        line1, line2 = lines[0], lines[1]
        if abs(len(line1) - len(line2)) > 2:
            return False

        has_valid_start = line1.startswith(DOCUMENT_PREFIXES) or line1[:1] in ("P", "V")
        return has_valid_start and _count_digits(line2) >= self.config.generic_min_digits

    def validate_eep_mrz(self, mrz: str) -> bool:
        """Validate a single 30-character EEP MRZ line.

        Args:
            mrz: EEP line (spaces are ignored).

        Returns:
            True if the line is 30 characters, starts with CS and every
            check digit position holds a digit or filler.
        """
        clean_mrz = mrz.replace(" ", "")

        if len(clean_mrz) != 30:
            return False
        if not clean_mrz.startswith(EEP_DOCUMENT_CODE):
            return False

        for pos in EEP_CHECK_POSITIONS:
            char = clean_mrz[pos]
            if not (char.isdigit() and char.isascii()) and char != MRZ_FILLER:
                return False
        return True

    # ------------------------------------------------------------------
    # Check digits
    # ------------------------------------------------------------------

    def calculate_check_digit(self, data: str) -> int:
        """Calculate the ICAO 9303 check digit (see module function)."""
        return calculate_check_digit(data)

    def verify_check_digit(
        self, data: str, check_char: str, allow_filler: bool = True
    ) -> bool:
        """Verify a field against its check digit (see module function)."""
        return verify_check_digit(data, check_char, allow_filler)


def _count_digits(text: str) -> int:
    return sum(1 for char in text if "0" <= char <= "9")
