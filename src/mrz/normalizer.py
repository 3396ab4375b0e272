"""Character normalization for OCR-recognized MRZ text.

This module turns raw recognizer output into strings over the MRZ alphabet
{A-Z, 0-9, <}. The correction rules are based on:

1. **OCR look-alikes**: guillemets, bars and spaces read in place of the
   filler, accented or symbol glyphs read in place of C and S
   - Common substitutions: « » ‹ › | ¦ → <, Ć → C, Ś $ § → S

2. **Numeric zones** (dates, check digits): letters replaced by digits
   - Common corrections: O/Q/D → 0, I/L → 1, Z → 2, S → 5, B → 8

3. **Alphabetic zones** (document codes): digits replaced by letters
   - Common corrections: 0 → O, 1 → I, 2 → Z, 5 → S, 8 → B

Zone corrections are only applied where a caller knows the zone. The one
exception is the China Exit-Entry Permit line, whose fixed 30-character
layout is corrected position by position in ``clean_and_normalize_eep``.

Example:
    >>> normalizer = MRZNormalizer()
    >>> normalizer.clean_line("p«utoeriksson«‹anna")
    'P<UTOERIKSSON<<ANNA'
    >>> normalizer.normalize_length("ABC", 6)
    'ABC<<<'
"""

from types import MappingProxyType
from typing import Mapping, Optional

from src.utils.constants import MRZ_ALPHABET

from .config_loader import NormalizerConfig

EEP_LINE_LENGTH = 30

# Zones of the 30-character EEP line
EEP_CODE_ZONE = range(0, 2)
EEP_CHECK_POSITIONS = frozenset({11, 18, 26, 28, 29})
EEP_DATE_ZONES = (range(12, 18), range(20, 26))
EEP_SEX_POSITION = 19


class MRZNormalizer:
    """Maps recognizer output onto the MRZ alphabet.

    All substitution tables are copied from configuration into read-only
    mappings at construction, so one instance can be shared by any number
    of threads.

    Args:
        config: Normalizer configuration. Defaults are used when None.

    Example:
        >>> normalizer = MRZNormalizer()
        >>> normalizer.correct_letters_in_numeric_zone("74O8I2")
        '740812'
    """

    def __init__(self, config: Optional[NormalizerConfig] = None):
        self.config = config or NormalizerConfig()
        self.filler = self.config.filler
        self.ocr_substitutions: Mapping[str, str] = MappingProxyType(
            dict(self.config.rules.ocr_substitutions)
        )
        self.letter_to_digit: Mapping[str, str] = MappingProxyType(
            dict(self.config.rules.letter_to_digit)
        )
        self.digit_to_letter: Mapping[str, str] = MappingProxyType(
            dict(self.config.rules.digit_to_letter)
        )
        # Date retry additionally accepts a lowercase 'l' read for '1'
        self.date_rules: Mapping[str, str] = MappingProxyType(
            {**self.letter_to_digit, "l": "1"}
        )
        self.eep_prefix_repairs = tuple(self.config.eep_prefix_repairs)

    def clean_line(self, text: str) -> str:
        """Uppercase, substitute OCR look-alikes and drop foreign characters.

        Args:
            text: Raw recognized text of any length.

        Returns:
            Text containing only MRZ-alphabet characters (length unbounded).
        """
        upper = text.upper()
        substituted = (self.ocr_substitutions.get(char, char) for char in upper)
        return "".join(char for char in substituted if char in MRZ_ALPHABET)

    def normalize_length(self, text: str, target_length: int) -> str:
        """Right-pad with filler or truncate to exactly ``target_length``.

        Args:
            text: Line to resize.
            target_length: Required width.

        Returns:
            Line of exactly ``target_length`` characters.

        Raises:
            ValueError: If ``target_length`` is negative.
        """
        if target_length < 0:
            raise ValueError(f"Target length must be non-negative, got {target_length}")
        if len(text) >= target_length:
            return text[:target_length]
        return text + self.filler * (target_length - len(text))

    def correct_digits_in_alpha_zone(self, text: str) -> str:
        """Replace digits with look-alike letters (0→O, 1→I, 2→Z, 5→S, 8→B)."""
        return "".join(self.digit_to_letter.get(char, char) for char in text)

    def correct_letters_in_numeric_zone(self, text: str) -> str:
        """Replace letters with look-alike digits (O/Q/D→0, I/L→1, Z→2, S→5, B→8)."""
        return "".join(self.letter_to_digit.get(char, char) for char in text)

    def fix_date(self, text: str) -> str:
        """Retry a date field with letter-to-digit corrections.

        Args:
            text: Six-character date field as read.

        Returns:
            Field with look-alike letters replaced by digits.
        """
        return "".join(self.date_rules.get(char, char) for char in text)

    def clean_eep_line(self, text: str) -> str:
        """Clean an EEP line and repair a misread ``CS`` prefix.

        Args:
            text: Raw recognized text.

        Returns:
            Cleaned line with ``C5``/``C$``/``C8`` prefixes rewritten to ``CS``.
        """
        # '$' is repaired before clean_line would turn it into 'S' anyway
        stripped = text.replace(" ", "").upper()
        for prefix in self.eep_prefix_repairs:
            if stripped.startswith(prefix):
                stripped = "CS" + stripped[len(prefix):]
                break
        return self.clean_line(stripped)

    def clean_and_normalize_eep(self, text: str) -> str:
        """Clean, resize to 30 and apply positional EEP corrections.

        Positions 0-1 get digit-to-letter corrections; positions 11, 18,
        26, 28 and 29 and the zones 12-17 and 20-25 get letter-to-digit
        corrections; a '0' at position 19 becomes filler. The document
        number (2-10) and position 27 are left as read.

        Args:
            text: Raw recognized EEP text.

        Returns:
            Corrected 30-character EEP line.
        """
        line = self.normalize_length(self.clean_eep_line(text), EEP_LINE_LENGTH)
        chars = list(line)

        for pos, char in enumerate(chars):
            if pos in EEP_CODE_ZONE:
                chars[pos] = self.digit_to_letter.get(char, char)
            elif pos in EEP_CHECK_POSITIONS or any(pos in zone for zone in EEP_DATE_ZONES):
                chars[pos] = self.letter_to_digit.get(char, char)
            elif pos == EEP_SEX_POSITION and char == "0":
                chars[pos] = self.filler

        return "".join(chars)
