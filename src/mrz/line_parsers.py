"""Single-line MRZ parsers for chip-sourced text.

These parsers read the one line that carries the chip access fields
(document number, date of birth, expiry date): line 2 of a TD3 passport or
the single EEP line. Their output is a flat dictionary used to derive the
chip access key, and they default to the strict check digit policy since
their input carries no optical noise.

Example:
    >>> parser = Td3LineParser()
    >>> parser.can_parse("L898902C36UTO7408122F1204159ZE184226B<<<<<10")
    True
    >>> parser.parse("L898902C36UTO7408122F1204159ZE184226B<<<<<10")["DOC_NUM"]
    'L898902C3'
"""

import logging
import re
from typing import Dict, Optional, Tuple

from src.utils.constants import EEP_DOCUMENT_CODE, MRZ_FILLER

from .layouts import EEP_LAYOUT, TD3_LAYOUT, FormatLayout
from .normalizer import MRZNormalizer
from .parsers import clean_document_number
from .types import ValidationPolicy
from .validator import is_valid_date, verify_check_digit

logger = logging.getLogger(__name__)

DATE_RUN_PATTERN = re.compile(r"[0-9]{6}")


class MRZLineParser:
    """Reads the access fields from one MRZ line using a format layout.

    Subclasses pick the layout, the line of the layout they read and the
    acceptance window of ``can_parse``.

    Args:
        policy: Check digit policy (strict by default).
        normalizer: Normalizer used for date repair.
    """

    layout: FormatLayout = TD3_LAYOUT
    line_index: int = 0
    min_length: int = 0
    max_length: int = 0
    prefixes: Tuple[str, ...] = ()
    type_code: str = ""

    def __init__(
        self,
        policy: ValidationPolicy = ValidationPolicy.STRICT,
        normalizer: Optional[MRZNormalizer] = None,
    ):
        self.policy = policy
        self.normalizer = normalizer or MRZNormalizer()

    def can_parse(self, line: str) -> bool:
        """Check if the line fits this parser's length, prefix and date runs."""
        if not (self.min_length <= len(line) <= self.max_length):
            return False
        if self.prefixes and not line.startswith(self.prefixes):
            return False
        return len(DATE_RUN_PATTERN.findall(line)) >= 2

    def document_type(self) -> str:
        """Human-readable label of the document this parser reads."""
        return self.layout.document_format.display_name

    def prepare(self, line: str) -> Optional[str]:
        """Truncate the line to the format width, None if it is too short."""
        if len(line) < self.layout.line_length:
            logger.debug(f"{self.type_code}: line too short: {len(line)}")
            return None
        return line[: self.layout.line_length]

    def extra_fields(self, block: Tuple[str, ...]) -> Dict[str, str]:
        return {}

    def parse(self, line: str) -> Optional[Dict[str, str]]:
        """Parse the access fields of one MRZ line.

        Args:
            line: Cleaned MRZ line.

        Returns:
            Dictionary with DOC_NUM, DOB, EXPIRY and DOC_TYPE (plus
            format-specific keys), or None when the line is too short, a
            date stays invalid, or the strict policy rejects a check digit.
        """
        prepared = self.prepare(line)
        if prepared is None:
            return None

        # Place the line where the layout expects it
        block = tuple(
            prepared if index == self.line_index else MRZ_FILLER * self.layout.line_length
            for index in range(self.layout.line_count)
        )

        fields = {
            "DOC_NUM": self.layout.document_number,
            "DOB": self.layout.date_of_birth,
            "EXPIRY": self.layout.expiry_date,
        }
        for name, field in fields.items():
            if not verify_check_digit(
                field.value.read(block), field.check.read(block), allow_filler=False
            ):
                logger.debug(f"{self.type_code}: invalid {name} check digit")
                if self.policy is ValidationPolicy.STRICT:
                    return None

        dates = {}
        for name in ("DOB", "EXPIRY"):
            raw = fields[name].value.read(block)
            value = raw if is_valid_date(raw) else self.normalizer.fix_date(raw)
            if not is_valid_date(value):
                logger.debug(f"{self.type_code}: invalid {name} date: {raw}")
                return None
            dates[name] = value

        result = {
            "DOC_NUM": clean_document_number(self.layout.document_number.value.read(block)),
            "DOB": dates["DOB"],
            "EXPIRY": dates["EXPIRY"],
            "DOC_TYPE": self.type_code,
        }
        result.update(self.extra_fields(block))
        return result


class Td3LineParser(MRZLineParser):
    """Parses line 2 of a TD3 passport MRZ."""

    layout = TD3_LAYOUT
    line_index = 1
    min_length = 43
    max_length = 45
    type_code = "TD3_PASSPORT"

    def extra_fields(self, block: Tuple[str, ...]) -> Dict[str, str]:
        return {
            "NATIONALITY": self.layout.nationality.read(block),
            "SEX": self.layout.sex.read(block),
        }


class EepLineParser(MRZLineParser):
    """Parses the single line of a China Exit-Entry Permit MRZ.

    The document code must read ``CS`` after prefix repair regardless of
    policy.
    """

    layout = EEP_LAYOUT
    line_index = 0
    min_length = 28
    max_length = 32
    prefixes = ("CS", "C5", "C$")
    type_code = "EEP"

    def prepare(self, line: str) -> Optional[str]:
        for prefix in ("C5", "C$"):
            if line.startswith(prefix):
                line = EEP_DOCUMENT_CODE + line[len(prefix):]
                break

        prepared = super().prepare(line)
        if prepared is None:
            return None

        document_code = self.layout.document_code.slice(prepared)
        if document_code != EEP_DOCUMENT_CODE:
            logger.debug(f"EEP: invalid document type: {document_code}")
            return None
        return prepared
