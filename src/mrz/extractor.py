"""MRZ candidate selection and document format detection.

This module picks the MRZ lines out of everything a recognizer reported on a
document and infers their format:

1. **EEP priority**: a China Exit-Entry Permit line wins outright
   - Single 30-character line starting with "CS" (or a misread "C5"/"C$"/"C8")

2. **Multi-line formats**: remaining MRZ-like lines, in reading order
   - Format inferred from the first line's prefix and width
   - "P" + 44 → TD3, "V" + 44 → MRV-A, "I/A/C" + 30 → TD1, 36 → TD2/MRV-B

The recognizer's vertical position convention is configurable; with the
default, a larger position means an earlier line.

Example:
    >>> extractor = MRZExtractor()
    >>> lines, document_format = extractor.extract_mrz([
    ...     TextCandidate("P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<", 2.0),
    ...     TextCandidate("L898902C36UTO7408122F1204159ZE184226B<<<<<10", 1.0),
    ... ])
    >>> document_format
    <DocumentFormat.TD3: 'td3'>
"""

import logging
from typing import List, Optional, Sequence, Tuple

from src.utils.constants import (
    EEP_DOCUMENT_CODE,
    EEP_PREFIXES,
    LONG_LINE_RANGE,
    MEDIUM_LINE_RANGE,
    SHORT_LINE_RANGE,
)

from .config_loader import ExtractorConfig
from .normalizer import EEP_LINE_LENGTH, MRZNormalizer
from .types import DocumentFormat, TextCandidate
from .validator import MRZValidator

logger = logging.getLogger(__name__)

# Second character of a misread single-line EEP prefix ("C" + one of these)
EEP_SECOND_CHARACTERS = "S5$8<"
ID_CARD_FIRST_CHARACTERS = "IAC"


def _in_range(length: int, bounds: Tuple[int, int]) -> bool:
    return bounds[0] <= length <= bounds[1]


class MRZExtractor:
    """Selects MRZ lines from recognizer candidates and detects their format.

    Args:
        config: Extractor configuration (spare lines, position convention).
        normalizer: Normalizer used when none is passed to ``extract_mrz``.
        validator: Validator used when none is passed to ``extract_mrz``.

    Example:
        >>> extractor = MRZExtractor()
        >>> extractor.detect_document_format(["CSC123456788<3001019<9001011<4"])
        <DocumentFormat.EEP: 'eep'>
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        normalizer: Optional[MRZNormalizer] = None,
        validator: Optional[MRZValidator] = None,
    ):
        self.config = config or ExtractorConfig()
        self.normalizer = normalizer or MRZNormalizer()
        self.validator = validator or MRZValidator()

        logger.info(
            f"MRZExtractor initialized: "
            f"spare_lines={self.config.spare_lines}, "
            f"higher_position_first={self.config.higher_position_first}"
        )

    def extract_mrz(
        self,
        candidates: Sequence[TextCandidate],
        normalizer: Optional[MRZNormalizer] = None,
        validator: Optional[MRZValidator] = None,
    ) -> Optional[Tuple[List[str], DocumentFormat]]:
        """Select and normalize the MRZ lines among recognizer candidates.

        Args:
            candidates: Every text line reported on the document.
            normalizer: Overrides the extractor's normalizer.
            validator: Overrides the extractor's validator.

        Returns:
            (lines, format) with exactly ``format.line_count`` lines of
            ``format.line_length`` characters, or None when no MRZ is found.
        """
        normalizer = normalizer or self.normalizer
        validator = validator or self.validator

        eep_candidates: List[TextCandidate] = []
        mrz_candidates: List[TextCandidate] = []
        for candidate in candidates:
            if validator.is_eep_line(candidate.text):
                eep_candidates.append(candidate)
            elif validator.is_mrz_line(candidate.text):
                mrz_candidates.append(candidate)

        logger.debug(
            f"Candidates: {len(candidates)} total, "
            f"{len(eep_candidates)} EEP, {len(mrz_candidates)} MRZ"
        )

        if eep_candidates:
            eep_line = self._select_eep_line(eep_candidates, normalizer, validator)
            if eep_line is not None:
                return [eep_line], DocumentFormat.EEP

        if not mrz_candidates:
            return None

        ordered = sorted(
            mrz_candidates,
            key=lambda candidate: candidate.vertical_position,
            reverse=self.config.higher_position_first,
        )
        texts = [candidate.text for candidate in ordered]

        document_format = self.detect_document_format(texts, normalizer)
        if document_format is None:
            logger.debug("No MRZ format matched the candidate lines")
            return None

        selected = texts[: document_format.line_count + self.config.spare_lines]
        if len(selected) < min(document_format.line_count, 2):
            logger.debug(
                f"{document_format.display_name}: only {len(selected)} candidate lines"
            )
            return None

        if document_format is DocumentFormat.EEP:
            normalized = [normalizer.clean_and_normalize_eep(text) for text in selected]
        else:
            normalized = [
                normalizer.normalize_length(
                    normalizer.clean_line(text), document_format.line_length
                )
                for text in selected
            ]

        logger.debug(f"Extracted {document_format.display_name} MRZ")
        return normalized[: document_format.line_count], document_format

    def _select_eep_line(
        self,
        eep_candidates: Sequence[TextCandidate],
        normalizer: MRZNormalizer,
        validator: MRZValidator,
    ) -> Optional[str]:
        # max() keeps the first candidate on equal confidence
        best = max(eep_candidates, key=lambda candidate: candidate.confidence)

        corrected = normalizer.clean_and_normalize_eep(best.text)
        if validator.validate_eep_mrz(corrected) or corrected.startswith(EEP_DOCUMENT_CODE):
            return corrected

        cleaned = normalizer.clean_eep_line(best.text)
        if len(cleaned) >= SHORT_LINE_RANGE[0] and cleaned.startswith("C"):
            return normalizer.normalize_length(cleaned, EEP_LINE_LENGTH)

        logger.debug(f"Rejected EEP candidate: {best.text}")
        return None

    def detect_document_format(
        self, texts: Sequence[str], normalizer: Optional[MRZNormalizer] = None
    ) -> Optional[DocumentFormat]:
        """Infer the MRZ format from candidate lines in reading order.

        Classification logic (first match wins):
        1. EEP prefix and width 28-32 → EEP
        2. "P" and width 42-46 → TD3
        3. "V" and width 42-46 → MRV-A
        4. "I"/"A"/"C" (not an EEP prefix) and width 28-32 → TD1
        5. Width 34-38 → MRV-B for "V", otherwise TD2
        6. Fallback on width and line count alone

        Args:
            texts: Candidate lines, first line first.
            normalizer: Overrides the extractor's normalizer.

        Returns:
            Detected DocumentFormat, or None if nothing fits.
        """
        if not texts:
            return None

        normalizer = normalizer or self.normalizer
        first = normalizer.clean_line(texts[0].replace(" ", ""))
        length = len(first)
        prefix = first[:2]
        single_line = len(texts) == 1
        short = _in_range(length, SHORT_LINE_RANGE)
        wide = _in_range(length, LONG_LINE_RANGE)

        if short and (
            prefix in EEP_PREFIXES
            or (
                single_line
                and first.startswith("C")
                and first[1:2] in tuple(EEP_SECOND_CHARACTERS)
            )
        ):
            return DocumentFormat.EEP
        if first.startswith("P") and wide:
            return DocumentFormat.TD3
        if first.startswith("V") and wide:
            return DocumentFormat.MRVA
        if first[:1] in tuple(ID_CARD_FIRST_CHARACTERS) and prefix not in EEP_PREFIXES and short:
            return DocumentFormat.TD1
        if _in_range(length, MEDIUM_LINE_RANGE):
            return DocumentFormat.MRVB if first.startswith("V") else DocumentFormat.TD2

        if len(texts) >= 2 and length >= LONG_LINE_RANGE[0]:
            return DocumentFormat.TD3
        if len(texts) >= 2 and length >= MEDIUM_LINE_RANGE[0]:
            return DocumentFormat.TD2
        if short:
            return DocumentFormat.EEP if single_line else DocumentFormat.TD1
        return None
