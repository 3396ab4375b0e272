"""MRZ parser manager composing extraction, format parsing and fallback.

This module orchestrates the complete MRZ parsing workflow:
    1. CANDIDATE WRAPPING: raw lines become positioned recognizer candidates
    2. EXTRACTION: MRZ line selection + document format detection
    3. FORMAT PARSING: fixed-offset field extraction + check digits
    4. DIRECT PARSING: fallback scan of the raw lines per format shape

Example:
    >>> from src.mrz import MRZParserManager
    >>> manager = MRZParserManager()
    >>> document = manager.parse_mrz([
    ...     "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
    ...     "L898902C36UTO7408122F1204159ZE184226B<<<<<10",
    ... ])
    >>> print(document.full_name)
    Anna Maria Eriksson
"""

import logging
from dataclasses import replace
from pathlib import Path
from types import MappingProxyType
from typing import List, Optional, Sequence, Tuple, Union

from src.utils.constants import (
    EEP_DOCUMENT_CODE,
    LONG_LINE_RANGE,
    MEDIUM_LINE_RANGE,
    MRZ_FILLER,
    SHORT_LINE_RANGE,
)

from .config_loader import Config, get_default_config, load_config
from .extractor import MRZExtractor
from .normalizer import MRZNormalizer
from .parsers import (
    parse_eep,
    parse_mrva,
    parse_mrvb,
    parse_td1,
    parse_td2,
    parse_td3,
)
from .types import DocumentFormat, ParsedDocument, TextCandidate, ValidationPolicy
from .validator import MRZValidator

logger = logging.getLogger(__name__)

FORMAT_PARSERS = MappingProxyType(
    {
        DocumentFormat.TD1: parse_td1,
        DocumentFormat.TD2: parse_td2,
        DocumentFormat.TD3: parse_td3,
        DocumentFormat.MRVA: parse_mrva,
        DocumentFormat.MRVB: parse_mrvb,
        DocumentFormat.EEP: parse_eep,
    }
)

TD1_FIRST_PREFIXES = ("I", "A", "C")
TD2_FIRST_PREFIXES = ("P", "I", "A", "C", "V")


class MRZParserManager:
    """Turns recognized text lines into a parsed MRZ document.

    The manager owns one normalizer, validator and extractor built from
    configuration. It keeps no per-parse state, so a single instance can
    serve concurrent callers.

    Args:
        config_path: Optional path to config YAML file. If None, uses default config.
        config: Already loaded configuration (takes precedence over config_path).

    Attributes:
        config: Full configuration object
        normalizer: Character normalizer
        validator: Line classifier
        extractor: Candidate selector and format detector
        policy: Default check digit policy
    """

    def __init__(
        self, config_path: Optional[Path] = None, config: Optional[Config] = None
    ):
        if config is not None:
            self.config: Config = config
        elif config_path is None:
            self.config = get_default_config()
        else:
            self.config = load_config(config_path)

        mrz_config = self.config.mrz
        self.normalizer = MRZNormalizer(mrz_config.normalizer)
        self.validator = MRZValidator(mrz_config.validator)
        self.extractor = MRZExtractor(
            mrz_config.extractor, normalizer=self.normalizer, validator=self.validator
        )
        self.policy = ValidationPolicy(mrz_config.parser.policy)

        logger.info(
            f"MRZParserManager initialized: policy={self.policy.value}, "
            f"eep_country_code={mrz_config.parser.eep_country_code}"
        )

    def _resolve_policy(
        self, policy: Optional[Union[ValidationPolicy, str]]
    ) -> ValidationPolicy:
        if policy is None:
            return self.policy
        return ValidationPolicy(policy)

    def parse_mrz(
        self,
        lines: Sequence[str],
        policy: Optional[Union[ValidationPolicy, str]] = None,
    ) -> Optional[ParsedDocument]:
        """Parse a document from raw text lines in reading order.

        Lines are wrapped as recognizer candidates with synthetic positions
        and the configured confidence, extracted and dispatched to their
        format parser. When extraction or parsing fails, the raw lines are
        scanned directly for each format's shape.

        Args:
            lines: Recognized text lines, first line first.
            policy: Check digit policy override for this call.

        Returns:
            ParsedDocument, or None if no format could be parsed.
        """
        resolved = self._resolve_policy(policy)
        if not lines:
            return None

        parser_config = self.config.mrz.parser
        higher_first = self.config.mrz.extractor.higher_position_first
        count = len(lines)
        candidates = [
            TextCandidate(
                text=text,
                vertical_position=float(count - index if higher_first else index),
                confidence=parser_config.synthetic_confidence,
            )
            for index, text in enumerate(lines)
        ]

        extracted = self.extractor.extract_mrz(candidates)
        if extracted is not None:
            mrz_lines, document_format = extracted
            document = self.parse_by_document_type(mrz_lines, document_format, resolved)
            if document is not None:
                return document
            logger.debug(
                f"{document_format.display_name} parse failed, trying direct parsing"
            )

        document = self._parse_direct(lines, resolved)
        if document is None:
            logger.info(f"No MRZ parsed from {count} lines")
        return document

    def parse_by_document_type(
        self,
        lines: Sequence[str],
        document_format: DocumentFormat,
        policy: Optional[Union[ValidationPolicy, str]] = None,
    ) -> Optional[ParsedDocument]:
        """Parse lines with the parser of a known format.

        Args:
            lines: MRZ lines of the given format.
            document_format: Format to parse as.
            policy: Check digit policy override for this call.

        Returns:
            ParsedDocument, or None if the lines do not parse as that format.
        """
        resolved = self._resolve_policy(policy)
        parser_config = self.config.mrz.parser
        parser = FORMAT_PARSERS[document_format]
        if document_format is DocumentFormat.EEP:
            document = parser(
                lines, resolved, self.normalizer, parser_config.eep_country_code
            )
        else:
            document = parser(lines, resolved, self.normalizer)

        if document is None:
            return None
        return replace(document, century_window=parser_config.century_window)

    def parse_candidates(
        self,
        candidates: Sequence[TextCandidate],
        policy: Optional[Union[ValidationPolicy, str]] = None,
    ) -> Optional[ParsedDocument]:
        """Parse a document from positioned recognizer candidates.

        The extractor runs on the candidates as reported. If it finds no
        parseable MRZ, the candidate texts that contain a filler or look like
        MRZ lines are passed to ``parse_mrz`` in reading order.

        Args:
            candidates: Every text line reported on the document.
            policy: Check digit policy override for this call.

        Returns:
            ParsedDocument, or None if no MRZ could be parsed.
        """
        resolved = self._resolve_policy(policy)

        extracted = self.extractor.extract_mrz(candidates)
        if extracted is not None:
            mrz_lines, document_format = extracted
            document = self.parse_by_document_type(mrz_lines, document_format, resolved)
            if document is not None:
                return document

        ordered = sorted(
            candidates,
            key=lambda candidate: candidate.vertical_position,
            reverse=self.config.mrz.extractor.higher_position_first,
        )
        texts = [
            candidate.text
            for candidate in ordered
            if MRZ_FILLER in candidate.text or self.validator.is_mrz_line(candidate.text)
        ]
        if not texts:
            logger.debug("No MRZ-like candidates")
            return None
        return self.parse_mrz(texts, resolved)

    # ------------------------------------------------------------------
    # Direct parsing fallback
    # ------------------------------------------------------------------

    def _parse_direct(
        self, lines: Sequence[str], policy: ValidationPolicy
    ) -> Optional[ParsedDocument]:
        cleaned = [self.normalizer.clean_line(line) for line in lines]

        for line in cleaned:
            if self.validator.is_eep_line(line):
                eep_line = self.normalizer.clean_and_normalize_eep(line)
                document = self.parse_by_document_type([eep_line], DocumentFormat.EEP, policy)
                if document is not None:
                    return document
                break

        searches = (
            (DocumentFormat.TD3, self._find_td3_lines),
            (DocumentFormat.TD1, self._find_td1_lines),
            (DocumentFormat.TD2, self._find_td2_lines),
        )
        for document_format, find_lines in searches:
            found = find_lines(cleaned)
            if found is None:
                continue
            document = self.parse_by_document_type(found, document_format, policy)
            if document is not None:
                logger.debug(f"Direct parsing matched {document_format.display_name}")
                return document

        return None

    def _shaped_lines(
        self, lines: Sequence[str], bounds: Tuple[int, int], width: int
    ) -> List[str]:
        return [
            self.normalizer.normalize_length(line, width)
            for line in lines
            if bounds[0] <= len(line) <= bounds[1]
        ]

    def _find_td3_lines(self, lines: Sequence[str]) -> Optional[List[str]]:
        shaped = self._shaped_lines(lines, LONG_LINE_RANGE, DocumentFormat.TD3.line_length)
        for index, line in enumerate(shaped[:-1]):
            if line.startswith("P"):
                return shaped[index : index + 2]
        return None

    def _find_td1_lines(self, lines: Sequence[str]) -> Optional[List[str]]:
        shaped = self._shaped_lines(
            [line for line in lines if not self.validator.is_eep_line(line)],
            SHORT_LINE_RANGE,
            DocumentFormat.TD1.line_length,
        )
        for index, line in enumerate(shaped[:-2]):
            if line.startswith(TD1_FIRST_PREFIXES) and not line.startswith(EEP_DOCUMENT_CODE):
                return shaped[index : index + 3]
        return None

    def _find_td2_lines(self, lines: Sequence[str]) -> Optional[List[str]]:
        shaped = self._shaped_lines(lines, MEDIUM_LINE_RANGE, DocumentFormat.TD2.line_length)
        for index, line in enumerate(shaped[:-1]):
            if line.startswith(TD2_FIRST_PREFIXES):
                return shaped[index : index + 2]
        return None

    def get_processing_stats(self) -> dict:
        """Get manager statistics.

        Returns:
            Dictionary with manager configuration and supported formats
        """
        mrz_config = self.config.mrz
        return {
            "policy": self.policy.value,
            "supported_formats": [
                document_format.display_name for document_format in DocumentFormat
            ],
            "synthetic_confidence": mrz_config.parser.synthetic_confidence,
            "eep_country_code": mrz_config.parser.eep_country_code,
            "spare_lines": mrz_config.extractor.spare_lines,
            "higher_position_first": mrz_config.extractor.higher_position_first,
            "validator": {
                "min_line_length": mrz_config.validator.min_line_length,
                "max_line_length": mrz_config.validator.max_line_length,
                "min_valid_char_ratio": mrz_config.validator.min_valid_char_ratio,
            },
        }
