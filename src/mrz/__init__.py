"""MRZ Recognition & Parsing.

This module turns text lines read from an identity or travel document into a
structured record, following the ICAO 9303 machine readable zone formats
(TD1, TD2, TD3, MRV-A, MRV-B) and the China Exit-Entry Permit.

Core Components:
    - types: Data structures (DocumentFormat, ParsedDocument, etc.)
    - config_loader: Configuration loading with Pydantic validation
    - normalizer: OCR look-alike substitution and zone corrections
    - validator: ICAO 9303 check digits and MRZ line classification
    - extractor: Candidate line selection and format detection
    - parsers: Fixed-offset field extraction per format
    - line_parsers: Single-line parsers for chip-sourced text
    - processor: Parser manager with direct-parsing fallback

Example:
    >>> from src.mrz import MRZParserManager
    >>> manager = MRZParserManager()
    >>> document = manager.parse_mrz(lines)
    >>> if document is not None:
    ...     print(f"Document number: {document.document_number}")
"""

from .config_loader import (
    CharacterRulesConfig,
    Config,
    ExtractorConfig,
    MRZModuleConfig,
    NormalizerConfig,
    ParserConfig,
    ValidatorConfig,
    get_default_config,
    load_config,
)
from .extractor import MRZExtractor
from .layouts import LAYOUTS, CheckedField, FieldSpan, FormatLayout
from .line_parsers import EepLineParser, MRZLineParser, Td3LineParser
from .normalizer import MRZNormalizer
from .parsers import (
    parse_document,
    parse_eep,
    parse_mrva,
    parse_mrvb,
    parse_td1,
    parse_td2,
    parse_td3,
)
from .processor import MRZParserManager
from .types import (
    CheckDigitReport,
    DocumentFormat,
    ParsedDocument,
    TextCandidate,
    ValidationPolicy,
)
from .validator import (
    MRZValidator,
    calculate_check_digit,
    compute_mrz_key,
    expand_date,
    is_valid_date,
    verify_check_digit,
)

__all__ = [
    # Types
    "DocumentFormat",
    "ValidationPolicy",
    "TextCandidate",
    "CheckDigitReport",
    "ParsedDocument",
    # Configuration
    "Config",
    "MRZModuleConfig",
    "NormalizerConfig",
    "CharacterRulesConfig",
    "ValidatorConfig",
    "ExtractorConfig",
    "ParserConfig",
    "load_config",
    "get_default_config",
    # Validation
    "MRZValidator",
    "calculate_check_digit",
    "verify_check_digit",
    "is_valid_date",
    "expand_date",
    "compute_mrz_key",
    # Normalization
    "MRZNormalizer",
    # Extraction
    "MRZExtractor",
    # Parsing
    "FieldSpan",
    "CheckedField",
    "FormatLayout",
    "LAYOUTS",
    "parse_document",
    "parse_td1",
    "parse_td2",
    "parse_td3",
    "parse_mrva",
    "parse_mrvb",
    "parse_eep",
    "MRZLineParser",
    "Td3LineParser",
    "EepLineParser",
    "MRZParserManager",
]
