"""Configuration loader with Pydantic validation for MRZ module.

This module provides type-safe configuration loading from YAML files using
Pydantic models for validation and default values.
"""

from pathlib import Path
from typing import Dict, Literal, Tuple

import yaml
from pydantic import BaseModel, Field


class CharacterRulesConfig(BaseModel):
    """Character substitution tables.

    Attributes:
        ocr_substitutions: OCR look-alike symbols mapped to MRZ characters
        letter_to_digit: Corrections for numeric zones (dates, check digits)
        digit_to_letter: Corrections for alphabetic zones (document codes)
    """

    ocr_substitutions: Dict[str, str] = {
        "«": "<",
        "»": "<",
        "‹": "<",
        "›": "<",
        "|": "<",
        "¦": "<",
        " ": "<",
        "Ć": "C",
        "Ś": "S",
        "$": "S",
        "§": "S",
    }
    letter_to_digit: Dict[str, str] = {
        "O": "0",
        "Q": "0",
        "D": "0",
        "I": "1",
        "L": "1",
        "Z": "2",
        "S": "5",
        "B": "8",
    }
    digit_to_letter: Dict[str, str] = {
        "0": "O",
        "1": "I",
        "2": "Z",
        "5": "S",
        "8": "B",
    }


class NormalizerConfig(BaseModel):
    """Text normalization configuration.

    Attributes:
        filler: MRZ padding character
        eep_prefix_repairs: Misread EEP prefixes rewritten to "CS"
        rules: Character substitution tables
    """

    filler: str = Field(default="<", min_length=1, max_length=1)
    eep_prefix_repairs: Tuple[str, ...] = ("C5", "C$", "C8")
    rules: CharacterRulesConfig = CharacterRulesConfig()


class ValidatorConfig(BaseModel):
    """Line classification thresholds.

    Attributes:
        min_line_length: Shortest line accepted as MRZ (after space removal)
        max_line_length: Longest line accepted as MRZ
        min_valid_char_ratio: Minimum share of MRZ-alphabet characters
        loose_valid_char_ratio: Share required when no structural pattern matches
        passport_line2_min_length: Minimum width of a passport data line
        eep_min_length: Shortest EEP line
        eep_max_length: Longest EEP line
        eep_min_digits: Minimum digits in an EEP or passport data line
        generic_min_digits: Minimum digits for the generic date pattern
    """

    min_line_length: int = Field(default=28, gt=0)
    max_line_length: int = Field(default=46, gt=0)
    min_valid_char_ratio: float = Field(default=0.85, ge=0.0, le=1.0)
    loose_valid_char_ratio: float = Field(default=0.90, ge=0.0, le=1.0)
    passport_line2_min_length: int = Field(default=42, gt=0)
    eep_min_length: int = Field(default=28, gt=0)
    eep_max_length: int = Field(default=32, gt=0)
    eep_min_digits: int = Field(default=10, ge=0)
    generic_min_digits: int = Field(default=6, ge=0)


class ExtractorConfig(BaseModel):
    """Candidate selection configuration.

    Attributes:
        spare_lines: Extra candidates taken beyond the format's line count
        higher_position_first: True when a larger vertical position means
            earlier in reading order (bottom-left origin)
    """

    spare_lines: int = Field(default=1, ge=0)
    higher_position_first: bool = True


class ParserConfig(BaseModel):
    """Format parsing configuration.

    Attributes:
        policy: Check digit policy ("lenient" for OCR, "strict" for chip text)
        synthetic_confidence: Confidence assigned to caller-supplied raw lines
        eep_country_code: Issuing country and nationality of EEP documents
        century_window: Years past the current year read as 20xx
    """

    policy: Literal["lenient", "strict"] = "lenient"
    synthetic_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    eep_country_code: str = Field(default="CHN", min_length=3, max_length=3)
    century_window: int = Field(default=10, ge=0, le=99)


class MRZModuleConfig(BaseModel):
    """Complete MRZ module configuration.

    Attributes:
        normalizer: Text normalization configuration
        validator: Line classification thresholds
        extractor: Candidate selection configuration
        parser: Format parsing configuration
    """

    normalizer: NormalizerConfig = NormalizerConfig()
    validator: ValidatorConfig = ValidatorConfig()
    extractor: ExtractorConfig = ExtractorConfig()
    parser: ParserConfig = ParserConfig()


class Config(BaseModel):
    """Root configuration container.

    Attributes:
        mrz: MRZ module configuration
    """

    mrz: MRZModuleConfig = MRZModuleConfig()


def load_config(config_path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Both a flat file (sections at the top level) and a file nesting the
    sections under an ``mrz`` key are accepted.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated Config object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/mrz/config.yaml"))
        >>> print(config.mrz.validator.min_valid_char_ratio)
        0.85
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    if "mrz" in config_dict:
        return Config(**config_dict)

    # Wrap flat YAML structure in 'mrz' key for Config model
    return Config(mrz=MRZModuleConfig(**config_dict))


def get_default_config() -> Config:
    """Get default configuration from bundled config.yaml file.

    Returns:
        Config object loaded from src/mrz/config.yaml

    Example:
        >>> config = get_default_config()
        >>> print(config.mrz.parser.policy)
        lenient
    """
    default_config_path = Path(__file__).parent / "config.yaml"
    if default_config_path.exists():
        return load_config(default_config_path)
    else:
        # Fallback to hardcoded defaults if config file is missing
        return Config()
