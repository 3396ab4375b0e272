"""Unit tests for MRZ configuration loader."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.mrz.config_loader import (
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


class TestNormalizerConfig:
    """Test NormalizerConfig model."""

    def test_default_values(self):
        config = NormalizerConfig()
        assert config.filler == "<"
        assert config.eep_prefix_repairs == ("C5", "C$", "C8")
        assert config.rules.ocr_substitutions["«"] == "<"
        assert config.rules.letter_to_digit["O"] == "0"
        assert config.rules.digit_to_letter["8"] == "B"

    def test_filler_single_character(self):
        with pytest.raises(ValidationError):
            NormalizerConfig(filler="<<")

    def test_custom_rules(self):
        rules = CharacterRulesConfig(digit_to_letter={"6": "G"})
        assert NormalizerConfig(rules=rules).rules.digit_to_letter == {"6": "G"}


class TestValidatorConfig:
    """Test ValidatorConfig model with validation."""

    def test_default_values(self):
        config = ValidatorConfig()
        assert config.min_line_length == 28
        assert config.max_line_length == 46
        assert config.min_valid_char_ratio == 0.85
        assert config.loose_valid_char_ratio == 0.90
        assert config.eep_min_digits == 10
        assert config.generic_min_digits == 6

    def test_ratio_out_of_range(self):
        with pytest.raises(ValidationError):
            ValidatorConfig(min_valid_char_ratio=1.5)

        with pytest.raises(ValidationError):
            ValidatorConfig(loose_valid_char_ratio=-0.1)

    def test_non_positive_length(self):
        with pytest.raises(ValidationError):
            ValidatorConfig(min_line_length=0)


class TestExtractorConfig:
    """Test ExtractorConfig model."""

    def test_default_values(self):
        config = ExtractorConfig()
        assert config.spare_lines == 1
        assert config.higher_position_first is True

    def test_negative_spare_lines(self):
        with pytest.raises(ValidationError):
            ExtractorConfig(spare_lines=-1)


class TestParserConfig:
    """Test ParserConfig model."""

    def test_default_values(self):
        config = ParserConfig()
        assert config.policy == "lenient"
        assert config.synthetic_confidence == 0.9
        assert config.eep_country_code == "CHN"
        assert config.century_window == 10

    def test_unknown_policy(self):
        with pytest.raises(ValidationError):
            ParserConfig(policy="paranoid")

    def test_country_code_length(self):
        with pytest.raises(ValidationError):
            ParserConfig(eep_country_code="CN")


class TestLoadConfig:
    """Test YAML configuration loading."""

    def test_flat_yaml(self, tmp_path):
        """Test flat file wrapped in the 'mrz' key."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump(
                {"parser": {"policy": "strict"}, "extractor": {"spare_lines": 2}}
            ),
            encoding="utf-8",
        )

        config = load_config(config_path)

        assert isinstance(config, Config)
        assert config.mrz.parser.policy == "strict"
        assert config.mrz.extractor.spare_lines == 2
        # Unspecified sections keep defaults
        assert config.mrz.validator.min_line_length == 28

    def test_nested_yaml(self, tmp_path):
        """Test file that already nests sections under 'mrz'."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump({"mrz": {"extractor": {"higher_position_first": False}}}),
            encoding="utf-8",
        )

        config = load_config(config_path)

        assert config.mrz.extractor.higher_position_first is False

    def test_empty_yaml(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(config_path) == Config()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "broken.yaml"
        config_path.write_text("parser: [unclosed", encoding="utf-8")

        with pytest.raises(yaml.YAMLError):
            load_config(config_path)

    def test_invalid_value(self, tmp_path):
        config_path = tmp_path / "invalid.yaml"
        config_path.write_text(
            yaml.safe_dump({"validator": {"min_valid_char_ratio": 2.0}}),
            encoding="utf-8",
        )

        with pytest.raises(ValidationError):
            load_config(config_path)


class TestDefaultConfig:
    """Test bundled default configuration."""

    def test_bundled_file_exists(self):
        bundled = Path(__file__).resolve().parents[2] / "src" / "mrz" / "config.yaml"
        assert bundled.exists()

    def test_matches_model_defaults(self):
        """Test that the bundled YAML restates the model defaults."""
        assert get_default_config().mrz == MRZModuleConfig()

    def test_default_policy(self):
        assert get_default_config().mrz.parser.policy == "lenient"
