"""Integration tests for the MRZ parser manager."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.mrz.config_loader import (
    Config,
    ExtractorConfig,
    MRZModuleConfig,
    ParserConfig,
)
from src.mrz.processor import MRZParserManager
from src.mrz.types import DocumentFormat, TextCandidate, ValidationPolicy
from src.mrz.validator import expand_date


@pytest.fixture
def manager():
    """Create MRZParserManager with default configuration."""
    return MRZParserManager()


def _manager_with(**sections):
    return MRZParserManager(config=Config(mrz=MRZModuleConfig(**sections)))


class TestParseMrz:
    """Test parsing of raw lines in reading order."""

    @pytest.mark.parametrize(
        "fixture_name,document_format",
        [
            ("td1_lines", DocumentFormat.TD1),
            ("td2_lines", DocumentFormat.TD2),
            ("td3_lines", DocumentFormat.TD3),
            ("mrva_lines", DocumentFormat.MRVA),
            ("mrvb_lines", DocumentFormat.MRVB),
        ],
    )
    def test_every_format(self, request, manager, fixture_name, document_format):
        lines = request.getfixturevalue(fixture_name)
        document = manager.parse_mrz(lines)

        assert document is not None
        assert document.document_format is document_format
        assert document.raw_lines == tuple(lines)

    def test_passport(self, manager, td3_lines):
        document = manager.parse_mrz(td3_lines)

        assert document.full_name == "Anna Maria Eriksson"
        assert document.document_number == "L898902C3"
        assert document.formatted_date_of_birth == "12/08/1974"
        assert document.check_digits.all_valid is True

    def test_eep(self, manager, eep_line):
        document = manager.parse_mrz([eep_line])

        assert document.document_format is DocumentFormat.EEP
        assert document.document_number == "C12345678"
        assert document.country_code == "CHN"

    def test_noise_lines_ignored(self, manager, td3_lines):
        lines = ["REPUBLIC OF UTOPIA", "PASSPORT / PASSEPORT"] + td3_lines
        document = manager.parse_mrz(lines)
        assert document.document_format is DocumentFormat.TD3

    def test_eep_wins_over_other_lines(self, manager, td3_lines, eep_line):
        document = manager.parse_mrz(td3_lines + ["HONG KONG", eep_line])
        assert document.document_format is DocumentFormat.EEP

    def test_direct_parsing_after_failed_detection(self, manager, td1_lines, td3_lines):
        """Test a stray ID card line ahead of a passport MRZ."""
        document = manager.parse_mrz([td1_lines[0]] + td3_lines)

        assert document is not None
        assert document.document_format is DocumentFormat.TD3
        assert document.document_number == "L898902C3"

    def test_overlong_passport_line(self, manager, td3_lines):
        """Test a 46-character first line is cut to the passport width."""
        document = manager.parse_mrz([td3_lines[0] + "<<", td3_lines[1]])

        assert document.document_format is DocumentFormat.TD3
        assert document.raw_lines[0] == td3_lines[0]

    def test_failure_logged(self, manager, caplog):
        with caplog.at_level(logging.INFO, logger="src.mrz.processor"):
            assert manager.parse_mrz(["HELLO WORLD"]) is None
        assert "No MRZ parsed from 1 lines" in caplog.text

    def test_invalid_date(self, manager, td3_lines):
        line2 = td3_lines[1].replace("740812", "991301")
        assert manager.parse_mrz([td3_lines[0], line2]) is None

    def test_empty_input(self, manager):
        assert manager.parse_mrz([]) is None

    def test_unrecognizable_input(self, manager):
        assert manager.parse_mrz(["HELLO WORLD", "NOT AN MRZ"]) is None

    def test_policy_override(self, manager, td3_lines):
        line2 = "L898902C35" + td3_lines[1][10:]
        lines = [td3_lines[0], line2]

        lenient = manager.parse_mrz(lines)
        assert lenient.check_digits.document_number is False

        assert manager.parse_mrz(lines, policy="strict") is None
        assert manager.parse_mrz(lines, policy=ValidationPolicy.STRICT) is None

    def test_strict_rejects_wrong_eep_expiry_check(self, manager, eep_line):
        """Test a zero expiry check digit that does not match (correct is 9)."""
        line = eep_line[:19] + "0" + eep_line[20:]

        assert manager.parse_mrz([line], policy=ValidationPolicy.STRICT) is None
        document = manager.parse_mrz([line])
        assert document.check_digits.expiry_date is False

    def test_unknown_policy(self, manager, td3_lines):
        with pytest.raises(ValueError):
            manager.parse_mrz(td3_lines, policy="paranoid")

    def test_top_left_origin(self, td3_lines):
        manager = _manager_with(extractor=ExtractorConfig(higher_position_first=False))
        document = manager.parse_mrz(td3_lines)
        assert document.document_format is DocumentFormat.TD3
        assert document.surname == "Eriksson"

    def test_eep_country_code_from_config(self, eep_line):
        manager = _manager_with(parser=ParserConfig(eep_country_code="MAC"))
        document = manager.parse_mrz([eep_line])
        assert document.country_code == "MAC"
        assert document.nationality == "MAC"

    def test_century_window_from_config(self, eep_line):
        manager = _manager_with(parser=ParserConfig(century_window=0))
        document = manager.parse_mrz([eep_line])

        expected = expand_date("300101", century_window=0)
        assert document.century_window == 0
        assert document.formatted_expiry_date == expected.strftime("%d/%m/%Y")

    def test_concurrent_callers(self, manager, td1_lines, td2_lines, td3_lines, eep_line):
        inputs = [td1_lines, td2_lines, td3_lines, [eep_line]] * 8
        expected = [manager.parse_mrz(lines) for lines in inputs]

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(manager.parse_mrz, inputs))

        assert results == expected


class TestParseByDocumentType:
    """Test dispatch to a known format."""

    def test_known_format(self, manager, td1_lines):
        document = manager.parse_by_document_type(td1_lines, DocumentFormat.TD1)
        assert document.document_number == "D23145890"

    def test_wrong_format(self, manager, td3_lines):
        assert manager.parse_by_document_type(td3_lines, DocumentFormat.TD1) is None


class TestParseCandidates:
    """Test parsing of positioned recognizer candidates."""

    def test_positioned_candidates(self, manager, td3_lines):
        candidates = [
            TextCandidate(td3_lines[1], 10.0, 0.8),
            TextCandidate("PASSPORT", 300.0, 0.99),
            TextCandidate(td3_lines[0], 20.0, 0.8),
        ]
        document = manager.parse_candidates(candidates)
        assert document.document_format is DocumentFormat.TD3
        assert document.given_names == "Anna Maria"

    def test_fallback_to_line_parsing(self, manager, td1_lines, td3_lines):
        candidates = [
            TextCandidate(td1_lines[0], 3.0),
            TextCandidate(td3_lines[0], 2.0),
            TextCandidate(td3_lines[1], 1.0),
        ]
        document = manager.parse_candidates(candidates)
        assert document.document_format is DocumentFormat.TD3

    def test_no_mrz(self, manager):
        candidates = [TextCandidate("PASSPORT", 2.0), TextCandidate("UTOPIA", 1.0)]
        assert manager.parse_candidates(candidates) is None


class TestDirectParsing:
    """Test the shape-based fallback scan."""

    def test_td1(self, manager, td1_lines):
        document = manager._parse_direct(td1_lines, ValidationPolicy.LENIENT)
        assert document.document_format is DocumentFormat.TD1

    def test_td2(self, manager, td2_lines):
        document = manager._parse_direct(td2_lines, ValidationPolicy.LENIENT)
        assert document.document_format is DocumentFormat.TD2

    def test_type_b_visa_reads_as_td2(self, manager, mrvb_lines):
        document = manager._parse_direct(mrvb_lines, ValidationPolicy.LENIENT)
        assert document.document_format is DocumentFormat.TD2
        assert document.document_number == "L8988901C"

    def test_eep_first(self, manager, eep_line, td3_lines):
        document = manager._parse_direct(td3_lines + [eep_line], ValidationPolicy.LENIENT)
        assert document.document_format is DocumentFormat.EEP

    def test_passport_needs_successor(self, manager, td3_lines):
        assert manager._parse_direct(td3_lines[:1], ValidationPolicy.LENIENT) is None


class TestManagerConfiguration:
    """Test manager construction and statistics."""

    def test_default_policy(self, manager):
        assert manager.policy is ValidationPolicy.LENIENT

    def test_config_path(self, tmp_path, td3_lines):
        config_file = tmp_path / "mrz.yaml"
        config_file.write_text("parser:\n  policy: strict\n", encoding="utf-8")

        manager = MRZParserManager(config_path=config_file)

        assert manager.policy is ValidationPolicy.STRICT
        line2 = "L898902C35" + td3_lines[1][10:]
        assert manager.parse_mrz([td3_lines[0], line2]) is None

    def test_missing_config_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MRZParserManager(config_path=tmp_path / "missing.yaml")

    def test_processing_stats(self, manager):
        stats = manager.get_processing_stats()

        assert stats["policy"] == "lenient"
        assert len(stats["supported_formats"]) == 6
        assert "Passport (TD3)" in stats["supported_formats"]
        assert stats["eep_country_code"] == "CHN"
        assert stats["validator"]["min_line_length"] == 28
