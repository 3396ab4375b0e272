"""Unit tests for MRZ type definitions."""

from dataclasses import FrozenInstanceError, replace

import pytest

from src.mrz.types import (
    CheckDigitReport,
    DocumentFormat,
    ParsedDocument,
    TextCandidate,
    ValidationPolicy,
)


@pytest.fixture
def passport():
    """ParsedDocument matching the ICAO specimen passport."""
    return ParsedDocument(
        document_format=DocumentFormat.TD3,
        country_code="UTO",
        surname="Eriksson",
        given_names="Anna Maria",
        document_number="L898902C3",
        nationality="UTO",
        date_of_birth="740812",
        sex="Female",
        expiry_date="120415",
        personal_number="ZE184226B",
        raw_lines=(
            "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
            "L898902C36UTO7408122F1204159ZE184226B<<<<<10",
        ),
        check_digits=CheckDigitReport(True, True, True),
    )


class TestDocumentFormat:
    """Test DocumentFormat geometry."""

    @pytest.mark.parametrize(
        "document_format,line_count,line_length",
        [
            (DocumentFormat.TD1, 3, 30),
            (DocumentFormat.TD2, 2, 36),
            (DocumentFormat.TD3, 2, 44),
            (DocumentFormat.MRVA, 2, 44),
            (DocumentFormat.MRVB, 2, 36),
            (DocumentFormat.EEP, 1, 30),
        ],
    )
    def test_geometry(self, document_format, line_count, line_length):
        assert document_format.line_count == line_count
        assert document_format.line_length == line_length

    def test_display_names(self):
        assert DocumentFormat.TD3.display_name == "Passport (TD3)"
        assert DocumentFormat.MRVA.display_name == "Visa Type A (MRV-A)"
        assert DocumentFormat.EEP.display_name == "Exit-Entry Permit (EEP)"

    def test_value_lookup(self):
        assert DocumentFormat("td1") is DocumentFormat.TD1

    def test_closed_set(self):
        assert len(DocumentFormat) == 6


class TestValidationPolicy:
    """Test ValidationPolicy enum."""

    def test_values(self):
        assert ValidationPolicy("lenient") is ValidationPolicy.LENIENT
        assert ValidationPolicy("strict") is ValidationPolicy.STRICT

    def test_unknown_value(self):
        with pytest.raises(ValueError):
            ValidationPolicy("paranoid")


class TestTextCandidate:
    """Test TextCandidate dataclass."""

    def test_default_confidence(self):
        candidate = TextCandidate("P<UTO", 1.0)
        assert candidate.confidence == 1.0

    def test_frozen(self):
        candidate = TextCandidate("P<UTO", 1.0, 0.8)
        with pytest.raises(FrozenInstanceError):
            candidate.text = "X"


class TestCheckDigitReport:
    """Test CheckDigitReport aggregation."""

    def test_all_valid(self):
        assert CheckDigitReport(True, True, True).all_valid is True

    @pytest.mark.parametrize(
        "fields",
        [
            (False, True, True, True, True),
            (True, False, True, True, True),
            (True, True, False, True, True),
            (True, True, True, False, True),
            (True, True, True, True, False),
        ],
    )
    def test_any_failure(self, fields):
        assert CheckDigitReport(*fields).all_valid is False


class TestParsedDocument:
    """Test ParsedDocument helpers."""

    def test_document_type(self, passport):
        assert passport.document_type == "Passport (TD3)"

    def test_full_name(self, passport):
        assert passport.full_name == "Anna Maria Eriksson"

    def test_full_name_without_names(self, passport):
        nameless = replace(passport, surname="", given_names="")
        assert nameless.full_name == ""

    def test_formatted_dates(self, passport):
        assert passport.formatted_date_of_birth == "12/08/1974"
        assert passport.formatted_expiry_date == "15/04/2012"

    def test_formatted_invalid_date(self, passport):
        broken = replace(passport, date_of_birth="991301")
        assert broken.formatted_date_of_birth is None

    def test_has_required_fields(self, passport):
        assert passport.has_required_fields is True
        assert replace(passport, document_number="").has_required_fields is False

    def test_mrz_key(self, passport):
        assert passport.mrz_key == "L898902C3674081221204159"

    def test_to_extras(self, passport):
        extras = passport.to_extras()
        assert extras == {
            "DOCUMENT_NUMBER": "L898902C3",
            "DATE_OF_BIRTH": "740812",
            "EXPIRY_DATE": "120415",
            "MRZ_LINES": "\n".join(passport.raw_lines),
            "DOCUMENT_TYPE": "Passport (TD3)",
        }

    def test_str(self, passport):
        text = str(passport)
        assert "Document Type: Passport (TD3)" in text
        assert "Full Name: Anna Maria Eriksson" in text
        assert "Date of Birth: 12/08/1974" in text
        assert "L898902C36UTO7408122F1204159ZE184226B<<<<<10" in text

    def test_str_missing_values(self, passport):
        text = str(replace(passport, personal_number=None, sex=""))
        assert "Personal Number: -" in text
        assert "Sex: -" in text

    def test_frozen(self, passport):
        with pytest.raises(FrozenInstanceError):
            passport.surname = "Other"
