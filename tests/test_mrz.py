"""Tests for TD1 MRZ decoding and check digits."""

import datetime
import random

import pytest

from idscan.errors import FormatError
from idscan.mrz.td1 import (
    MRZDate,
    decode_td1,
    expand_year,
    mrz_lines_from_text,
)
from idscan.mrz.checksum import compute_check_digit, verify_check_digits


# ICAO 9303 part 5 TD1 specimen
SPECIMEN = [
    "I<UTOD231458907<<<<<<<<<<<<<<<",
    "7408122F1204159UTO<<<<<<<<<<<6",
    "ERIKSSON<<ANNA<MARIA<<<<<<<<<<",
]

TODAY = datetime.date(2026, 10, 19)


def _line2_with_years(birth_yy: str, expiry_yy: str) -> str:
    return f"{birth_yy}08122F{expiry_yy}04159UTO<<<<<<<<<<<6"


class TestDecodeSpecimen:
    """Field extraction on the ICAO specimen."""

    def test_line1_fields(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        assert record.document_type == "I"
        assert record.issuing_country == "UTO"
        assert record.document_number == "D23145890"
        assert record.document_number_check_digit == "7"
        assert record.optional_data_1 == ""

    def test_line2_fields(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        assert record.birth_date == MRZDate(raw="740812", year=1974, month=8, day=12)
        assert record.birth_date_check_digit == "2"
        assert record.sex == "F"
        assert record.expiration_date == MRZDate(raw="120415", year=2012, month=4, day=15)
        assert record.expiration_date_check_digit == "9"
        assert record.nationality == "UTO"
        assert record.optional_data_2 == ""
        assert record.composite_check_digit == "6"

    def test_names(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        assert record.names.surname == "ERIKSSON"
        assert record.names.given_names == ("ANNA", "MARIA")

    def test_dates_convert(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        assert record.birth_date.as_date() == datetime.date(1974, 8, 12)
        assert record.expiration_date.isoformat() == "2012-04-15"

    def test_to_dict(self) -> None:
        data = decode_td1(SPECIMEN, today=TODAY).to_dict()
        assert data["birth_date"] == "1974-08-12"
        assert data["names"] == {"surname": "ERIKSSON", "given_names": ["ANNA", "MARIA"]}
        assert data["document_number"] == "D23145890"

    def test_record_is_immutable(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        with pytest.raises(AttributeError):
            record.sex = "M"


class TestFillerHandling:
    """Filler characters are deleted everywhere, not just trimmed."""

    def test_internal_filler_removed(self) -> None:
        lines = [
            "IDARE" + "AB<12<345" + "1" + "OPT<DATA".ljust(15, "<"),
            SPECIMEN[1],
            SPECIMEN[2],
        ]
        record = decode_td1(lines, today=TODAY)
        assert record.document_number == "AB12345"
        assert record.optional_data_1 == "OPTDATA"
        assert record.document_type == "ID"
        assert record.issuing_country == "ARE"

    def test_optional_data_2(self) -> None:
        line2 = "7408122F1204159UTO" + "12<34<<<<<<" + "6"
        record = decode_td1([SPECIMEN[0], line2, SPECIMEN[2]], today=TODAY)
        assert record.optional_data_2 == "1234"

    def test_name_parsing(self) -> None:
        line3 = "SMITH<<JOHN<PAUL".ljust(30, "<")
        record = decode_td1([SPECIMEN[0], SPECIMEN[1], line3], today=TODAY)
        assert record.names.surname == "SMITH"
        assert record.names.given_names == ("JOHN", "PAUL")

    def test_compound_surname(self) -> None:
        line3 = "VAN<DER<BERG<<ANNA".ljust(30, "<")
        record = decode_td1([SPECIMEN[0], SPECIMEN[1], line3], today=TODAY)
        assert record.names.surname == "VAN DER BERG"
        assert record.names.given_names == ("ANNA",)

    def test_surname_only(self) -> None:
        line3 = "MADONNA".ljust(30, "<")
        record = decode_td1([SPECIMEN[0], SPECIMEN[1], line3], today=TODAY)
        assert record.names.surname == "MADONNA"
        assert record.names.given_names == ()


class TestFormatErrors:
    """Shape violations raise FormatError."""

    @pytest.mark.parametrize("lines", [
        [],
        SPECIMEN[:2],
        SPECIMEN + ["<" * 30],
    ])
    def test_wrong_line_count(self, lines) -> None:
        with pytest.raises(FormatError, match="3 lines"):
            decode_td1(lines, today=TODAY)

    @pytest.mark.parametrize("index,line", [
        (0, SPECIMEN[0][:29]),
        (1, SPECIMEN[1] + "<"),
        (2, ""),
    ])
    def test_wrong_line_length(self, index: int, line: str) -> None:
        lines = list(SPECIMEN)
        lines[index] = line
        with pytest.raises(FormatError, match=f"line {index + 1}"):
            decode_td1(lines, today=TODAY)

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            decode_td1(SPECIMEN[:1], today=TODAY)


class TestYearExpansion:
    """Two-digit years above the current one belong to the 1900s."""

    def test_equal_to_current_year(self) -> None:
        assert expand_year(26, TODAY) == 2026

    def test_one_above_current_year(self) -> None:
        assert expand_year(27, TODAY) == 1927

    def test_one_below_current_year(self) -> None:
        assert expand_year(25, TODAY) == 2025

    def test_extremes(self) -> None:
        assert expand_year(0, TODAY) == 2000
        assert expand_year(99, TODAY) == 1999

    def test_decoder_uses_rule(self) -> None:
        record = decode_td1(
            [SPECIMEN[0], _line2_with_years("27", "26"), SPECIMEN[2]], today=TODAY
        )
        assert record.birth_date.year == 1927
        assert record.expiration_date.year == 2026

    def test_defaults_to_today(self) -> None:
        current = datetime.date.today().year % 100
        assert expand_year(current) == 2000 + current


class TestLenientDates:
    """Dates are not calendar-validated during decoding."""

    def test_invalid_month_decodes(self) -> None:
        record = decode_td1(
            [SPECIMEN[0], "7413322F1204159UTO<<<<<<<<<<<6", SPECIMEN[2]], today=TODAY
        )
        assert record.birth_date.month == 13
        assert record.birth_date.isoformat() == "1974-13-32"
        with pytest.raises(ValueError):
            record.birth_date.as_date()

    def test_non_numeric_date_decodes(self) -> None:
        record = decode_td1(
            [SPECIMEN[0], "74O8122F1204159UTO<<<<<<<<<<<6", SPECIMEN[2]], today=TODAY
        )
        assert record.birth_date.year is None
        assert record.birth_date.raw == "74O812"
        assert record.birth_date.isoformat() == "74O812"
        with pytest.raises(ValueError):
            record.birth_date.as_date()


def test_any_30_char_lines_decode() -> None:
    """Every well-shaped input decodes and fields equal their stripped spans."""
    rng = random.Random(7)
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789<"
    for _ in range(50):
        lines = ["".join(rng.choice(alphabet) for _ in range(30)) for _ in range(3)]
        record = decode_td1(lines, today=TODAY)
        assert record.document_number == lines[0][5:14].replace("<", "")
        assert record.optional_data_1 == lines[0][15:30].replace("<", "")
        assert record.sex == lines[1][7]
        assert record.nationality == lines[1][15:18].replace("<", "")
        assert record.optional_data_2 == lines[1][18:29].replace("<", "")


class TestMrzLinesFromText:
    """Selecting MRZ lines out of OCR text."""

    def test_takes_last_three_lines(self) -> None:
        text = "UNITED ARAB EMIRATES\nResident Identity Card\n" + "\n".join(SPECIMEN) + "\n\n"
        assert mrz_lines_from_text(text) == SPECIMEN

    def test_strips_internal_spaces(self) -> None:
        text = "\n".join(line.replace("<<<<", "<< <<") for line in SPECIMEN)
        assert mrz_lines_from_text(text) == SPECIMEN

    def test_too_few_lines(self) -> None:
        with pytest.raises(FormatError):
            mrz_lines_from_text(SPECIMEN[0] + "\n\n" + SPECIMEN[1])


class TestCheckDigits:
    """ICAO 7-3-1 check digits."""

    def test_specimen_fields(self) -> None:
        assert compute_check_digit("D23145890") == "7"
        assert compute_check_digit("740812") == "2"
        assert compute_check_digit("120415") == "9"

    def test_filler_counts_as_zero(self) -> None:
        assert compute_check_digit("<<<<<<") == "0"

    def test_invalid_character(self) -> None:
        with pytest.raises(FormatError):
            compute_check_digit("ab12")

    def test_specimen_report_all_valid(self) -> None:
        record = decode_td1(SPECIMEN, today=TODAY)
        report = verify_check_digits(record, SPECIMEN)
        assert report.document_number
        assert report.birth_date
        assert report.expiration_date
        assert report.composite
        assert report.all_valid

    def test_corrupted_birth_date(self) -> None:
        lines = [SPECIMEN[0], "7408132F1204159UTO<<<<<<<<<<<6", SPECIMEN[2]]
        report = verify_check_digits(decode_td1(lines, today=TODAY), lines)
        assert not report.birth_date
        assert not report.composite
        assert report.document_number
        assert not report.all_valid

    def test_unreadable_field_is_invalid(self) -> None:
        lines = ["I<UTOd231458907<<<<<<<<<<<<<<<", SPECIMEN[1], SPECIMEN[2]]
        report = verify_check_digits(decode_td1(lines, today=TODAY), lines)
        assert not report.document_number
