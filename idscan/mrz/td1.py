"""TD1 machine-readable zone decoding.

TD1 is the ID-card sized MRZ layout: three lines of 30 characters each.
Fields are fixed width and padded with the filler character ``<``.
"""

import datetime
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, List, Optional, Sequence, Tuple

from idscan.errors import FormatError

logger = logging.getLogger(__name__)

FILLER = "<"
TD1_LINE_COUNT = 3
TD1_LINE_LENGTH = 30


@dataclass(frozen=True)
class MRZDate:
    """A YYMMDD date with its century filled in.

    year/month/day are None when the raw field is not six digits. No calendar
    validation happens here; month 13 is kept as-is.
    """

    raw: str
    year: Optional[int]
    month: Optional[int]
    day: Optional[int]

    def as_date(self) -> datetime.date:
        """Build a ``datetime.date``.

        Raises:
            ValueError: If the field was not numeric or is not a real calendar date.
        """
        if self.year is None or self.month is None or self.day is None:
            raise ValueError(f"MRZ date field is not numeric: {self.raw!r}")
        return datetime.date(self.year, self.month, self.day)

    def isoformat(self) -> str:
        if self.year is None:
            return self.raw
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class MRZNames:
    """Holder name from line 3."""

    surname: str
    given_names: Tuple[str, ...]


@dataclass(frozen=True)
class MRZRecord:
    """Decoded TD1 record. Check digits are raw characters, never verified here."""

    document_type: str
    issuing_country: str
    document_number: str
    document_number_check_digit: str
    optional_data_1: str
    birth_date: MRZDate
    birth_date_check_digit: str
    sex: str
    expiration_date: MRZDate
    expiration_date_check_digit: str
    nationality: str
    optional_data_2: str
    composite_check_digit: str
    names: MRZNames

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["birth_date"] = self.birth_date.isoformat()
        data["expiration_date"] = self.expiration_date.isoformat()
        data["names"] = {
            "surname": self.names.surname,
            "given_names": list(self.names.given_names),
        }
        return data


def _strip_filler(field: str) -> str:
    return field.replace(FILLER, "")


def expand_year(two_digit_year: int, today: Optional[datetime.date] = None) -> int:
    """Expand a two-digit year to four digits.

    Years greater than the current two-digit year land in the 1900s, everything
    else in the 2000s. This is an approximation: a birth date from 100+ years
    ago or an expiry far in the future is misclassified.

    Args:
        two_digit_year: Year in range 0-99.
        today: Reference date. Defaults to today's date.

    Returns:
        Four-digit year.
    """
    today = today or datetime.date.today()
    current = today.year % 100
    if two_digit_year > current:
        return 1900 + two_digit_year
    return 2000 + two_digit_year


def _parse_date(field: str, today: Optional[datetime.date]) -> MRZDate:
    if len(field) != 6 or not (field.isascii() and field.isdigit()):
        logger.debug(f"Non-numeric MRZ date field: {field!r}")
        return MRZDate(raw=field, year=None, month=None, day=None)

    year = expand_year(int(field[0:2]), today)
    return MRZDate(raw=field, year=year, month=int(field[2:4]), day=int(field[4:6]))


def _parse_names(line: str) -> MRZNames:
    segments = line.split(FILLER * 2)
    surname = segments[0].replace(FILLER, " ").strip()
    given = " ".join(segments[1:]).replace(FILLER, " ").strip()
    return MRZNames(surname=surname, given_names=tuple(given.split()))


def _validate(lines: Sequence[str]) -> None:
    if len(lines) != TD1_LINE_COUNT:
        raise FormatError(
            f"TD1 MRZ needs {TD1_LINE_COUNT} lines, got {len(lines)}"
        )
    for number, line in enumerate(lines, 1):
        if len(line) != TD1_LINE_LENGTH:
            raise FormatError(
                f"TD1 MRZ line {number} must be {TD1_LINE_LENGTH} characters, "
                f"got {len(line)}"
            )


def decode_td1(
    lines: Sequence[str],
    today: Optional[datetime.date] = None,
) -> MRZRecord:
    """Decode a three-line TD1 machine-readable zone.

    Args:
        lines: Exactly three strings of exactly 30 characters.
        today: Reference date for century expansion. Defaults to today.

    Returns:
        Decoded MRZRecord.

    Raises:
        FormatError: If the line count or any line width is wrong.
    """
    _validate(lines)
    line1, line2, line3 = lines

    record = MRZRecord(
        document_type=_strip_filler(line1[0:2]),
        issuing_country=_strip_filler(line1[2:5]),
        document_number=_strip_filler(line1[5:14]),
        document_number_check_digit=line1[14],
        optional_data_1=_strip_filler(line1[15:30]),
        birth_date=_parse_date(line2[0:6], today),
        birth_date_check_digit=line2[6],
        sex=line2[7],
        expiration_date=_parse_date(line2[8:14], today),
        expiration_date_check_digit=line2[14],
        nationality=_strip_filler(line2[15:18]),
        optional_data_2=_strip_filler(line2[18:29]),
        composite_check_digit=line2[29],
        names=_parse_names(line3),
    )

    logger.debug(
        f"Decoded TD1 MRZ: type={record.document_type} "
        f"country={record.issuing_country} number={record.document_number}"
    )
    return record


def mrz_lines_from_text(text: str) -> List[str]:
    """Pick the MRZ lines out of full OCR text.

    The MRZ sits at the bottom of the card, so the last three non-empty lines
    are taken. OCR engines often insert spaces between filler runs; all
    whitespace inside a line is removed.

    Raises:
        FormatError: If the text has fewer than three non-empty lines.
    """
    rows = ["".join(row.split()) for row in text.splitlines()]
    rows = [row for row in rows if row]
    if len(rows) < TD1_LINE_COUNT:
        raise FormatError(
            f"Expected at least {TD1_LINE_COUNT} text lines for an MRZ, got {len(rows)}"
        )
    return rows[-TD1_LINE_COUNT:]
