"""ICAO 9303 check digit computation for TD1 records.

The decoder passes check digits through untouched. These helpers let callers
opt in to verification.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from idscan.errors import FormatError
from idscan.mrz.td1 import FILLER, MRZRecord

logger = logging.getLogger(__name__)

_WEIGHTS = (7, 3, 1)


@dataclass(frozen=True)
class CheckDigitReport:
    """Which TD1 check digits match their payload."""

    document_number: bool
    birth_date: bool
    expiration_date: bool
    composite: bool

    @property
    def all_valid(self) -> bool:
        return (
            self.document_number
            and self.birth_date
            and self.expiration_date
            and self.composite
        )


def _char_value(char: str) -> int:
    if char == FILLER:
        return 0
    if "0" <= char <= "9":
        return ord(char) - ord("0")
    if "A" <= char <= "Z":
        return ord(char) - ord("A") + 10
    raise FormatError(f"Character {char!r} is not valid in an MRZ field")


def compute_check_digit(field: str) -> str:
    """Compute the 7-3-1 weighted check digit of an MRZ field.

    Args:
        field: Raw MRZ characters, filler included.

    Returns:
        The check digit as a single character.

    Raises:
        FormatError: If the field contains a character outside 0-9, A-Z and '<'.
    """
    total = sum(
        _char_value(char) * _WEIGHTS[i % 3] for i, char in enumerate(field)
    )
    return str(total % 10)


def _matches(field: str, check_digit: str) -> bool:
    try:
        return compute_check_digit(field) == check_digit
    except FormatError as e:
        logger.debug(f"Check digit not computable: {e}")
        return False


def verify_check_digits(record: MRZRecord, lines: Sequence[str]) -> CheckDigitReport:
    """Verify every check digit of a decoded TD1 record.

    The raw lines are needed because the record has fillers stripped.

    Args:
        record: Result of ``decode_td1(lines)``.
        lines: The same three lines that produced ``record``.

    Returns:
        CheckDigitReport with one flag per check digit.
    """
    line1, line2, _ = lines
    composite_payload = line1[5:30] + line2[0:7] + line2[8:15] + line2[18:29]

    report = CheckDigitReport(
        document_number=_matches(line1[5:14], record.document_number_check_digit),
        birth_date=_matches(line2[0:6], record.birth_date_check_digit),
        expiration_date=_matches(line2[8:14], record.expiration_date_check_digit),
        composite=_matches(composite_payload, record.composite_check_digit),
    )

    if not report.all_valid:
        logger.info(f"MRZ check digit mismatch: {report}")
    return report
