"""TD1 machine-readable zone decoding."""

from idscan.mrz.td1 import (
    MRZDate,
    MRZNames,
    MRZRecord,
    decode_td1,
    expand_year,
    mrz_lines_from_text,
)
from idscan.mrz.checksum import CheckDigitReport, compute_check_digit, verify_check_digits

__all__ = [
    "MRZDate",
    "MRZNames",
    "MRZRecord",
    "decode_td1",
    "expand_year",
    "mrz_lines_from_text",
    "CheckDigitReport",
    "compute_check_digit",
    "verify_check_digits",
]
