"""Front-of-card field extraction for Emirates ID cards.

Works on OCR output only. A card is recognised by the issuing country phrase;
individual fields that cannot be found come back as empty strings.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from idscan.ocr.base import OCRResult

logger = logging.getLogger(__name__)

COUNTRY_PHRASE = "united arab emirates"
NAME_LABEL = "name:"
NATIONALITY_LABEL = "nationality:"

# 784-YYYY-NNNNNNN-C with optional dash or whitespace separators
ID_NUMBER_PATTERN = re.compile(r"784[-\s]*\d{4}[-\s]*\d{7}[-\s]*\d")


@dataclass(frozen=True)
class EmiratesIdFront:
    """Fields read from the front of an Emirates ID."""

    name: str
    id_number: str
    nationality: str


def _value_after_label(result: OCRResult, label: str) -> Optional[str]:
    for block in result.blocks:
        lowered = block.text.lower()
        index = lowered.find(label)
        if index != -1:
            return block.text[index + len(label):]
    return None


def extract_front_info(result: OCRResult) -> Optional[EmiratesIdFront]:
    """Extract name, ID number and nationality from OCR output.

    Args:
        result: OCR output for the front of the card.

    Returns:
        EmiratesIdFront, or None if the text is not from an Emirates ID.
    """
    if COUNTRY_PHRASE not in result.text.lower():
        logger.debug("Issuing country phrase not found; not an Emirates ID")
        return None

    name = _value_after_label(result, NAME_LABEL)
    nationality = _value_after_label(result, NATIONALITY_LABEL)
    id_match = ID_NUMBER_PATTERN.search(result.text)

    info = EmiratesIdFront(
        name=name.strip() if name is not None else "",
        id_number=id_match.group(0) if id_match else "",
        nationality=nationality.lower().strip() if nationality is not None else "",
    )

    missing = [k for k, v in vars(info).items() if not v]
    if missing:
        logger.info(f"Emirates ID front: fields not found: {', '.join(missing)}")
    return info
