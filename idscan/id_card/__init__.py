"""Identity card text extractors."""

from idscan.id_card.emirates import EmiratesIdFront, extract_front_info

__all__ = [
    "EmiratesIdFront",
    "extract_front_info",
]
