"""idscan - ID card MRZ decoding and document rectification."""

__version__ = "0.1.0"
