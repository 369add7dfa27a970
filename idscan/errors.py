"""Exception types raised by idscan."""


class IdScanError(Exception):
    """Base class for all idscan errors."""


class FormatError(IdScanError, ValueError):
    """MRZ input does not have the expected line count or line width."""


class NoDocumentDetectedError(IdScanError):
    """No four-cornered document outline was found in the image."""


class PrimitiveFailure(IdScanError):
    """An external OCR or detection collaborator failed."""


class DetectionError(PrimitiveFailure):
    """The object detector could not process the image."""
