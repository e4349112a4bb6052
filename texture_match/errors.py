"""Exceptions raised by the matching pipeline."""


class DecodeError(ValueError):
    """The source image could not be read or decoded into a pixel grid."""


class IndexFormatError(ValueError):
    """The reference index document is malformed."""
