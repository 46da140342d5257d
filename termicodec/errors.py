"""Exception hierarchy for the codec core."""


class CodecError(Exception):
    """Base class for all codec failures."""


class InvalidArgumentError(CodecError, ValueError):
    """Empty buffer, bad parameter or unusable frequency table."""


class DimensionMismatchError(CodecError, ValueError):
    """Requested dimensions disagree with the ones stored in a header."""


class MissingCodeError(CodecError, KeyError):
    """A symbol has no entry in the supplied Huffman code table."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class MalformedPayloadError(CodecError, ValueError):
    """Truncated, corrupted or internally inconsistent payload."""
