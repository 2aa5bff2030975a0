"""Error taxonomy for content parsing and format detection"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    malformed_input     = "malformed-input"       # input cannot be parsed at all; rejects the call
    partial_degradation = "partial-degradation"   # recorded in ParseResult.warnings; never raised by parsers
    unknown_format      = "unknown-format"        # no parser claims the content


class ParseError(ValueError):
    """Raised when content cannot be turned into a ParseResult."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.malformed_input, filename: Optional[str] = None):
        if filename:
            message = f"{message} in {filename}"
        super().__init__(message)
        self.kind = kind
        self.filename = filename
