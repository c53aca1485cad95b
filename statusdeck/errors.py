"""
errors.py — Exception hierarchy for document processing.

Only input-level problems are raised. Structural ambiguity inside a
readable document never surfaces as an exception; the extraction
pipeline degrades to the fallback record instead.
"""


class StatusDeckError(Exception):
    """Base exception for all status deck errors."""

    def __init__(self, message: str, *args):
        self.message = message
        super().__init__(message, *args)


class InputRejected(StatusDeckError):
    """Raised when the file type is not text, spreadsheet or word-processor."""


UnsupportedFormat = InputRejected


class DecodeFailure(StatusDeckError):
    """Raised when the byte stream cannot be converted (corrupt docx/xlsx)."""


class UnreadableInput(DecodeFailure):
    """Raised when the file cannot be read at all."""


class RemoteRenderError(StatusDeckError):
    """Raised when the remote slide service rejects a request."""
