"""
Custom exceptions for the EPUB translation pipeline.

Structural failures (bad archive, run-level failures) are fatal and raised to
the caller. Everything else is contained per entry and reported as an
``EntryFailure`` in the run result.
"""


class EpubTranslationError(Exception):
    """Base exception for all EPUB translation errors."""
    pass


class ArchiveError(EpubTranslationError):
    """Raised when the input is not a usable EPUB container.

    Attributes:
        entry_name: Entry that caused the failure, if any
    """
    def __init__(self, message: str, entry_name: str = None):
        super().__init__(message)
        self.entry_name = entry_name


class PipelineError(EpubTranslationError):
    """Raised when a translation run cannot be carried out at all."""
    pass


class XmlParsingError(EpubTranslationError):
    """Raised when XML/HTML parsing fails after all fallback attempts.

    Attributes:
        original_error: The underlying parsing error
        content_preview: First 200 chars of problematic content
    """
    def __init__(self, message: str, original_error: Exception = None, content_preview: str = None):
        super().__init__(message)
        self.original_error = original_error
        self.content_preview = content_preview


class BodyExtractionError(EpubTranslationError):
    """Raised when a document has no <body> to translate."""
    pass
