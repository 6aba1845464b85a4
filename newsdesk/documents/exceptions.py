class TextExtractionError(Exception):
    """Raised when text cannot be extracted from a document."""


class UnsupportedDocumentError(TextExtractionError):
    """Raised when no extractor handles the document's media type."""
