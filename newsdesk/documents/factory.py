from newsdesk.config.settings import Settings
from newsdesk.documents.base import BaseTextExtractor
from newsdesk.documents.docx_adapter import DocxAdapter
from newsdesk.documents.exceptions import UnsupportedDocumentError
from newsdesk.documents.pdfplumber_adapter import PdfPlumberAdapter
from newsdesk.documents.pymupdf_adapter import PyMuPdfAdapter
from newsdesk.inference.media import is_pdf, is_word_document


class TextExtractorFactory:
    """Picks a text extractor for a document's media type."""

    PDF_ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    def __init__(self, pdf_engine: str = "pdfplumber") -> None:
        engine = pdf_engine.lower()
        adapter_cls = self.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(self.PDF_ADAPTERS)}"
            )
        self._pdf_extractor = adapter_cls()
        self._docx_extractor = DocxAdapter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextExtractorFactory":
        return cls(settings.text_engine)

    def for_mime_type(self, mime_type: str) -> BaseTextExtractor:
        """Return the extractor for mime_type.

        Raises:
            UnsupportedDocumentError: for media types without text extraction.
        """
        if is_word_document(mime_type):
            return self._docx_extractor
        if is_pdf(mime_type):
            return self._pdf_extractor
        raise UnsupportedDocumentError(f"No text extractor for '{mime_type}'")
