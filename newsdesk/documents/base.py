from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for document text extraction adapters."""

    @abstractmethod
    def extract(self, raw_bytes: bytes) -> str:
        """Extract plain text from a document's bytes.

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """
