import io

import mammoth

from newsdesk.documents.base import BaseTextExtractor
from newsdesk.documents.exceptions import TextExtractionError


class DocxAdapter(BaseTextExtractor):
    """Extracts raw text from Word (.docx) documents using mammoth."""

    def extract(self, raw_bytes: bytes) -> str:
        try:
            result = mammoth.extract_raw_text(io.BytesIO(raw_bytes))
        except Exception as exc:
            raise TextExtractionError(f"mammoth extraction failed: {exc}") from exc
        return (result.value or "").strip()
