WORD_MIME_MARKERS = ("word", "officedocument")


def normalize_mime_type(mime_type: str) -> str:
    """Collapse browser/OS media-type variants to the ones providers accept."""
    if "quicktime" in mime_type:
        return "video/quicktime"
    if "mp4" in mime_type:
        return "video/mp4"
    if "wav" in mime_type:
        return "audio/wav"
    if "mpeg" in mime_type:
        return "audio/mpeg"
    return mime_type


def is_word_document(mime_type: str) -> bool:
    return any(marker in mime_type for marker in WORD_MIME_MARKERS)


def is_pdf(mime_type: str) -> bool:
    return mime_type == "application/pdf"
