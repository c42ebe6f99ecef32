"""Byte encoding detection for files opened in the editor.

Uploaded and legacy text files are not guaranteed to be UTF-8, while the
editor only speaks UTF-8. Detection tries each candidate in order and keeps
the first one that decodes the whole payload strictly.
"""

CANDIDATE_ENCODINGS = ("utf-8", "cp1252", "iso-8859-15", "iso-8859-1", "ascii")
DEFAULT_ENCODING = "iso-8859-15"


def detect_encoding(data: bytes, candidates: tuple[str, ...] = CANDIDATE_ENCODINGS) -> str | None:
    for encoding in candidates:
        try:
            data.decode(encoding)
        except UnicodeDecodeError:
            continue
        return encoding
    return None


def decode_text(data: bytes, default: str = DEFAULT_ENCODING) -> tuple[str, str]:
    """Return ``(text, source_encoding)``, falling back to *default* when nothing matches."""
    encoding = detect_encoding(data) or default
    return data.decode(encoding), encoding


def to_utf8(content: str | bytes, default: str = DEFAULT_ENCODING) -> bytes:
    if isinstance(content, bytes):
        text, _ = decode_text(content, default)
    else:
        text = content
    return text.encode("utf-8")
