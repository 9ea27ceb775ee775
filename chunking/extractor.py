"""
Plain-text extraction for uploaded files.

Turns the raw bytes of an uploaded file into text the chunker can split.
Only text-based formats are supported; binary office and PDF formats must
be converted to text before upload.
"""

import html
import re

from core.exceptions import InvalidInputError

_TAG_PATTERN = re.compile(r"<[^>]*>")
_SCRIPT_STYLE_PATTERN = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL
)

SUPPORTED_EXTENSIONS = (".txt", ".md", ".html", ".htm")


def extract_text(content: bytes, file_ext: str) -> str:
    """
    Extract plain text from an uploaded file.

    Args:
        content: Raw file bytes.
        file_ext: File extension including the dot (e.g. ".md").

    Returns:
        The decoded text. HTML has its tags removed and whitespace collapsed.

    Raises:
        InvalidInputError: For unsupported formats or undecodable bytes.
    """
    ext = (file_ext or "").lower()
    if ext not in SUPPORTED_EXTENSIONS:
        if ext in (".pdf", ".docx"):
            raise InvalidInputError(
                f"{ext} files are not supported",
                details="convert the file to plain text before uploading",
            )
        raise InvalidInputError(f"Unsupported file type: {file_ext!r}")

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidInputError("File is not valid UTF-8", details=str(e)) from e

    if ext in (".html", ".htm"):
        return _strip_html(text)
    return text


def _strip_html(text: str) -> str:
    text = _SCRIPT_STYLE_PATTERN.sub(" ", text)
    # Tags become spaces so adjacent block elements don't merge words.
    text = _TAG_PATTERN.sub(" ", text)
    return " ".join(html.unescape(text).split())
