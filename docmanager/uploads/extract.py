import io
import logging
import re

from pdfminer.high_level import extract_text as extract_pdf_text

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = (".txt", ".md", ".csv", ".json", ".xml", ".html", ".htm")


def _clean_text(raw: str) -> str:
    if not raw:
        return ""

    raw = raw.replace("\x00", "")
    raw = raw.replace("\x0c", "\n\n")
    raw = raw.replace("\r\n", "\n").replace("\r", "\n")
    raw = re.sub(r"\n{3,}", "\n\n", raw)
    raw = re.sub(r"[ \t]{2,}", " ", raw)
    raw = "\n".join(line.strip() for line in raw.split("\n"))

    return raw.strip()


def _is_pdf(content_type: str | None, filename: str | None) -> bool:
    return content_type == "application/pdf" or (filename or "").lower().endswith(".pdf")


def _is_text(content_type: str | None, filename: str | None) -> bool:
    return (content_type or "").startswith("text/") or (filename or "").lower().endswith(TEXT_SUFFIXES)


def extract_text(data: bytes, content_type: str | None, filename: str | None) -> str | None:
    """Best-effort plain text for searchable uploads; None when nothing usable comes out."""
    if not data:
        return None

    if _is_pdf(content_type, filename):
        try:
            raw = extract_pdf_text(io.BytesIO(data)) or ""
        except Exception:
            logger.warning("Text extraction failed for %s", filename, exc_info=True)
            return None
    elif _is_text(content_type, filename):
        raw = data.decode("utf-8", errors="ignore")
    else:
        return None

    return _clean_text(raw) or None
