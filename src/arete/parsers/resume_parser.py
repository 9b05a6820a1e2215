"""Convert an uploaded resume file into plain text."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from arete.errors import InputValidationError

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".pdf", ".docx", ".txt", ".md")


def parse_resume(file_path: str | Path) -> str:
    """Parse a resume file (PDF, DOCX, TXT, MD) and return clean plain text."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InputValidationError(
            f"Unsupported file format: {path.suffix or '(none)'}. "
            f"Upload one of: {', '.join(SUPPORTED_SUFFIXES)}."
        )
    if not path.exists():
        raise InputValidationError(f"Resume file not found: {path}")

    if suffix == ".pdf":
        raw = _parse_pdf(path)
    elif suffix == ".docx":
        raw = _parse_docx(path)
    else:
        raw = path.read_text(encoding="utf-8")

    text = clean_text(raw)
    logger.info("Extracted %d characters from %s", len(text), path.name)
    return text


def clean_text(text: str) -> str:
    """Normalize extracted text: invisible characters, bullets, whitespace."""
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)

    # ●, •, ◦, ▪, ■ style bullets -> "- "
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)

    lines = [re.sub(r"[ \t]{2,}", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(path: Path) -> str:
    import fitz  # pymupdf

    with fitz.open(str(path)) as doc:
        return "\n".join(page.get_text() for page in doc)


def _parse_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
