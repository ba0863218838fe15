"""Independent PDF text extraction strategies.

Every strategy is a synchronous function with the signature
``(data, file_name, cancel_token) -> str`` meant to run in a worker thread.
It returns non-empty trimmed text or raises. ``cancel_token`` is checked at
page (and text-run) boundaries so a timed-out parse stops early.
"""

import io
import threading
from dataclasses import dataclass
from typing import Callable
from urllib.parse import unquote

import fitz
import pdfplumber
from pypdf import PdfReader

StrategyFunc = Callable[[bytes, str, threading.Event], str]


class StrategyCancelled(Exception):
    """Raised inside a worker when its cancellation token was set."""


@dataclass(frozen=True)
class PdfStrategy:
    name: str
    run: StrategyFunc
    # seconds; None = no limit
    timeout: float | None = None


def _check_cancelled(cancel_token: threading.Event, name: str) -> None:
    if cancel_token.is_set():
        raise StrategyCancelled(f"{name} parsing cancelled")


def _require_text(text: str, name: str) -> str:
    text = text.strip()
    if not text:
        raise ValueError(f"{name} extracted empty text")
    return text


def extract_with_pypdf(data: bytes, file_name: str, cancel_token: threading.Event) -> str:
    """Primary: the text layer as read by pypdf, one page per line block."""
    reader = PdfReader(io.BytesIO(data))
    pages = []
    for page in reader.pages:
        _check_cancelled(cancel_token, "pypdf")
        pages.append(page.extract_text() or "")
    return _require_text("\n".join(pages), "pypdf")


def _decode_run(run: str) -> str:
    try:
        return unquote(run, errors="strict")
    except UnicodeDecodeError:
        return run


def extract_with_pdfplumber(data: bytes, file_name: str, cancel_token: threading.Event) -> str:
    """Secondary: pdfplumber's page -> word tree.

    Each word is treated as a text run and percent-decoded; runs of a page are
    joined with a space and pages with a newline.
    """
    pages = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            _check_cancelled(cancel_token, "pdfplumber")
            runs = []
            for word in page.extract_words():
                _check_cancelled(cancel_token, "pdfplumber")
                runs.append(_decode_run(word["text"]))
            pages.append(" ".join(runs))
    return _require_text("\n".join(pages), "pdfplumber")


def extract_with_pymupdf(data: bytes, file_name: str, cancel_token: threading.Event) -> str:
    """Tertiary: PyMuPDF text content. Image blocks are skipped."""
    pages = []
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            _check_cancelled(cancel_token, "pymupdf")
            items = []
            for block in page.get_text("dict")["blocks"]:
                # type 0 = text, type 1 = image
                if block.get("type") != 0:
                    continue
                for line in block.get("lines", []):
                    for span in line.get("spans", []):
                        if span.get("text"):
                            items.append(span["text"])
            pages.append(" ".join(items))
    return _require_text("\n".join(pages), "pymupdf")
