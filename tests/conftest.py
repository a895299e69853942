"""
Pytest configuration for docx_merger
"""

import logging
import sys
import tempfile
from pathlib import Path

import pytest

from docx_merger.models.document import Document

from .helpers import build_docx


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid handler leakage between tests."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as directory:
        yield Path(directory)


@pytest.fixture
def make_docx(temp_dir):
    """Factory writing a DOCX package into temp_dir: make_docx("a.docx", body, **kwargs) -> Path."""

    def _make(name, body, **kwargs):
        return build_docx(temp_dir / name, body, **kwargs)

    return _make


@pytest.fixture
def load_docx(make_docx):
    """Factory building a package and loading it as a Document; documents are closed afterwards."""
    loaded = []

    def _load(name, body, **kwargs):
        document = Document.load(make_docx(name, body, **kwargs))
        loaded.append(document)
        return document

    yield _load

    for document in loaded:
        document.close()
