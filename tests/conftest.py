from pathlib import Path

import pytest

from django_document import Document

from .testutils import setup_test_config

setup_test_config()


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """Empty directory used as the public directory of the document."""
    return tmp_path


@pytest.fixture
def document(public_dir: Path) -> Document:
    return Document(public_dir=public_dir)
