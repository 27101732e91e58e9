"""Shared fixtures."""

import pytest

from docx_builders import build_docx, document_xml


@pytest.fixture
def resume_docx():
    return build_docx()


@pytest.fixture
def resume_xml():
    return document_xml()
