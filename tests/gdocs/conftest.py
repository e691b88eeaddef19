"""
Pytest configuration and fixtures for the Google Docs tests.

Documents are built in memory (see doc_builders) and every remote call goes
through FakeDocsGateway, so no test touches the network.
"""
import os
import sys

import pytest

# Make the shared builders importable from every test module in this directory
sys.path.insert(0, os.path.dirname(__file__))

from doc_builders import SAMPLE_PARAGRAPHS, FakeDocsGateway, create_mock_doc  # noqa: E402


@pytest.fixture
def sample_doc():
    """Intro / Body / Conclusion document, each heading followed by one paragraph."""
    return create_mock_doc(SAMPLE_PARAGRAPHS)


@pytest.fixture
def gateway(sample_doc):
    return FakeDocsGateway(sample_doc)


@pytest.fixture
def missing_gateway():
    """A gateway whose document does not exist."""
    return FakeDocsGateway(None)
