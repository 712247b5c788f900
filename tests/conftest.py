"""
Shared fixtures for the retrieval and classification tests.
"""
import pytest

from mmsearch.config.settings import Settings
from tests.fakes import FakeEmbedder, FakeIndex


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        embedding_enabled=True,
        embedding_url="http://embeddings.test",
        embedding_api_key="test-key",
    )


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex()
