import sys
from pathlib import Path

import pytest

# Add the project root directory to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.unit.fakes import FakeChromaClient, FakeLLM, KeywordEmbedder  # noqa: E402


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder()


@pytest.fixture
def chroma_client():
    return FakeChromaClient()


@pytest.fixture
def fake_llm():
    return FakeLLM()
