import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ragcore.core.exceptions.exception_classes import EmbeddingError
from ragcore.modules.data.providers.vector.embedding import (
    EmbeddingConfig,
    EmbeddingProviderType,
    HuggingFaceEmbedder,
    OllamaEmbedder,
)

HF_CLASS = "ragcore.modules.data.providers.vector.embedding.huggingface.HuggingFaceEmbeddings"


def _fake_hf_model(dimensions=384):
    model = MagicMock()
    model.aembed_documents = AsyncMock(
        side_effect=lambda batch: [[float(len(text))] * dimensions for text in batch])
    model.aembed_query = AsyncMock(side_effect=lambda text: [0.5] * dimensions)
    return model


def test_embedding_config_factory():
    assert isinstance(EmbeddingConfig().get(), HuggingFaceEmbedder)
    assert isinstance(EmbeddingConfig(type=EmbeddingProviderType.OLLAMA).get(), OllamaEmbedder)


def test_embedding_config_rejects_bad_values():
    with pytest.raises(ValueError):
        EmbeddingConfig(batch_size=0)
    with pytest.raises(ValueError):
        EmbeddingConfig(device="tpu")
    with pytest.raises(ValueError):
        EmbeddingConfig(type="openai")


@pytest.mark.parametrize("model_name,dimensions", [
    (None, 384),
    ("sentence-transformers/all-mpnet-base-v2", 768),
    ("BAAI/bge-small-en-v1.5", 384),
    ("BAAI/bge-base-en-v1.5", 768),
    ("some/unknown-model", 384),
])
def test_huggingface_dimensions_from_model(model_name, dimensions):
    embedder = HuggingFaceEmbedder(EmbeddingConfig(model_name=model_name))
    assert embedder.get_dimensions() == dimensions
    assert embedder.get_name() == "HuggingFace"


def test_huggingface_explicit_dimensions_win():
    embedder = HuggingFaceEmbedder(EmbeddingConfig(dimensions=512))
    assert embedder.get_dimensions() == 512


@pytest.mark.asyncio
async def test_huggingface_model_loads_lazily_once():
    model = _fake_hf_model()
    with patch(HF_CLASS, return_value=model) as model_cls:
        embedder = HuggingFaceEmbedder(EmbeddingConfig())
        model_cls.assert_not_called()

        results = await asyncio.gather(*(embedder.embed_query(f"q{i}") for i in range(5)))

    assert model_cls.call_count == 1
    assert model_cls.call_args.kwargs["model_name"] == "sentence-transformers/all-MiniLM-L6-v2"
    assert model_cls.call_args.kwargs["model_kwargs"] == {"device": "cpu"}
    assert all(len(vector) == 384 for vector in results)


@pytest.mark.asyncio
async def test_huggingface_embeds_documents_in_batches_preserving_order():
    model = _fake_hf_model()
    texts = ["a", "bb", "ccc", "dddd", "eeeee"]
    with patch(HF_CLASS, return_value=model):
        embedder = HuggingFaceEmbedder(EmbeddingConfig(batch_size=2))
        vectors = await embedder.embed_documents(texts)

    assert model.aembed_documents.await_count == 3
    assert [call.args[0] for call in model.aembed_documents.await_args_list] == [
        ["a", "bb"], ["ccc", "dddd"], ["eeeee"]]
    assert [vector[0] for vector in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]


@pytest.mark.asyncio
async def test_huggingface_empty_input_does_not_load_model():
    with patch(HF_CLASS) as model_cls:
        embedder = HuggingFaceEmbedder(EmbeddingConfig())
        assert await embedder.embed_documents([]) == []
    model_cls.assert_not_called()


@pytest.mark.asyncio
async def test_huggingface_model_load_failure_is_wrapped():
    with patch(HF_CLASS, side_effect=OSError("model not found")):
        embedder = HuggingFaceEmbedder(EmbeddingConfig())
        with pytest.raises(EmbeddingError) as exc_info:
            await embedder.embed_query("hello")

    assert exc_info.value.provider == "HuggingFace"
    assert isinstance(exc_info.value.original_error, OSError)


@pytest.mark.asyncio
async def test_huggingface_wrong_vector_length_is_wrapped():
    with patch(HF_CLASS, return_value=_fake_hf_model(dimensions=10)):
        embedder = HuggingFaceEmbedder(EmbeddingConfig())
        with pytest.raises(EmbeddingError):
            await embedder.embed_documents(["hello"])


def _ollama_embedder(handler, **config):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://ollama")
    return OllamaEmbedder(EmbeddingConfig(type="ollama", **config), client=client)


def test_ollama_dimensions_from_model():
    assert OllamaEmbedder(EmbeddingConfig(type="ollama")).get_dimensions() == 768
    assert OllamaEmbedder(EmbeddingConfig(type="ollama", model_name="mxbai-embed-large")).get_dimensions() == 1024


@pytest.mark.asyncio
async def test_ollama_embeds_each_text_in_order():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append((request.url.path, body))
        return httpx.Response(200, json={"embedding": [float(len(body["prompt"]))] * 4})

    embedder = _ollama_embedder(handler, dimensions=4)
    vectors = await embedder.embed_documents(["one", "three", "fifteen"])

    assert [vector[0] for vector in vectors] == [3.0, 5.0, 7.0]
    assert requests[0] == ("/api/embeddings", {"model": "nomic-embed-text", "prompt": "one"})
    assert [body["prompt"] for _, body in requests] == ["one", "three", "fifteen"]
    await embedder.close()


@pytest.mark.asyncio
async def test_ollama_query_embedding():
    embedder = _ollama_embedder(
        lambda request: httpx.Response(200, json={"embedding": [0.1, 0.2, 0.3]}), dimensions=3)
    assert await embedder.embed_query("hello") == [0.1, 0.2, 0.3]


@pytest.mark.asyncio
async def test_ollama_http_error_is_wrapped():
    embedder = _ollama_embedder(lambda request: httpx.Response(500, text="boom"), dimensions=3)

    with pytest.raises(EmbeddingError) as exc_info:
        await embedder.embed_documents(["hello"])

    assert exc_info.value.provider == "Ollama"
    assert isinstance(exc_info.value.original_error, httpx.HTTPStatusError)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"embedding": []}, {"embedding": [0.1, 0.2]}])
async def test_ollama_malformed_response_is_wrapped(payload):
    embedder = _ollama_embedder(lambda request: httpx.Response(200, json=payload), dimensions=3)

    with pytest.raises(EmbeddingError):
        await embedder.embed_query("hello")


@pytest.mark.asyncio
async def test_ollama_close_leaves_injected_client_open():
    embedder = _ollama_embedder(lambda request: httpx.Response(200, json={"embedding": [0.5] * 768}))
    await embedder.close()
    assert not embedder._client.is_closed
    assert await embedder.embed_query("still usable") == [0.5] * 768

    owned = OllamaEmbedder(EmbeddingConfig(type="ollama"))
    await owned.close()
    assert owned._client.is_closed
