"""Tests for retrieval.config — RetrievalConfig."""

from pathlib import Path

from retrieval.config import RetrievalConfig


class TestRetrievalConfig:
    def test_defaults(self):
        config = RetrievalConfig()
        assert config.data_dir == "data/rag"
        assert config.dimension == 768
        assert (config.chunk_size, config.chunk_overlap) == (1000, 200)
        assert config.embedding_model == "nomic-embed-text"
        assert config.default_limit == 5
        assert config.min_score is None

    def test_vector_dir(self):
        assert RetrievalConfig(data_dir="/srv/rag").vector_dir == Path("/srv/rag/vectors")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("RAG_DATA_DIR", "/tmp/rag")
        monkeypatch.setenv("RAG_DIMENSION", "384")
        monkeypatch.setenv("RAG_CHUNK_SIZE", "500")
        monkeypatch.setenv("RAG_CHUNK_OVERLAP", "50")
        monkeypatch.setenv("OLLAMA_EMBED_MODEL", "all-minilm")
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://ollama:11434")
        monkeypatch.setenv("RAG_DEFAULT_LIMIT", "8")
        monkeypatch.setenv("RAG_MIN_SCORE", "0.3")

        config = RetrievalConfig.from_env()

        assert config.data_dir == "/tmp/rag"
        assert config.dimension == 384
        assert config.chunk_size == 500
        assert config.chunk_overlap == 50
        assert config.embedding_model == "all-minilm"
        assert config.ollama_base_url == "http://ollama:11434"
        assert config.default_limit == 8
        assert config.min_score == 0.3

    def test_from_env_defaults(self, monkeypatch):
        for name in ["RAG_DATA_DIR", "RAG_DIMENSION", "RAG_MIN_SCORE", "OLLAMA_BASE_URL"]:
            monkeypatch.delenv(name, raising=False)
        config = RetrievalConfig.from_env()
        assert config.data_dir == "data/rag"
        assert config.dimension == 768
        assert config.min_score is None
