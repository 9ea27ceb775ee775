from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

from chunking.models import DEFAULT_CHUNK_OVERLAP, DEFAULT_CHUNK_SIZE


@dataclass
class RetrievalConfig:
    data_dir: str = "data/rag"
    dimension: int = 768
    chunk_size: int = DEFAULT_CHUNK_SIZE
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP
    embedding_model: str = "nomic-embed-text"
    ollama_base_url: str = "http://localhost:11434"
    default_limit: int = 5
    min_score: Optional[float] = None

    @property
    def vector_dir(self) -> Path:
        return Path(self.data_dir) / "vectors"

    @classmethod
    def from_env(cls) -> "RetrievalConfig":
        def _int(name: str, default: int) -> int:
            value = os.environ.get(name)
            return int(value) if value else default

        def _optional_float(name: str, default: Optional[float]) -> Optional[float]:
            value = os.environ.get(name)
            return float(value) if value else default

        return cls(
            data_dir=os.environ.get("RAG_DATA_DIR", cls.data_dir),
            dimension=_int("RAG_DIMENSION", cls.dimension),
            chunk_size=_int("RAG_CHUNK_SIZE", cls.chunk_size),
            chunk_overlap=_int("RAG_CHUNK_OVERLAP", cls.chunk_overlap),
            embedding_model=os.environ.get("OLLAMA_EMBED_MODEL", cls.embedding_model),
            ollama_base_url=os.environ.get("OLLAMA_BASE_URL", cls.ollama_base_url),
            default_limit=_int("RAG_DEFAULT_LIMIT", cls.default_limit),
            min_score=_optional_float("RAG_MIN_SCORE", cls.min_score),
        )
