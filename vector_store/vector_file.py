"""
Vector file codec and cosine similarity.

On-disk contract: one file per document id, exactly ``dimension * 4`` bytes,
each 4-byte group a little-endian IEEE-754 float32, in vector-index order.
Other tooling may rely on this layout for offline inspection or migration.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from core.exceptions import VectorFileError

VECTOR_DTYPE = np.dtype("<f4")
VECTOR_SUFFIX = ".vec"


def encode_vector(vector: Sequence[float]) -> bytes:
    """Encode a vector as little-endian float32 bytes."""
    return np.asarray(vector, dtype=VECTOR_DTYPE).tobytes()


def decode_vector(
    data: bytes,
    dimension: Optional[int] = None,
    path: str = "<bytes>",
) -> np.ndarray:
    """
    Decode little-endian float32 bytes into a vector.

    Raises:
        VectorFileError: If the byte length is not a multiple of 4 or does
            not match the expected dimension.
    """
    if len(data) % VECTOR_DTYPE.itemsize:
        raise VectorFileError(path, f"Vector data of {len(data)} bytes is truncated")
    vector = np.frombuffer(data, dtype=VECTOR_DTYPE)
    if dimension is not None and vector.size != dimension:
        raise VectorFileError(
            path, f"Vector has {vector.size} components, expected {dimension}"
        )
    return vector


def write_vector_file(path: Path, vector: Sequence[float]) -> None:
    """
    Write a vector file atomically (temp file in the same directory, then rename).

    Readers never observe a partially written file.
    """
    data = encode_vector(vector)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_vector_file(path: Path, dimension: Optional[int] = None) -> np.ndarray:
    """
    Read and decode a vector file.

    Raises:
        VectorFileError: If the file cannot be read or has the wrong size.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise VectorFileError(str(path), "Cannot read vector file", e) from e
    return decode_vector(data, dimension, str(path))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity computed in float32.

    Returns 0.0 when either vector has zero norm or the lengths differ.
    """
    va = np.asarray(a, dtype=np.float32)
    vb = np.asarray(b, dtype=np.float32)
    if va.shape != vb.shape:
        return 0.0

    norm_a = np.float32(np.linalg.norm(va))
    norm_b = np.float32(np.linalg.norm(vb))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))
