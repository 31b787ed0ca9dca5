"""
Embedding providers.

A provider must be set up before use; embedding text on a provider that has
not been set up raises NotInitializedError instead of loading lazily.
"""

from abc import ABC, abstractmethod
import hashlib

import numpy as np

from jobmatch.core.config import EMBED_DIM, EMBED_MODEL_NAME
from jobmatch.core.errors import NotInitializedError
from jobmatch.util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def setup(self) -> None:
        """Load whatever the provider needs before it can embed text."""
        pass

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        pass

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def _require_initialized(self):
        if not self.is_initialized:
            raise NotInitializedError(
                f"{self.__class__.__name__} is not initialized. Call setup() first."
            )


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    The SHA-256 digest of the text seeds a random generator, so the same text
    always maps to the same unit-length vector without any model download.
    """

    def __init__(self, dimension: int = EMBED_DIM):
        self.dimension = dimension
        self._ready = False

    def setup(self) -> None:
        self._ready = True

    @property
    def is_initialized(self) -> bool:
        return self._ready

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        self._require_initialized()

        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "little")
        vector = np.random.default_rng(seed).standard_normal(self.dimension)

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.astype(np.float32).tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Defaults to the GTE base model (768 dimensions); embeddings are mean
    pooled by the model and normalized to unit length.
    """

    def __init__(self, model_name: str = EMBED_MODEL_NAME, dimension: int = EMBED_DIM):
        self.model_name = model_name
        self.dimension = dimension
        self._model = None

    def setup(self) -> None:
        """Load the model. Load failures propagate to the caller."""
        if self._model is not None:
            return

        from sentence_transformers import SentenceTransformer

        logger.info(f"Loading embedding model {self.model_name}...")
        try:
            self._model = SentenceTransformer(self.model_name)
        except Exception as e:
            logger.error(f"Failed to load the embedding model {self.model_name}: {e}")
            raise
        logger.info("Embedding model loaded successfully")

    @property
    def is_initialized(self) -> bool:
        return self._model is not None

    @property
    def model(self):
        self._require_initialized()
        return self._model

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False, normalize_embeddings=True)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._model is not None:
            return self._model.get_sentence_embedding_dimension()
        return self.dimension
