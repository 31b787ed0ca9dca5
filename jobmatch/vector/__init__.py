"""
Vector side of the matcher: blob codec, exact KNN index and embedding providers.
"""

# Package initialization for vector module
from .index import IVectorIndex, SQLiteVectorIndex
from .types import VectorEntry, QueryResult
from .codec import serialize_embedding, deserialize_embedding
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding

__all__ = [
    'IVectorIndex',
    'SQLiteVectorIndex',
    'VectorEntry',
    'QueryResult',
    'serialize_embedding',
    'deserialize_embedding',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding'
]
