"""
Configuration for the profile/posting matcher.
Values come from environment variables (optionally loaded from a .env file).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database path configuration (":memory:" keeps everything in-process)
DB_PATH = os.getenv("DB_PATH", "./data/jobmatch.db")

# Embedding configuration
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence_transformer")  # sentence_transformer|hash
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "thenlper/gte-base")

# Storage contract: every vector has exactly this many float32 components
EMBED_DIM = 768

# Matching configuration
DEFAULT_MATCH_LIMIT = 3
SKILL_OVERLAP_BOOST = 0.05
SKILL_OVERLAP_MODE = os.getenv("SKILL_OVERLAP_MODE", "substring")  # substring|exact

# Drift audit configuration
DRIFT_RULESET = os.getenv("DRIFT_RULESET", "strict")  # strict|lenient


def get_embedding_provider(setup: bool = True):
    """Get the configured embedding provider, initialized unless setup=False."""
    provider_name = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider_name == "hash":
        from jobmatch.vector.embeddings import DeterministicHashEmbedding
        provider = DeterministicHashEmbedding(dimension=EMBED_DIM)
    elif provider_name == "sentence_transformer":
        from jobmatch.vector.embeddings import SentenceTransformerEmbedding
        provider = SentenceTransformerEmbedding(
            model_name=os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME),
            dimension=EMBED_DIM,
        )
    else:
        raise ValueError(f"Unknown EMBED_PROVIDER: {provider_name}")

    if setup:
        provider.setup()
    return provider


def get_db_path() -> str:
    """Get the database path, re-read from the environment."""
    return os.getenv("DB_PATH", DB_PATH)


def get_skill_overlap_mode() -> str:
    """Get skill overlap mode (substring|exact)."""
    return os.getenv("SKILL_OVERLAP_MODE", SKILL_OVERLAP_MODE)


def get_drift_ruleset() -> str:
    """Get drift ruleset (strict|lenient)."""
    return os.getenv("DRIFT_RULESET", DRIFT_RULESET)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    path = db_path or get_db_path()
    if path == ":memory:":
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if os.getenv("EMBED_PROVIDER", EMBED_PROVIDER) not in ["sentence_transformer", "hash"]:
        issues.append(f"Invalid EMBED_PROVIDER: {os.getenv('EMBED_PROVIDER', EMBED_PROVIDER)}")

    if get_skill_overlap_mode() not in ["substring", "exact"]:
        issues.append(f"Invalid SKILL_OVERLAP_MODE: {get_skill_overlap_mode()}")

    if get_drift_ruleset() not in ["strict", "lenient"]:
        issues.append(f"Invalid DRIFT_RULESET: {get_drift_ruleset()}")

    if not get_db_path():
        issues.append("DB_PATH must not be empty")

    return issues
