"""Harness configuration.

Loads from environment variables (prefix LANGRV_) and a .env file.
Command-line flags override these values.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from .types import DEFAULT_CACHE_SIZE, DEFAULT_NONZEROS, Device, DType

DEFAULT_LANGUAGES = ["English", "French", "German", "Italian", "Latin", "Vietnamese"]
DEFAULT_CORPUS_URL = "http://homepages.inf.ed.ac.uk/s0787820/bible/XML_Bibles.tar.gz"


class LangrvSettings(BaseSettings):
    """Defaults for training, evaluation and corpus download."""

    # ----- Projection -----
    order: int = Field(default=4, description="N-gram length in characters.")
    dimension: int = Field(default=10000, description="Vector dimensionality.")
    seed: int = Field(default=42, description="Projection seed.")
    nonzeros: int = Field(
        default=DEFAULT_NONZEROS,
        description="Signed contributions per n-gram.",
    )
    dtype: DType = Field(default="float32", description="Accumulator dtype.")
    device: Device = Field(default="cpu", description="cpu, cuda or auto.")
    cache_size: int = Field(
        default=DEFAULT_CACHE_SIZE,
        description="Per-thread projection memo entries.",
    )

    # ----- Evaluation -----
    languages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LANGUAGES),
        description="Languages (file stems) to train and classify.",
    )
    train_lines: int = Field(default=1000, ge=0, description="Training lines per language.")
    valid_lines: int = Field(default=1000, ge=0, description="Validation lines per language.")
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Worker threads. Defaults to one per language.",
    )

    # ----- Corpus -----
    corpus_url: str = Field(
        default=DEFAULT_CORPUS_URL,
        description="Archive of XML-formatted bibles.",
    )
    download_timeout: float = Field(
        default=60.0,
        description="HTTP timeout (seconds) for corpus download.",
    )

    model_config = {
        "env_prefix": "LANGRV_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def builder_options(self) -> dict[str, object]:
        """Keyword arguments for make_builder."""
        return {
            "order": self.order,
            "dimension": self.dimension,
            "seed": self.seed,
            "nonzeros": self.nonzeros,
            "dtype": self.dtype,
            "device": self.device,
            "cache_size": self.cache_size,
        }


@lru_cache
def get_settings() -> LangrvSettings:
    """Get cached settings singleton."""
    return LangrvSettings()
