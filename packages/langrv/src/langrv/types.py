"""
langrv/types.py - Pydantic configuration and error types

Uses Pydantic v2 for validation. The builder configuration is frozen:
once created it is shared read-only by every build/merge/score call.
"""
from __future__ import annotations

from typing import Literal

import torch
from pydantic import BaseModel, Field, model_validator

# Largest dimension addressable by the 31 position bits of a hash word
MAX_DIMENSIONS = 2**31

DEFAULT_NONZEROS = 7
DEFAULT_CACHE_SIZE = 4096

DType = Literal["float32", "float64"]
Device = Literal["cuda", "cpu", "auto"]


# =============================================================================
# ERRORS
# =============================================================================

class LangrvError(Exception):
    """Base class for all langrv errors."""


class ConfigurationError(LangrvError, ValueError):
    """Invalid builder parameters (detected at construction)."""


class DimensionMismatchError(LangrvError, ValueError):
    """Vectors with different dimensions were combined or compared."""


class CorpusError(LangrvError):
    """Language data missing or unreadable."""


# =============================================================================
# BUILDER CONFIGURATION
# =============================================================================

class BuilderConfig(BaseModel):
    """Parameters of the random indexing projection."""

    order: int = Field(..., ge=1, description="N-gram length in characters")
    dimension: int = Field(
        ...,
        ge=1,
        le=MAX_DIMENSIONS,
        description="Vector dimensionality",
    )
    seed: int = Field(..., description="Projection seed")
    nonzeros: int = Field(
        default=DEFAULT_NONZEROS,
        ge=1,
        le=64,
        description="Signed contributions per n-gram (k)",
    )
    dtype: DType = Field(
        default="float32",
        description="Accumulator data type",
    )
    device: Device = Field(
        default="cpu",
        description="Compute device",
    )
    cache_size: int = Field(
        default=DEFAULT_CACHE_SIZE,
        ge=0,
        description="Per-thread projection memo entries (0 disables)",
    )

    @model_validator(mode="after")
    def check_room_for_nonzeros(self) -> "BuilderConfig":
        if self.dimension < self.nonzeros:
            raise ValueError(
                f"dimension={self.dimension} cannot hold "
                f"{self.nonzeros} distinct positions"
            )
        return self

    def get_device(self) -> torch.device:
        """Get torch device based on config."""
        if self.device == "auto":
            return torch.device("cuda" if torch.cuda.is_available() else "cpu")
        return torch.device(self.device)

    def get_dtype(self) -> torch.dtype:
        """Get torch dtype based on config."""
        return torch.float32 if self.dtype == "float32" else torch.float64

    model_config = {"frozen": True, "extra": "forbid"}
