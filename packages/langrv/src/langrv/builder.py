"""
langrv/builder.py - Builder creation and text vectorization

A Builder fixes the projection (order, dimension, seed) and turns text into
dense vectors:

    builder = make_builder(order=3, dimension=10000, seed=42)
    v = build(builder, "I like birds")      # or builder("I like birds")

build() slides a window of `order` characters (code points, not bytes) over
the text with stride 1 and adds the index vector of every window into a zero
accumulator. Repeated n-grams add once per occurrence. Texts shorter than
`order` give the all-zero vector. No case folding or normalization happens
here; callers pass pre-normalized text if they want it.
"""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

import numpy as np
import torch
from pydantic import ValidationError

from .operators import merge
from .projector import IndexProjector
from .types import BuilderConfig, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Builder:
    """Immutable projection configuration plus its index projector.

    Safe to share between threads: the config is frozen and the projector
    only keeps thread-local memo state.
    """

    config: BuilderConfig
    projector: IndexProjector = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        projector = IndexProjector(
            seed=self.config.seed,
            order=self.config.order,
            dimension=self.config.dimension,
            nonzeros=self.config.nonzeros,
            cache_size=self.config.cache_size,
        )
        object.__setattr__(self, "projector", projector)

    @property
    def order(self) -> int:
        return self.config.order

    @property
    def dimension(self) -> int:
        return self.config.dimension

    @property
    def seed(self) -> int:
        return self.config.seed

    def zeros(self) -> torch.Tensor:
        """Fresh all-zero vector for this builder."""
        return torch.zeros(
            self.config.dimension,
            dtype=self.config.get_dtype(),
            device=self.config.get_device(),
        )

    def __call__(self, text: str) -> torch.Tensor:
        return build(self, text)


def make_builder(order: int, dimension: int, seed: int, **options) -> Builder:
    """Create a builder.

    Args:
        order: N-gram length (> 0)
        dimension: Vector dimensionality (> 0, >= nonzeros)
        seed: Projection seed
        **options: nonzeros, dtype, device, cache_size (see BuilderConfig)

    Returns:
        Builder

    Raises:
        ConfigurationError: if any parameter is invalid
    """
    try:
        config = BuilderConfig(order=order, dimension=dimension, seed=seed, **options)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid builder parameters: {e}") from e

    logger.debug(
        "Builder created: order=%d dimension=%d seed=%d nonzeros=%d",
        config.order,
        config.dimension,
        config.seed,
        config.nonzeros,
    )
    return Builder(config)


def ngrams(text: str, order: int) -> list[str]:
    """All windows of `order` consecutive characters, stride 1."""
    return [text[i:i + order] for i in range(len(text) - order + 1)]


def build(builder: Builder, text: str) -> torch.Tensor:
    """Build the random-indexed vector of a text.

    Args:
        builder: Projection configuration
        text: Input text

    Returns:
        New vector of shape (dimension,); all zeros if len(text) < order
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be str, got {type(text).__name__}")

    vector = builder.zeros()
    counts = Counter(ngrams(text, builder.order))
    if not counts:
        return vector

    k = builder.config.nonzeros
    positions = np.empty(len(counts) * k, dtype=np.int64)
    signs = np.empty(len(counts) * k, dtype=np.float64)

    for j, gram in enumerate(counts):
        gram_positions, gram_signs = builder.projector.project(gram)
        positions[j * k:(j + 1) * k] = gram_positions
        signs[j * k:(j + 1) * k] = gram_signs

    occurrences = np.fromiter(counts.values(), dtype=np.float64, count=len(counts))
    weights = signs * np.repeat(occurrences, k)

    vector.index_add_(
        0,
        torch.from_numpy(positions).to(vector.device),
        torch.from_numpy(weights).to(dtype=vector.dtype, device=vector.device),
    )
    return vector


def build_profile(builder: Builder, lines: Iterable[str]) -> torch.Tensor:
    """Fold the vectors of many lines into one profile.

    Lines are consumed one at a time, so `lines` may be a lazy stream.
    """
    profile = builder.zeros()
    for line in lines:
        merge(profile, build(builder, line))
    return profile
