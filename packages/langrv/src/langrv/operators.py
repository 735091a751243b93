"""
langrv/operators.py - Accumulation and comparison of language vectors

MERGE (+=):
    In-place elementwise addition.
    merge(dst, src): dst[i] <- dst[i] + src[i]

    Properties:
    - Commutative and associative up to floating-point rounding
    - Source left unchanged
    - No normalization: magnitude grows with accumulated text

SCORE (cos):
    Cosine similarity, the only place where vectors are normalized.
    score(a, b) = <a, b> / (||a|| * ||b||)

    Properties:
    - score(a, a) = 1 for nonzero a
    - Symmetric, in [-1, 1]
    - Zero-norm operand scores 0 (no signal)

Both operations require vectors of identical dimension. A mismatch raises
DimensionMismatchError; nothing is padded or truncated.
"""
from __future__ import annotations

import torch

from .types import DimensionMismatchError


def _check_compatible(a: torch.Tensor, b: torch.Tensor, operation: str) -> None:
    if a.dim() != 1 or b.dim() != 1:
        raise DimensionMismatchError(
            f"{operation} expects 1-D vectors, got shapes "
            f"{tuple(a.shape)} and {tuple(b.shape)}"
        )
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatchError(
            f"{operation} dimension mismatch: {a.shape[0]} != {b.shape[0]}"
        )


def merge(destination: torch.Tensor, source: torch.Tensor) -> None:
    """Accumulate `source` into `destination` in place.

    Args:
        destination: Vector to extend (mutated)
        source: Vector to add (unchanged)

    Raises:
        DimensionMismatchError: if the dimensions differ
    """
    _check_compatible(destination, source, "merge")
    if source.device != destination.device:
        source = source.to(destination.device)
    destination.add_(source)


def score(a: torch.Tensor, b: torch.Tensor) -> float:
    """Cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1]; 0.0 if either vector has zero norm

    Raises:
        DimensionMismatchError: if the dimensions differ
    """
    _check_compatible(a, b, "score")
    if b.device != a.device:
        b = b.to(a.device)

    a64 = a.to(torch.float64)
    b64 = b.to(torch.float64)
    norm_a = torch.linalg.vector_norm(a64)
    norm_b = torch.linalg.vector_norm(b64)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    sim = float(torch.dot(a64, b64) / (norm_a * norm_b))
    return max(-1.0, min(1.0, sim))


def batch_score(query: torch.Tensor, profiles: torch.Tensor) -> torch.Tensor:
    """Score one vector against a stack of profiles.

    Args:
        query: Vector of shape (d,)
        profiles: Matrix of shape (n, d)

    Returns:
        float64 scores of shape (n,); rows with zero norm (or a zero-norm
        query) score 0
    """
    if query.dim() != 1 or profiles.dim() != 2:
        raise DimensionMismatchError(
            f"batch_score expects shapes (d,) and (n, d), got "
            f"{tuple(query.shape)} and {tuple(profiles.shape)}"
        )
    if profiles.shape[1] != query.shape[0]:
        raise DimensionMismatchError(
            f"batch_score dimension mismatch: {profiles.shape[1]} != {query.shape[0]}"
        )
    if profiles.device != query.device:
        profiles = profiles.to(query.device)

    q64 = query.to(torch.float64)
    p64 = profiles.to(torch.float64)
    dots = p64 @ q64
    norms = torch.linalg.vector_norm(p64, dim=-1) * torch.linalg.vector_norm(q64)

    scores = torch.zeros_like(dots)
    nonzero = norms > 0
    scores[nonzero] = dots[nonzero] / norms[nonzero]
    return scores.clamp_(-1.0, 1.0)
