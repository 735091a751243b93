"""
langrv/projector.py - Index projection for random indexing

Every n-gram owns a sparse ternary index vector: exactly k positions in
[0, dimension) carrying +1 or -1, zeros elsewhere. The index vector is never
stored. It is recomputed from a SHA-256 stream keyed by
(seed, order, n-gram bytes, block counter), so memory stays O(k) per call
no matter how many distinct n-grams a corpus contains.

Hash stream layout:
    key(block) = b"{seed}:{order}:{len(ngram_bytes)}:" + ngram_bytes + b":{block}"
    ngram_bytes = utf-8 with surrogatepass, so lone surrogates still hash
    digest     = sha256(key(block)), read as 8 little-endian uint32 words

    word bit 31      -> sign (set means -1)
    word bits 0..30  -> position candidate

Candidates >= floor(2**31 / dimension) * dimension are rejected so that
`candidate % dimension` is uniform; repeated positions are rejected so the
k positions are pairwise distinct. Blocks are consumed in order until k
positions are accepted.

Concurrency:
    project_ngram is a pure function. IndexProjector adds an optional
    per-thread memo (threading.local). Memo values are pure functions of
    their key, so two threads filling the same entry at once only repeat
    work; they can never disagree.
"""
from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict

import numpy as np

from .types import DEFAULT_CACHE_SIZE, DEFAULT_NONZEROS, MAX_DIMENSIONS

logger = logging.getLogger(__name__)

_POSITION_MASK = MAX_DIMENSIONS - 1
_SIGN_BIT = MAX_DIMENSIONS


# =============================================================================
# PURE PROJECTION
# =============================================================================

def _key_prefix(seed: int, order: int, ngram: str) -> bytes:
    ngram_bytes = ngram.encode("utf-8", "surrogatepass")
    return f"{seed}:{order}:{len(ngram_bytes)}:".encode("ascii") + ngram_bytes


def project_ngram(
    ngram: str,
    *,
    seed: int,
    order: int,
    dimension: int,
    nonzeros: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Derive the signed contributions of one n-gram.

    Args:
        ngram: The n-gram text (normally `order` characters long)
        seed: Projection seed
        order: N-gram order, mixed into the key
        dimension: Width of the target space
        nonzeros: Number of contributions k (must be <= dimension)

    Returns:
        (positions, signs): int64 positions, pairwise distinct, and int8
        signs in {+1, -1}, both of length k

    Properties:
        - Deterministic across calls, threads and processes
        - Different seeds give unrelated contribution sets
    """
    if nonzeros > dimension:
        raise ValueError(
            f"cannot place {nonzeros} distinct positions in dimension={dimension}"
        )

    prefix = _key_prefix(seed, order, ngram)
    limit = (MAX_DIMENSIONS // dimension) * dimension

    positions = np.empty(nonzeros, dtype=np.int64)
    signs = np.empty(nonzeros, dtype=np.int8)
    seen: set[int] = set()
    filled = 0
    block = 0

    while filled < nonzeros:
        digest = hashlib.sha256(prefix + f":{block}".encode("ascii")).digest()
        for word in np.frombuffer(digest, dtype="<u4").tolist():
            candidate = word & _POSITION_MASK
            if candidate >= limit:
                continue
            position = candidate % dimension
            if position in seen:
                continue
            seen.add(position)
            positions[filled] = position
            signs[filled] = -1 if word & _SIGN_BIT else 1
            filled += 1
            if filled == nonzeros:
                break
        block += 1

    return positions, signs


# =============================================================================
# PROJECTOR
# =============================================================================

class IndexProjector:
    """Projection bound to one (seed, order, dimension, nonzeros) setting.

    Example:
        projector = IndexProjector(seed=42, order=3, dimension=10000)
        positions, signs = projector.project("abc")

    The optional memo is thread-local and bounded (FIFO eviction), so it
    never needs a lock and never grows past `cache_size` per thread.
    Returned arrays are shared with the memo and must not be modified.
    """

    def __init__(
        self,
        seed: int,
        order: int,
        dimension: int,
        nonzeros: int = DEFAULT_NONZEROS,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        if nonzeros > dimension:
            raise ValueError(
                f"cannot place {nonzeros} distinct positions in dimension={dimension}"
            )
        self.seed = seed
        self.order = order
        self.dimension = dimension
        self.nonzeros = nonzeros
        self.cache_size = cache_size
        self._local = threading.local()

    def _cache(self) -> OrderedDict:
        cache = getattr(self._local, "cache", None)
        if cache is None:
            cache = OrderedDict()
            self._local.cache = cache
            logger.debug(
                "Projection cache created for thread %s (max %d entries)",
                threading.current_thread().name,
                self.cache_size,
            )
        return cache

    def project(self, ngram: str) -> tuple[np.ndarray, np.ndarray]:
        """Get (positions, signs) for an n-gram."""
        if self.cache_size == 0:
            return self._compute(ngram)

        cache = self._cache()
        hit = cache.get(ngram)
        if hit is not None:
            return hit

        result = self._compute(ngram)
        cache[ngram] = result
        if len(cache) > self.cache_size:
            cache.popitem(last=False)
        return result

    def _compute(self, ngram: str) -> tuple[np.ndarray, np.ndarray]:
        return project_ngram(
            ngram,
            seed=self.seed,
            order=self.order,
            dimension=self.dimension,
            nonzeros=self.nonzeros,
        )

    def index_vector(self, ngram: str) -> np.ndarray:
        """Dense int8 index vector of an n-gram (mostly for inspection)."""
        positions, signs = self.project(ngram)
        dense = np.zeros(self.dimension, dtype=np.int8)
        dense[positions] = signs
        return dense

    def clear_cache(self) -> None:
        """Drop the calling thread's memo."""
        cache = getattr(self._local, "cache", None)
        if cache is not None:
            cache.clear()

    @property
    def cached_entries(self) -> int:
        """Entries held by the calling thread's memo."""
        cache = getattr(self._local, "cache", None)
        return 0 if cache is None else len(cache)

    def __repr__(self) -> str:
        return (
            f"IndexProjector(seed={self.seed}, order={self.order}, "
            f"dimension={self.dimension}, nonzeros={self.nonzeros})"
        )
