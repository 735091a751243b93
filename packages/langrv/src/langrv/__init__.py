"""
langrv - Random Indexing for Language Identification

Projects the overlapping character n-grams of a text into a fixed-width
vector. Texts sharing many n-grams get vectors with high cosine similarity,
which makes corpus-scale language profiles cheap to build and compare.

Quick Start:
    from langrv import make_builder, build, merge, score

    builder = make_builder(order=3, dimension=10000, seed=42)
    a = build(builder, "I like birds")
    b = build(builder, "I like jam")
    merge(a, build(builder, "and some more things"))

    score(a, a)   # 1.0
    score(a, b)   # == score(b, a), < 1

Modules:
    langrv.types       - Builder configuration (Pydantic) and errors
    langrv.projector   - Hash-derived sparse index vectors per n-gram
    langrv.builder     - make_builder, build, build_profile
    langrv.operators   - merge, score, batch_score
    langrv.classifier  - Language profiles and argmax classification
    langrv.corpus      - Language data files, bible download/extraction
    langrv.evaluate    - Parallel accuracy/throughput evaluation
    langrv.settings    - Environment-driven harness settings
"""

__version__ = "0.2.0"

# Core
from .builder import Builder, build, build_profile, make_builder, ngrams
from .operators import batch_score, merge, score
from .projector import IndexProjector, project_ngram

# Types
from .types import (
    BuilderConfig,
    ConfigurationError,
    CorpusError,
    DimensionMismatchError,
    LangrvError,
)

# Harness
from .classifier import LanguageClassifier

__all__ = [
    # Version
    "__version__",
    # Core
    "Builder",
    "make_builder",
    "build",
    "build_profile",
    "ngrams",
    "merge",
    "score",
    "batch_score",
    "IndexProjector",
    "project_ngram",
    # Types
    "BuilderConfig",
    "LangrvError",
    "ConfigurationError",
    "DimensionMismatchError",
    "CorpusError",
    # Harness
    "LanguageClassifier",
]
