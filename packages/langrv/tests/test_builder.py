"""
tests/test_builder.py - Builder configuration and vectorization

Properties tested:
    - Invalid parameters fail at construction with ConfigurationError
    - build() is deterministic, seed-sensitive and frequency-sensitive
    - Too-short text yields the zero vector
    - Windows are counted in characters, not bytes
"""

import dataclasses
from concurrent.futures import ThreadPoolExecutor

import pytest
import torch
from pydantic import ValidationError

from langrv import (
    Builder,
    BuilderConfig,
    ConfigurationError,
    build,
    build_profile,
    make_builder,
    merge,
    ngrams,
    score,
)

# =============================================================================
# CONFIGURATION
# =============================================================================


class TestMakeBuilder:
    """Tests for builder construction."""

    def test_parameters_exposed(self, builder):
        assert builder.order == 3
        assert builder.dimension == 10000
        assert builder.seed == 42
        assert builder.config.nonzeros == 7

    @pytest.mark.parametrize(
        "order,dimension,seed",
        [(0, 100, 1), (-1, 100, 1), (3, 0, 1), (3, -5, 1), (3, 6, 1)],
    )
    def test_invalid_parameters(self, order, dimension, seed):
        with pytest.raises(ConfigurationError):
            make_builder(order, dimension, seed)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            make_builder(3, 2, 42)

    def test_dimension_must_hold_nonzeros(self):
        make_builder(3, 4, 42, nonzeros=3)
        with pytest.raises(ConfigurationError):
            make_builder(3, 4, 42, nonzeros=5)

    def test_unknown_option_rejected(self):
        with pytest.raises(ConfigurationError):
            make_builder(3, 100, 42, nonzero=3)

    def test_unknown_dtype_rejected(self):
        with pytest.raises(ConfigurationError):
            make_builder(3, 100, 42, dtype="int8")

    def test_config_is_frozen(self, builder):
        with pytest.raises(ValidationError):
            builder.config.order = 5

    def test_builder_is_frozen(self, builder):
        with pytest.raises(dataclasses.FrozenInstanceError):
            builder.config = BuilderConfig(order=2, dimension=100, seed=1)

    def test_equal_parameters_compare_equal(self):
        assert make_builder(3, 100, 1) == make_builder(3, 100, 1)
        assert make_builder(3, 100, 1) != make_builder(3, 100, 2)

    def test_builder_direct_construction(self):
        builder = Builder(BuilderConfig(order=2, dimension=64, seed=9))
        assert builder.projector.dimension == 64


# =============================================================================
# VECTORIZATION
# =============================================================================


class TestNgrams:
    """Tests for the sliding window."""

    def test_window_count(self):
        assert ngrams("abcdef", 3) == ["abc", "bcd", "cde", "def"]

    def test_short_text(self):
        assert ngrams("ab", 3) == []
        assert ngrams("", 1) == []

    def test_counts_characters_not_bytes(self):
        assert ngrams("héllo", 3) == ["hél", "éll", "llo"]
        assert len(ngrams("日本語のテキスト", 2)) == 7


class TestBuild:
    """Tests for build()."""

    def test_shape_and_dtype(self, builder):
        v = build(builder, "I like birds")
        assert v.shape == (10000,)
        assert v.dtype == torch.float32

    def test_float64_option(self):
        v = build(make_builder(3, 100, 1, dtype="float64"), "hello")
        assert v.dtype == torch.float64

    def test_call_matches_build(self, builder):
        assert torch.equal(builder("I like jam"), build(builder, "I like jam"))

    @pytest.mark.parametrize("text", ["", "a", "ab"])
    def test_short_text_is_zero(self, builder, text):
        v = build(builder, text)
        assert v.shape == (10000,)
        assert torch.count_nonzero(v) == 0

    def test_single_window(self, builder):
        v = build(builder, "abc")
        assert torch.count_nonzero(v) == 7
        assert set(v[v != 0].tolist()) <= {-1.0, 1.0}

    def test_multibyte_single_window(self, builder):
        v = build(builder, "ééé")
        assert torch.count_nonzero(v) == 7

    def test_returns_fresh_vector(self, builder):
        a = build(builder, "abcdef")
        b = build(builder, "abcdef")
        a.zero_()
        assert torch.count_nonzero(b) > 0

    def test_deterministic(self, builder):
        a = build(builder, "The quick brown fox")
        b = build(make_builder(3, 10000, 42), "The quick brown fox")
        assert torch.equal(a, b)

    def test_deterministic_across_threads(self, builder):
        texts = [f"line number {i} of some text" for i in range(40)]
        serial = [build(builder, t) for t in texts]
        with ThreadPoolExecutor(max_workers=4) as executor:
            parallel = list(executor.map(lambda t: build(builder, t), texts))
        for s, p in zip(serial, parallel):
            assert torch.equal(s, p)

    def test_cache_does_not_change_output(self):
        text = "abracadabra abracadabra"
        cached = build(make_builder(3, 2048, 5, cache_size=4), text)
        uncached = build(make_builder(3, 2048, 5, cache_size=0), text)
        assert torch.equal(cached, uncached)

    def test_seed_sensitivity(self):
        a = build(make_builder(3, 10000, 1), "I like birds")
        b = build(make_builder(3, 10000, 2), "I like birds")
        assert not torch.equal(a, b)

    def test_frequency_sensitivity(self, builder):
        """'aaaa' holds the n-gram 'aaa' twice."""
        once = build(builder, "aaa")
        twice = build(builder, "aaaa")
        assert torch.equal(twice, 2 * once)

        positions, _ = builder.projector.project("aaa")
        idx = torch.from_numpy(positions)
        assert (twice[idx].abs() > once[idx].abs()).all()

    def test_no_case_folding(self, builder):
        assert not torch.equal(build(builder, "abc"), build(builder, "ABC"))

    def test_rejects_bytes(self, builder):
        with pytest.raises(TypeError):
            build(builder, b"abc")

    def test_lone_surrogate_text(self):
        # str from a surrogateescape read
        text = b"ab\xffcd".decode("utf-8", "surrogateescape")
        v = build(make_builder(3, 100, 1), text)
        assert torch.count_nonzero(v) > 0


class TestNgramBag:
    """Vectors depend on the multiset of n-grams, not their arrangement."""

    def test_bigram_invariance(self):
        builder = make_builder(2, 10000, 42)
        # both texts hold .a a. .b b.
        assert score(build(builder, ".a.b."), build(builder, ".b.a.")) == pytest.approx(1)

    def test_trigram_sensitivity(self, builder):
        assert score(build(builder, ".a.b."), build(builder, ".b.a.")) < 0.99

    def test_trigram_invariance(self, builder):
        # both texts hold ..a .a. a.. ..b .b. b..
        assert score(build(builder, "..a..b.."), build(builder, "..b..a..")) == pytest.approx(1)


class TestBuildProfile:
    """Tests for line-by-line profile accumulation."""

    def test_matches_manual_merge(self, builder):
        lines = ["I like birds", "I like jam", "and some more things"]
        manual = build(builder, lines[0])
        for line in lines[1:]:
            merge(manual, build(builder, line))

        assert torch.equal(build_profile(builder, lines), manual)

    def test_accepts_stream(self, builder):
        lines = (f"verse {i}" for i in range(5))
        profile = build_profile(builder, lines)
        assert torch.count_nonzero(profile) > 0

    def test_empty_stream_is_zero(self, builder):
        assert torch.count_nonzero(build_profile(builder, [])) == 0
