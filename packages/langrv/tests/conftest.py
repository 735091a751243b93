"""Shared fixtures for langrv tests."""

from pathlib import Path

import pytest

from langrv import make_builder


def _lines(alphabet: str, count: int) -> list[str]:
    """Deterministic pseudo-sentences drawn from a three-letter alphabet."""
    a, b, c = alphabet
    words = [a + b + c, b + c + a, c + a + b, a + a + b, c + b + b]
    return [
        " ".join(words[(i + j) % len(words)] for j in range(3 + i % 3))
        for i in range(count)
    ]


@pytest.fixture
def builder():
    """The builder used by the end-to-end example."""
    return make_builder(3, 10000, 42)


@pytest.fixture
def small_builder():
    return make_builder(3, 1024, 7)


@pytest.fixture
def language_dir(tmp_path: Path) -> Path:
    """Two toy languages with disjoint alphabets, 20 lines each."""
    (tmp_path / "Alpha.txt").write_text("\n".join(_lines("abc", 20)) + "\n", encoding="utf-8")
    (tmp_path / "Omega.txt").write_text("\n".join(_lines("xyz", 20)) + "\n", encoding="utf-8")
    return tmp_path
