"""
langrv/classifier.py - Language profiles and argmax classification

A profile is the merge of the vectors of many training lines of one
language. Classification builds the vector of an unseen text and picks the
profile with the highest cosine score.

Thread-safe by isolation: during fit() each worker owns exactly one
profile; profiles are installed from the calling thread after the workers
finish.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import torch

from .builder import Builder, build, build_profile
from .operators import batch_score, merge

logger = logging.getLogger(__name__)


def train_profile(builder: Builder, lines: Iterable[str]) -> tuple[torch.Tensor, int]:
    """Build a profile from lines, also counting the characters consumed."""
    nchars = 0

    def counted():
        nonlocal nchars
        for line in lines:
            nchars += len(line)
            yield line

    profile = build_profile(builder, counted())
    return profile, nchars


@dataclass
class LanguageClassifier:
    """Nearest-profile language classifier.

    Example:
        classifier = LanguageClassifier(make_builder(4, 10000, 42))
        classifier.train("English", english_lines)
        classifier.train("French", french_lines)
        classifier.classify("Au commencement")   # -> "French"
    """

    builder: Builder
    profiles: dict[str, torch.Tensor] = field(default_factory=dict)

    @property
    def languages(self) -> list[str]:
        return list(self.profiles)

    def train(self, language: str, lines: Iterable[str]) -> int:
        """Merge lines into a language's profile.

        Args:
            language: Profile name (created on first use)
            lines: Training text, one item per line

        Returns:
            Number of characters consumed
        """
        profile, nchars = train_profile(self.builder, lines)
        if language in self.profiles:
            merge(self.profiles[language], profile)
        else:
            self.profiles[language] = profile
        return nchars

    def fit(
        self,
        corpora: Mapping[str, Iterable[str]],
        max_workers: int | None = None,
    ) -> dict[str, int]:
        """Train several languages in parallel, one worker per language.

        Returns:
            Characters consumed per language
        """
        if not corpora:
            return {}

        workers = max_workers or len(corpora)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                language: executor.submit(train_profile, self.builder, lines)
                for language, lines in corpora.items()
            }
            trained = {language: future.result() for language, future in futures.items()}

        nchars = {}
        for language, (profile, count) in trained.items():
            if language in self.profiles:
                merge(self.profiles[language], profile)
            else:
                self.profiles[language] = profile
            nchars[language] = count
            logger.debug("Trained %s on %d chars", language, count)
        return nchars

    def scores(self, text: str) -> dict[str, float]:
        """Score a text against every profile."""
        if not self.profiles:
            return {}
        query = build(self.builder, text)
        stacked = torch.stack(list(self.profiles.values()))
        sims = batch_score(query, stacked).tolist()
        return dict(zip(self.profiles, sims))

    def classify(self, text: str) -> str | None:
        """Best-scoring language, or None without profiles.

        Ties go to the language trained first.
        """
        scores = self.scores(text)
        if not scores:
            return None
        return max(scores, key=scores.__getitem__)
