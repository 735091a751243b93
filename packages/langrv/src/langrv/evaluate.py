"""
langrv/evaluate.py - Functional (quality) evaluation of language identification

Two phases over a directory of `<Language>.txt` files:

1. Train: lines [0, train_lines) of each language are merged into that
   language's profile. One worker per language.
2. Classify: lines [train_lines, train_lines + valid_lines) of each language
   are classified against all profiles. One worker per language.

Each phase reports characters processed and throughput per language; the
classify phase also reports accuracy and the confusion counts.
"""
from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .builder import Builder
from .classifier import LanguageClassifier, train_profile
from .corpus import language_path, read_lines

logger = logging.getLogger(__name__)


@dataclass
class PassStats:
    """Throughput of one pass over one language file."""
    language: str
    description: str
    chars: int
    elapsed: float

    @property
    def chars_per_second(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.chars / self.elapsed

    def __str__(self) -> str:
        return (
            f"{self.description}.{self.language}: {self.chars} chars "
            f"at {self.chars_per_second:.1e} chars/s"
        )


@dataclass
class LanguageResult:
    """Classification outcome for one language's validation lines."""
    language: str
    total: int = 0
    correct: int = 0
    confusion: Counter = field(default_factory=Counter)
    stats: PassStats | None = None

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total

    def __str__(self) -> str:
        return f"{self.language} accuracy: {100 * self.accuracy:.1f} %"


@dataclass
class EvaluationReport:
    """Training throughput plus per-language classification results."""
    training: list[PassStats] = field(default_factory=list)
    results: list[LanguageResult] = field(default_factory=list)

    @property
    def overall_accuracy(self) -> float:
        total = sum(r.total for r in self.results)
        if total == 0:
            return 0.0
        return sum(r.correct for r in self.results) / total

    def summary(self) -> str:
        lines = [str(r) for r in self.results]
        lines.append(f"Overall accuracy: {100 * self.overall_accuracy:.1f} %")
        return "\n".join(lines)


def _train_language(
    builder: Builder, data_dir: Path, language: str, count: int
):
    start = time.perf_counter()
    profile, nchars = train_profile(
        builder, read_lines(language_path(data_dir, language), 0, count)
    )
    stats = PassStats(language, "build", nchars, time.perf_counter() - start)
    logger.info("\t%s", stats)
    return profile, stats


def _classify_language(
    classifier: LanguageClassifier,
    data_dir: Path,
    language: str,
    start_line: int,
    count: int,
) -> LanguageResult:
    result = LanguageResult(language)
    nchars = 0
    start = time.perf_counter()

    for line in read_lines(language_path(data_dir, language), start_line, count):
        predicted = classifier.classify(line)
        result.total += 1
        result.confusion[predicted] += 1
        nchars += len(line)
        if predicted == language:
            result.correct += 1
        else:
            logger.debug("   FAIL %s  (%s -> %s)", line, language, predicted)

    result.stats = PassStats(language, "classify", nchars, time.perf_counter() - start)
    logger.info("\t%s", result.stats)
    return result


def evaluate(
    data_dir: str | Path,
    languages: Sequence[str],
    builder: Builder,
    train_lines: int = 1000,
    valid_lines: int = 1000,
    max_workers: int | None = None,
) -> EvaluationReport:
    """Train one profile per language, then measure classification accuracy.

    Args:
        data_dir: Directory holding `<Language>.txt` files
        languages: Languages to evaluate (order breaks score ties)
        builder: Projection configuration
        train_lines: Lines used to build each profile
        valid_lines: Lines classified per language, following the training lines
        max_workers: Worker threads (default: one per language)

    Returns:
        EvaluationReport with results in `languages` order

    Raises:
        CorpusError: if a language file is missing
    """
    data_dir = Path(data_dir)
    report = EvaluationReport()
    classifier = LanguageClassifier(builder)
    if not languages:
        return report

    # Fail before any work if a file is missing
    for language in languages:
        read_lines(language_path(data_dir, language), 0, 0)

    workers = max_workers or len(languages)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        trained = [
            executor.submit(_train_language, builder, data_dir, language, train_lines)
            for language in languages
        ]
        for language, future in zip(languages, trained):
            profile, stats = future.result()
            classifier.profiles[language] = profile
            report.training.append(stats)

        classified = [
            executor.submit(
                _classify_language, classifier, data_dir, language,
                train_lines, valid_lines,
            )
            for language in languages
        ]
        for future in classified:
            result = future.result()
            report.results.append(result)
            logger.info("%s", result)

    return report
