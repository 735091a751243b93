"""
Tests for the functional evaluation harness.
"""

import pytest

from langrv import CorpusError, make_builder
from langrv.evaluate import EvaluationReport, LanguageResult, PassStats, evaluate


class TestEvaluate:
    """End-to-end evaluation over toy languages."""

    def test_disjoint_languages_classified(self, language_dir, builder):
        report = evaluate(language_dir, ["Alpha", "Omega"], builder, train_lines=10, valid_lines=10)

        assert [r.language for r in report.results] == ["Alpha", "Omega"]
        for result in report.results:
            assert result.total == 10
            assert result.correct == 10
            assert result.confusion == {result.language: 10}
        assert report.overall_accuracy == 1.0

    def test_training_stats(self, language_dir, builder):
        report = evaluate(language_dir, ["Alpha", "Omega"], builder, train_lines=10, valid_lines=5)

        assert [s.language for s in report.training] == ["Alpha", "Omega"]
        assert all(s.description == "build" for s in report.training)
        assert all(s.chars > 0 for s in report.training)
        assert all(r.stats.description == "classify" for r in report.results)

    def test_validation_past_end_of_file(self, language_dir, builder):
        report = evaluate(language_dir, ["Alpha"], builder, train_lines=15, valid_lines=100)
        assert report.results[0].total == 5

    def test_summary(self, language_dir, builder):
        report = evaluate(language_dir, ["Alpha", "Omega"], builder, train_lines=10, valid_lines=10)
        summary = report.summary()
        assert "Alpha accuracy: 100.0 %" in summary
        assert "Omega accuracy: 100.0 %" in summary
        assert "Overall accuracy: 100.0 %" in summary

    def test_single_worker(self, language_dir):
        builder = make_builder(4, 4096, 1)
        report = evaluate(
            language_dir, ["Alpha", "Omega"], builder,
            train_lines=10, valid_lines=10, max_workers=1,
        )
        assert report.overall_accuracy == 1.0

    def test_missing_language(self, language_dir, builder):
        with pytest.raises(CorpusError):
            evaluate(language_dir, ["Alpha", "Klingon"], builder)

    def test_no_languages(self, language_dir, builder):
        report = evaluate(language_dir, [], builder)
        assert report.results == []
        assert report.overall_accuracy == 0.0


class TestReportTypes:
    """Tests for report arithmetic and formatting."""

    def test_pass_stats(self):
        stats = PassStats("English", "build", 2000, 0.5)
        assert stats.chars_per_second == 4000.0
        assert str(stats) == "build.English: 2000 chars at 4.0e+03 chars/s"

    def test_pass_stats_zero_elapsed(self):
        assert PassStats("English", "build", 10, 0.0).chars_per_second == 0.0

    def test_language_result(self):
        result = LanguageResult("Latin", total=8, correct=6)
        assert result.accuracy == 0.75
        assert str(result) == "Latin accuracy: 75.0 %"
        assert LanguageResult("Latin").accuracy == 0.0

    def test_overall_accuracy_weighted(self):
        report = EvaluationReport(
            results=[
                LanguageResult("A", total=10, correct=10),
                LanguageResult("B", total=30, correct=0),
            ]
        )
        assert report.overall_accuracy == 0.25
