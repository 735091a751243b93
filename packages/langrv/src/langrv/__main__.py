"""CLI entry point for langrv.

Usage:
    # Score the example sentences
    python -m langrv demo

    # Download & extract the XML bibles into one text file per language
    python -m langrv extract data/
    python -m langrv extract data/ --archive XML_Bibles.tar.gz
    python -m langrv extract data/ --dry-run

    # Train on the first lines of each language, classify the next ones
    python -m langrv evaluate data/
    python -m langrv evaluate data/ --languages English French --order 3 -v

    # Classify free text
    python -m langrv classify data/ "In the beginning" "Au commencement"

Defaults come from LANGRV_* environment variables (see langrv.settings).
"""

from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from pathlib import Path

import httpx

from .builder import Builder, build, make_builder
from .classifier import LanguageClassifier
from .corpus import download_archive, extract_bibles, language_path, read_lines
from .evaluate import evaluate
from .operators import merge, score
from .settings import LangrvSettings, get_settings
from .types import LangrvError


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {number}")
    return number


def _override(value, default):
    return default if value is None else value


def _make_builder(args: argparse.Namespace, settings: LangrvSettings) -> Builder:
    options = settings.builder_options()
    for name in ("order", "dimension", "seed"):
        value = getattr(args, name, None)
        if value is not None:
            options[name] = value
    return make_builder(**options)


def _cmd_demo(args: argparse.Namespace, settings: LangrvSettings) -> None:
    """Score the example sentences against each other."""
    builder = make_builder(3, 10000, 42)
    a = build(builder, "I like birds")
    b = build(builder, "I like jam")
    merge(a, build(builder, "and some more things"))

    print(f"a.a = {score(a, a):f}")
    print(f"b.b = {score(b, b):f}")
    print(f"a.b = {score(a, b):f}")
    print(f"b.a = {score(b, a):f}")


def _cmd_extract(args: argparse.Namespace, settings: LangrvSettings) -> None:
    """Download (unless --archive is given) and extract the bibles."""
    dest = Path(args.dest)

    if args.dry_run:
        if args.archive is None:
            print(f"$ download {args.remote}")
        print(f"$ extract {args.archive or 'archive.tar.gz'} -> {dest}")
        return

    if args.archive is not None:
        names = extract_bibles(args.archive, dest)
    else:
        with tempfile.TemporaryDirectory() as tmp:
            archive = download_archive(
                args.remote,
                Path(tmp) / "archive.tar.gz",
                timeout=settings.download_timeout,
            )
            names = extract_bibles(archive, dest)

    print(f"Extracted {len(names)} languages into {dest}")


def _cmd_evaluate(args: argparse.Namespace, settings: LangrvSettings) -> None:
    """Run the functional (quality) test."""
    builder = _make_builder(args, settings)
    report = evaluate(
        args.data,
        args.languages or settings.languages,
        builder,
        train_lines=_override(args.train_lines, settings.train_lines),
        valid_lines=_override(args.valid_lines, settings.valid_lines),
        max_workers=_override(args.workers, settings.max_workers),
    )
    print(report.summary())


def _cmd_classify(args: argparse.Namespace, settings: LangrvSettings) -> None:
    """Train on the data directory and classify each TEXT."""
    builder = _make_builder(args, settings)
    languages = args.languages or settings.languages
    train_lines = _override(args.train_lines, settings.train_lines)

    classifier = LanguageClassifier(builder)
    classifier.fit(
        {
            language: read_lines(language_path(args.data, language), 0, train_lines)
            for language in languages
        },
        max_workers=_override(args.workers, settings.max_workers),
    )
    for text in args.text:
        print(f"{classifier.classify(text)}\t{text}")


def _add_builder_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--order", type=int, help="N-gram length")
    parser.add_argument("--dimension", type=int, help="Vector dimensionality")
    parser.add_argument("--seed", type=int, help="Projection seed")
    parser.add_argument("--languages", nargs="+", metavar="LANG", help="Languages to use")
    parser.add_argument("--train-lines", type=_non_negative_int, help="Training lines per language")
    parser.add_argument("--workers", type=_positive_int, help="Worker threads")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="langrv",
        description="Language identification using random indexed n-gram vectors.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command")

    demo = sub.add_parser("demo", help="Score the example sentences")
    demo.set_defaults(func=_cmd_demo)

    settings = get_settings()
    extract = sub.add_parser("extract", help="Download & extract XML bibles")
    extract.add_argument("dest", metavar="DIR", help="Destination for the language files")
    extract.add_argument("--remote", default=settings.corpus_url, help="Archive URL")
    extract.add_argument("--archive", help="Use a local archive instead of downloading")
    extract.add_argument("-d", "--dry-run", action="store_true")
    extract.set_defaults(func=_cmd_extract)

    ev = sub.add_parser("evaluate", help="Measure classification accuracy")
    ev.add_argument("data", metavar="DIR", help="Directory of <Language>.txt files")
    _add_builder_args(ev)
    ev.add_argument("--valid-lines", type=_non_negative_int, help="Validation lines per language")
    ev.set_defaults(func=_cmd_evaluate)

    cl = sub.add_parser("classify", help="Classify text")
    cl.add_argument("data", metavar="DIR", help="Directory of <Language>.txt files")
    cl.add_argument("text", nargs="+", help="Text to classify")
    _add_builder_args(cl)
    cl.set_defaults(func=_cmd_classify)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        format="%(levelname)s\t%(message)s",
        level=[logging.WARNING, logging.INFO, logging.DEBUG][min(args.verbose, 2)],
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        args.func(args, get_settings())
    except (LangrvError, httpx.HTTPError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
