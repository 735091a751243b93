"""
langrv/corpus.py - Language data files

Language data is one plain utf-8 file per language, `<DIR>/<Language>.txt`,
one sentence (bible verse) per line. The files are produced from the
archive of XML-formatted bibles: every `<name>.xml.gz` member of the archive
becomes `<name>.txt` holding the stripped text of each `seg` element.
"""
from __future__ import annotations

import gzip
import itertools
import logging
import re
import tarfile
import xml.etree.ElementTree as ET
import zlib
from collections.abc import Iterator
from pathlib import Path

import httpx

from .types import CorpusError

logger = logging.getLogger(__name__)

_BIBLE_MEMBER = re.compile(r"^(.+)\.xml\.gz$")


# =============================================================================
# READING
# =============================================================================

def language_path(data_dir: str | Path, language: str) -> Path:
    """Path of a language's data file."""
    return Path(data_dir) / f"{language}.txt"


def list_languages(data_dir: str | Path) -> list[str]:
    """Languages available in a data directory (sorted)."""
    directory = Path(data_dir)
    if not directory.is_dir():
        raise CorpusError(f"Not a directory: {directory}")
    return sorted(p.stem for p in directory.glob("*.txt"))


def read_lines(
    path: str | Path,
    start: int = 0,
    count: int | None = None,
) -> Iterator[str]:
    """Lazily yield lines [start, start + count) without trailing newlines.

    Raises:
        CorpusError: if the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise CorpusError(f"Language file not found: {path}")
    return _iter_lines(path, start, count)


def _iter_lines(path: Path, start: int, count: int | None) -> Iterator[str]:
    stop = None if count is None else start + count
    with open(path, "r", encoding="utf-8") as f:
        for line in itertools.islice(f, start, stop):
            yield line.rstrip("\n")


# =============================================================================
# DOWNLOAD & EXTRACTION
# =============================================================================

def download_archive(
    url: str,
    destination: str | Path,
    *,
    timeout: float = 60.0,
    client: httpx.Client | None = None,
) -> Path:
    """Stream a remote archive to disk.

    Raises httpx.HTTPStatusError on a non-2xx response.
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=timeout, follow_redirects=True)

    try:
        logger.info("Downloading %s", url)
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(destination, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    finally:
        if owns_client:
            client.close()

    logger.info("Saved %s (%d bytes)", destination, destination.stat().st_size)
    return destination


def _segments(xml_bytes: bytes) -> list[str]:
    root = ET.fromstring(xml_bytes)
    return [seg.text.strip() for seg in root.iter("seg") if seg.text is not None]


def extract_bibles(archive: str | Path, dest_dir: str | Path) -> list[str]:
    """Extract one text file per bible from a .tar.gz archive.

    Args:
        archive: Archive containing `<name>.xml.gz` members
        dest_dir: Directory to write `<name>.txt` files into

    Returns:
        Names of the extracted languages, in archive order

    Raises:
        CorpusError: if the archive cannot be read
    """
    dest = Path(dest_dir)
    dest.mkdir(parents=True, exist_ok=True)
    extracted = []

    try:
        with tarfile.open(archive, "r:*") as tar:
            for member in tar:
                basename = Path(member.name).name
                m = _BIBLE_MEMBER.match(basename)
                if m is None or not member.isfile():
                    logger.info("Skipping %s", member.name)
                    continue

                name = m.group(1)
                logger.info("Converting %s", member.name)
                handle = tar.extractfile(member)
                if handle is None:
                    continue
                with handle, gzip.open(handle) as input_file:
                    texts = _segments(input_file.read())

                # nothing is written for a member that fails to decompress or parse
                with open(dest / f"{name}.txt", "w", encoding="utf-8") as output_file:
                    for text in texts:
                        output_file.write(text + "\n")
                extracted.append(name)
    except (tarfile.TarError, OSError, EOFError, zlib.error, ET.ParseError) as e:
        raise CorpusError(f"Cannot extract {archive}: {e}") from e

    return extracted
