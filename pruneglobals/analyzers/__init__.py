"""Parsing and usage analysis for script corpora."""

from __future__ import annotations

from typing import Iterable

from ..models import Corpus, SourceFile
from .tree_sitter import FileModelBuilder, SourceParseError, detect_source_type
from .usage import UsageScanner


def build_corpus(corpus: Corpus, builder: FileModelBuilder | None = None) -> Corpus:
    """Populate ``corpus.results`` with one parse result per source, in order."""
    builder = builder or FileModelBuilder()
    sources: Iterable[SourceFile] = corpus.sources.values()
    for result in builder.build_all(sources):
        corpus.results[result.path] = result
    return corpus


__all__ = [
    "FileModelBuilder",
    "SourceParseError",
    "UsageScanner",
    "build_corpus",
    "detect_source_type",
]
