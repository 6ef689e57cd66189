"""Cross-file usage scanning over parsed file models."""

from __future__ import annotations

from pathlib import Path
from typing import List

from ..logging import get_logger
from ..models import Corpus, DependencyReport, FileModel


class UsageScanner:
    """Finds files that reference an identifier outside of a module import.

    Matching is token based: any identifier-kind token with the same text
    counts as a use, whether it is a call, a property name or a shadowing
    local. Files that import a binding with the same name are treated as
    using their own module export and are never reported. Files that failed
    to parse cannot be searched and are never reported either.
    """

    def __init__(self, corpus: Corpus) -> None:
        self.corpus = corpus
        self.logger = get_logger("analyzers.usage")

    def scan(self, identifier: str, exclude: Path) -> DependencyReport:
        """Return the files, in corpus order, that appear to use ``identifier``."""
        files: List[Path] = []
        for path, result in self.corpus.results.items():
            if path == exclude:
                continue
            if result.model is None:
                self.logger.debug("Skipping %s for %s: file did not parse", path, identifier)
                continue
            if self.uses(result.model, identifier):
                files.append(path)
        return DependencyReport(identifier=identifier, origin=exclude, files=tuple(files))

    def uses(self, model: FileModel, identifier: str) -> bool:
        """Return True when ``model`` references ``identifier`` as a global."""
        self.logger.debug("Checking %s for %s", model.path, identifier)
        if identifier in model.imported_names:
            self.logger.debug("Found module (non-global) import of %s in %s", identifier, model.path)
            return False
        for token in model.tokens:
            if token.kind == "identifier" and token.value == identifier:
                self.logger.debug("Found %s in %s", identifier, model.path)
                return True
        return False


__all__ = ["UsageScanner"]
