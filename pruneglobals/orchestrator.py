"""Pipeline orchestration for a prune-globals run."""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .analyzers import FileModelBuilder, UsageScanner, build_corpus
from .annotator import AssignmentAnnotator
from .config import PruneConfig, load_config
from .corpus import load_corpus, relative_name
from .logging import get_logger
from .models import Corpus, FileAnnotation


@dataclass
class FileOutcome:
    """Result of annotating and persisting a single file."""

    path: Path
    changed: bool
    written: bool = False
    diff: str = ""
    parse_error: Optional[str] = None
    write_error: Optional[str] = None


@dataclass
class RunOutcome:
    """Per-file results of a run, in corpus order."""

    source_dir: Path
    dry_run: bool
    files: List[FileOutcome] = field(default_factory=list)

    @property
    def rewritten(self) -> List[FileOutcome]:
        return [outcome for outcome in self.files if outcome.changed and not outcome.write_error]

    @property
    def unchanged(self) -> List[FileOutcome]:
        return [outcome for outcome in self.files if not outcome.changed]

    @property
    def parse_failures(self) -> List[FileOutcome]:
        return [outcome for outcome in self.files if outcome.parse_error]

    @property
    def write_failures(self) -> List[FileOutcome]:
        return [outcome for outcome in self.files if outcome.write_error]


class Orchestrator:
    """Coordinates loading, analysis, annotation and write-back."""

    def __init__(
        self,
        config: PruneConfig | None = None,
        builder: FileModelBuilder | None = None,
    ) -> None:
        self._config = config
        self.builder = builder or FileModelBuilder()
        self.logger = get_logger("orchestrator")

    def run(self, source_dir: Path | str | None = None, *, dry_run: bool = False) -> RunOutcome:
        """Annotate every global assignment under ``source_dir``.

        All files are read and parsed before anything is rewritten, so writes
        made during the run never influence later scans.
        """
        config = self._config or load_config(Path.cwd())
        directory = Path(source_dir).expanduser() if source_dir is not None else config.source_dir
        self.logger.info("Starting run for %s", directory)

        corpus = load_corpus(
            directory,
            extensions=config.extensions,
            marker=config.marker,
            encoding=config.encoding,
        )
        build_corpus(corpus, self.builder)
        self.logger.debug(
            "Built %d model(s), %d parse failure(s)",
            sum(1 for _ in corpus.models()),
            len(corpus.failures()),
        )

        annotator = AssignmentAnnotator(UsageScanner(corpus), corpus.root, namespace=config.namespace)
        outcome = RunOutcome(source_dir=directory, dry_run=dry_run)
        for path, source in corpus.sources.items():
            self.logger.info("-------- %s", path)
            annotation = annotator.annotate(source)
            file_outcome = FileOutcome(
                path=path,
                changed=annotation.changed,
                parse_error=self._parse_error(corpus, path),
            )
            if annotation.changed:
                file_outcome.diff = self._render_diff(annotation, corpus.root)
                if dry_run:
                    self.logger.info("Dry-run; not writing %s", path)
                else:
                    self._write(annotation, config.encoding, file_outcome)
            else:
                self.logger.debug("%s is already up to date; skipping write", path)
            outcome.files.append(file_outcome)

        self.logger.info(
            "Run complete: %d rewritten, %d unchanged, %d parse failure(s), %d write failure(s)",
            len(outcome.rewritten),
            len(outcome.unchanged),
            len(outcome.parse_failures),
            len(outcome.write_failures),
        )
        return outcome

    def _write(self, annotation: FileAnnotation, encoding: str, outcome: FileOutcome) -> None:
        self.logger.info("Writing file %s", annotation.path)
        try:
            annotation.path.write_text(annotation.updated, encoding=encoding, newline="")
        except OSError as exc:
            self.logger.error("Unable to write %s: %s", annotation.path, exc)
            outcome.write_error = str(exc)
            return
        outcome.written = True

    @staticmethod
    def _parse_error(corpus: Corpus, path: Path) -> Optional[str]:
        result = corpus.results.get(path)
        return result.error if result is not None else None

    @staticmethod
    def _render_diff(annotation: FileAnnotation, root: Path) -> str:
        name = relative_name(annotation.path, root)
        diff = difflib.unified_diff(
            annotation.original.splitlines(keepends=True),
            annotation.updated.splitlines(keepends=True),
            fromfile=f"{name} (original)",
            tofile=f"{name} (updated)",
        )
        return "".join(diff)


__all__ = ["FileOutcome", "Orchestrator", "RunOutcome"]
