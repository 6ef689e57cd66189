"""Core data models shared across prune-globals components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

Point = Tuple[int, int]


@dataclass(frozen=True)
class Span:
    """Zero-based (row, column) range of a token in the declaration region."""

    start: Point
    end: Point


@dataclass(frozen=True)
class Token:
    """Single lexical unit taken from a parsed syntax tree."""

    kind: str
    value: str
    span: Span


@dataclass
class SourceFile:
    """Raw contents of a script file, split into its two regions."""

    path: Path
    content: str
    declaration_text: str
    annotation_text: str


@dataclass(frozen=True)
class FileModel:
    """Parsed, read-only view of a file's declaration region."""

    path: Path
    declaration_text: str
    annotation_text: str
    source_type: str
    tree: Any
    tokens: Tuple[Token, ...]
    imported_names: FrozenSet[str]


@dataclass(frozen=True)
class ParseResult:
    """Outcome of building a model: either a model or the reason it failed."""

    path: Path
    model: Optional[FileModel] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.model is not None


@dataclass
class Corpus:
    """All sources and parse results for a single run, in listing order."""

    root: Path
    sources: Dict[Path, SourceFile] = field(default_factory=dict)
    results: Dict[Path, ParseResult] = field(default_factory=dict)

    def models(self) -> Iterator[FileModel]:
        """Yield successfully parsed models in corpus order."""
        for result in self.results.values():
            if result.model is not None:
                yield result.model

    def failures(self) -> List[ParseResult]:
        return [result for result in self.results.values() if not result.ok]


@dataclass(frozen=True)
class GlobalAssignment:
    """A `namespace.identifier = expr;` statement found in an annotation region."""

    identifier: str
    statement: str
    origin: Path
    trailing_comment: Optional[str] = None
    commented_out: bool = False
    line: int = 0


@dataclass(frozen=True)
class DependencyReport:
    """Files, other than the origin, that appear to use an identifier."""

    identifier: str
    origin: Path
    files: Tuple[Path, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.files)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)


@dataclass
class FileAnnotation:
    """Rewritten content for one file along with the evidence behind it."""

    path: Path
    original: str
    updated: str
    entries: List[Tuple[GlobalAssignment, DependencyReport]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.updated != self.original
