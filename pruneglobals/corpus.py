"""Source directory loading and region splitting."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

from .config import DEFAULT_ENCODING, DEFAULT_EXTENSIONS, DEFAULT_MARKER
from .logging import get_logger
from .models import Corpus, SourceFile

logger = get_logger("corpus")


class DirectoryReadError(RuntimeError):
    """Raised when the source directory cannot be listed."""


def split_regions(text: str, marker: str = DEFAULT_MARKER) -> Tuple[str, str]:
    """Split text into (declaration, annotation) at the first marker occurrence.

    The annotation region starts at the marker itself. Without a marker the
    whole text is the declaration region and the annotation region is empty.
    """
    index = text.find(marker)
    if index == -1:
        return text, ""
    return text[:index], text[index:]


def list_sources(source_dir: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> List[Path]:
    """Return files directly inside ``source_dir`` with a matching suffix, sorted by name."""
    wanted = {ext.lower() for ext in extensions}
    try:
        entries = sorted(source_dir.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        raise DirectoryReadError(f"Unable to read source directory {source_dir}: {exc}") from exc
    return [entry for entry in entries if entry.is_file() and entry.suffix.lower() in wanted]


def load_corpus(
    source_dir: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    marker: str = DEFAULT_MARKER,
    encoding: str = DEFAULT_ENCODING,
) -> Corpus:
    """Read every matching file once and split it into regions."""
    root = Path(source_dir)
    corpus = Corpus(root=root)
    for path in list_sources(root, extensions):
        try:
            with path.open("r", encoding=encoding, newline="") as handle:
                content = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to read %s: %s", path, exc)
            continue
        declaration, annotation = split_regions(content, marker)
        corpus.sources[path] = SourceFile(
            path=path,
            content=content,
            declaration_text=declaration,
            annotation_text=annotation,
        )
    logger.debug("Loaded %d source file(s) from %s", len(corpus.sources), root)
    return corpus


def relative_name(path: Path, root: Path) -> str:
    """Format ``path`` relative to ``root`` with forward slashes."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
