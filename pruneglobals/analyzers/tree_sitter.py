"""Tree-sitter powered file model builder for JavaScript sources."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Set, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from ..logging import get_logger
from ..models import FileModel, ParseResult, SourceFile, Span, Token

JAVASCRIPT = Language(tree_sitter_javascript.language())

_MODULE_HINT = re.compile(r"import .* from")

IDENTIFIER_KINDS = frozenset(
    {
        "identifier",
        "property_identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
        "statement_identifier",
    }
)

# Literal nodes emitted as a single opaque token.
_OPAQUE_KINDS = {
    "string": "string",
    "comment": "comment",
    "regex": "regex",
}

_MODULE_ONLY_STATEMENTS = {"import_statement", "export_statement"}


class SourceParseError(ValueError):
    """Raised when a declaration region is not valid JavaScript."""


def detect_source_type(text: str) -> str:
    """Return ``"module"`` when the text contains an ``import ... from`` line."""
    return "module" if _MODULE_HINT.search(text) else "script"


class FileModelBuilder:
    """Parses declaration regions into token streams and import bindings."""

    def __init__(self, parser: Optional[Parser] = None) -> None:
        self._parser = parser or Parser(JAVASCRIPT)
        self.logger = get_logger("analyzers.tree_sitter")

    def build(self, source: SourceFile) -> ParseResult:
        """Build a model for ``source``, reporting syntax errors as a failed result."""
        try:
            model = self.parse(source)
        except SourceParseError as exc:
            self.logger.error("Error parsing %s: %s", source.path, exc)
            return ParseResult(path=source.path, error=str(exc))
        self.logger.debug(
            "Parsed %s as %s (%d tokens, %d imported names)",
            source.path,
            model.source_type,
            len(model.tokens),
            len(model.imported_names),
        )
        return ParseResult(path=source.path, model=model)

    def build_all(self, sources: Iterable[SourceFile]) -> List[ParseResult]:
        return [self.build(source) for source in sources]

    def parse(self, source: SourceFile) -> FileModel:
        text = source.declaration_text
        source_type = detect_source_type(text)
        source_bytes = text.encode("utf-8")
        tree = self._parser.parse(source_bytes)
        root = tree.root_node

        if root.has_error:
            raise SourceParseError(self._describe_error(root))
        if source_type == "script":
            for child in root.children:
                if child.type in _MODULE_ONLY_STATEMENTS:
                    row, column = child.start_point
                    raise SourceParseError(
                        f"'import' and 'export' may appear only with sourceType: module "
                        f"(line {row + 1}, column {column + 1})"
                    )

        return FileModel(
            path=source.path,
            declaration_text=text,
            annotation_text=source.annotation_text,
            source_type=source_type,
            tree=tree,
            tokens=tuple(self.tokenize(root, source_bytes)),
            imported_names=frozenset(self.imported_names(root, source_bytes)),
        )

    def tokenize(self, node: Node, source_bytes: bytes) -> Iterator[Token]:
        """Yield the leaves below ``node`` in document order.

        The walk uses an explicit stack; long operator chains produce trees far
        deeper than the interpreter's recursion limit.
        """
        stack: List[Tuple[Node, Optional[str]]] = [(node, None)]
        while stack:
            current, forced_kind = stack.pop()
            if forced_kind is not None:
                yield self._token(forced_kind, current, source_bytes)
                continue
            opaque = _OPAQUE_KINDS.get(current.type)
            if opaque is not None:
                yield self._token(opaque, current, source_bytes)
                continue
            if current.type == "template_string":
                for child in reversed(current.children):
                    if child.type == "template_substitution":
                        stack.append((child, None))
                    else:
                        stack.append((child, "template"))
                continue
            if current.child_count == 0:
                yield self._token(self._leaf_kind(current, source_bytes), current, source_bytes)
                continue
            stack.extend((child, None) for child in reversed(current.children))

    def imported_names(self, root: Node, source_bytes: bytes) -> Set[str]:
        """Collect names bound by top-level import declarations."""
        names: Set[str] = set()
        for statement in root.children:
            if statement.type != "import_statement":
                continue
            for clause in statement.children:
                if clause.type != "import_clause":
                    continue
                for binding in clause.named_children:
                    if binding.type == "identifier":
                        names.add(_node_text(binding, source_bytes))
                    elif binding.type == "namespace_import":
                        for child in binding.named_children:
                            if child.type == "identifier":
                                names.add(_node_text(child, source_bytes))
                    elif binding.type == "named_imports":
                        names.update(self._specifier_names(binding, source_bytes))
        return names

    @staticmethod
    def _specifier_names(named_imports: Node, source_bytes: bytes) -> Iterator[str]:
        for specifier in named_imports.named_children:
            if specifier.type != "import_specifier":
                continue
            for field_name in ("name", "alias"):
                child = specifier.child_by_field_name(field_name)
                if child is not None and child.type == "identifier":
                    yield _node_text(child, source_bytes)

    @staticmethod
    def _leaf_kind(node: Node, source_bytes: bytes) -> str:
        if node.type in IDENTIFIER_KINDS:
            return "identifier"
        if node.is_named:
            return node.type
        if _node_text(node, source_bytes).isalpha():
            return "keyword"
        return "punctuator"

    @staticmethod
    def _token(kind: str, node: Node, source_bytes: bytes) -> Token:
        return Token(
            kind=kind,
            value=_node_text(node, source_bytes),
            span=Span(start=tuple(node.start_point), end=tuple(node.end_point)),
        )

    @staticmethod
    def _describe_error(root: Node) -> str:
        node = _first_error(root)
        if node is None:  # pragma: no cover - has_error implies an error node
            return "Syntax error"
        row, column = node.start_point
        if node.is_missing:
            return f"Missing '{node.type}' (line {row + 1}, column {column + 1})"
        return f"Unexpected token (line {row + 1}, column {column + 1})"


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        stack.extend(
            child for child in reversed(current.children) if child.has_error or child.is_missing
        )
    return None


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


__all__ = [
    "FileModelBuilder",
    "IDENTIFIER_KINDS",
    "JAVASCRIPT",
    "SourceParseError",
    "detect_source_type",
]
