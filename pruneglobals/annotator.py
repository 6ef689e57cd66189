"""Rewrites global assignments in annotation regions with usage evidence."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Pattern

from .analyzers.usage import UsageScanner
from .config import DEFAULT_NAMESPACE
from .corpus import relative_name
from .logging import get_logger
from .models import DependencyReport, FileAnnotation, GlobalAssignment, SourceFile

USED_FMT = "{statement} // may be used by {files}"
UNUSED_FMT = "// {statement} // unused"


def assignment_pattern(namespace: str = DEFAULT_NAMESPACE) -> Pattern[str]:
    """Match ``[// ]<namespace>.<identifier> = <expr>; [// comment]`` on one line."""
    return re.compile(
        r"(?P<disabled>//[ \t]*)?"
        rf"(?P<statement>(?<![\w$.]){re.escape(namespace)}\.(?P<identifier>[A-Za-z_$][\w$]*) = [^\r\n]*;)"
        r"(?P<comment>[ \t]*//[^\r\n]*)?"
    )


class AssignmentAnnotator:
    """Annotates each candidate assignment as used elsewhere or unused."""

    def __init__(
        self,
        scanner: UsageScanner,
        root: Path,
        *,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self.scanner = scanner
        self.root = root
        self.pattern = assignment_pattern(namespace)
        self.logger = get_logger("annotator")

    def find_assignments(self, source: SourceFile) -> List[GlobalAssignment]:
        """Return candidate assignments in the annotation region, in text order."""
        return [
            self._assignment(source, match)
            for match in self.pattern.finditer(source.annotation_text)
        ]

    def annotate(self, source: SourceFile) -> FileAnnotation:
        """Rewrite every candidate line; the declaration region is left untouched."""
        annotation = FileAnnotation(path=source.path, original=source.content, updated=source.content)

        def _replace(match: re.Match[str]) -> str:
            assignment = self._assignment(source, match)
            report = self.scanner.scan(assignment.identifier, exclude=source.path)
            self.logger.info(
                "Dependencies for %s: %s",
                assignment.identifier,
                self.format_files(report) or "(none found)",
            )
            annotation.entries.append((assignment, report))
            return self.render(assignment, report)

        rewritten = self.pattern.sub(_replace, source.annotation_text)
        annotation.updated = source.declaration_text + rewritten
        return annotation

    def render(self, assignment: GlobalAssignment, report: DependencyReport) -> str:
        if report:
            return USED_FMT.format(statement=assignment.statement, files=self.format_files(report))
        return UNUSED_FMT.format(statement=assignment.statement)

    def format_files(self, report: DependencyReport) -> str:
        return ", ".join(relative_name(path, self.root) for path in report)

    @staticmethod
    def _assignment(source: SourceFile, match: re.Match[str]) -> GlobalAssignment:
        comment = match.group("comment")
        line = (
            source.declaration_text.count("\n")
            + source.annotation_text.count("\n", 0, match.start())
            + 1
        )
        return GlobalAssignment(
            identifier=match.group("identifier"),
            statement=match.group("statement"),
            origin=source.path,
            trailing_comment=comment.strip() if comment else None,
            commented_out=match.group("disabled") is not None,
            line=line,
        )


__all__ = ["AssignmentAnnotator", "assignment_pattern", "USED_FMT", "UNUSED_FMT"]
