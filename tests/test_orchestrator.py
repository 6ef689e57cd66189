"""Tests for pruneglobals.orchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from pruneglobals.config import PruneConfig
from pruneglobals.corpus import DirectoryReadError
from pruneglobals.orchestrator import Orchestrator
from tests._fixtures.corpus_builder import CorpusBuilder


def _orchestrator(corpus_builder: CorpusBuilder) -> Orchestrator:
    config = PruneConfig(root=corpus_builder.root.parent, source_dir=corpus_builder.root)
    return Orchestrator(config=config)


def test_run_annotates_used_global(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "A.js": "window.foo = 1;\n// Temporary globals\nwindow.foo = 1;\n",
            "B.js": "foo();\n",
        }
    )

    outcome = _orchestrator(corpus_builder).run()

    assert corpus_builder.read("A.js") == (
        "window.foo = 1;\n// Temporary globals\nwindow.foo = 1; // may be used by B.js\n"
    )
    assert corpus_builder.read("B.js") == "foo();\n"
    assert [item.path.name for item in outcome.rewritten] == ["A.js"]
    assert [item.path.name for item in outcome.unchanged] == ["B.js"]


def test_run_comments_out_unused_global(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "A.js": "window.foo = 1;\n// Temporary globals\nwindow.foo = 1;\n",
            "B.js": "bar();\n",
        }
    )

    _orchestrator(corpus_builder).run()

    assert corpus_builder.read("A.js") == "window.foo = 1;\n// Temporary globals\n// window.foo = 1; // unused\n"


def test_run_excludes_unparseable_files_from_reports(
    corpus_builder: CorpusBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    corpus_builder.write(
        {
            "A.js": "// Temporary globals\nwindow.foo = 1;\n",
            "B.js": "foo();\n",
            "C.js": "foo(;\n",
        }
    )

    with caplog.at_level("ERROR", logger="pruneglobals"):
        outcome = _orchestrator(corpus_builder).run()

    assert corpus_builder.read("A.js") == "// Temporary globals\nwindow.foo = 1; // may be used by B.js\n"
    assert [item.path.name for item in outcome.parse_failures] == ["C.js"]
    assert "C.js" in caplog.text


def test_second_run_is_byte_identical(corpus_builder: CorpusBuilder) -> None:
    corpus_builder.write(
        {
            "a.js": "const x = bar();\n// Temporary globals\nwindow.foo = 1;\nwindow.helper = helper;\n",
            "b.js": "foo();\n// Temporary globals\nwindow.bar = () => 2;\n",
        }
    )
    orchestrator = _orchestrator(corpus_builder)

    orchestrator.run()
    first = {name: corpus_builder.read(name) for name in ("a.js", "b.js")}
    outcome = orchestrator.run()
    second = {name: corpus_builder.read(name) for name in ("a.js", "b.js")}

    assert second == first
    assert first["a.js"].endswith("window.foo = 1; // may be used by b.js\n// window.helper = helper; // unused\n")
    assert first["b.js"].endswith("window.bar = () => 2; // may be used by a.js\n")
    assert outcome.rewritten == []
    assert all(not item.written for item in outcome.files)


def test_dry_run_reports_diff_without_writing(corpus_builder: CorpusBuilder) -> None:
    original = "// Temporary globals\nwindow.foo = 1;\n"
    corpus_builder.write({"a.js": original})

    outcome = _orchestrator(corpus_builder).run(dry_run=True)

    assert corpus_builder.read("a.js") == original
    [item] = outcome.files
    assert item.changed
    assert not item.written
    assert "-window.foo = 1;" in item.diff
    assert "+// window.foo = 1; // unused" in item.diff
    assert "a.js (updated)" in item.diff


def test_write_failures_do_not_stop_other_files(
    corpus_builder: CorpusBuilder, monkeypatch: pytest.MonkeyPatch
) -> None:
    corpus_builder.write(
        {
            "a.js": "// Temporary globals\nwindow.foo = 1;\n",
            "b.js": "// Temporary globals\nwindow.bar = 1;\n",
        }
    )
    failing = corpus_builder.path("a.js")
    original_write_text = Path.write_text

    def _write_text(self: Path, *args, **kwargs):  # type: ignore[no-untyped-def]
        if self == failing:
            raise PermissionError("read-only")
        return original_write_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", _write_text)

    outcome = _orchestrator(corpus_builder).run()

    assert [item.path.name for item in outcome.write_failures] == ["a.js"]
    assert corpus_builder.read("b.js") == "// Temporary globals\n// window.bar = 1; // unused\n"


def test_run_accepts_explicit_source_dir(tmp_path: Path) -> None:
    scripts = tmp_path / "scripts"
    scripts.mkdir()
    (scripts / "a.js").write_text("// Temporary globals\nwindow.foo = 1;\n", encoding="utf-8")
    orchestrator = Orchestrator(config=PruneConfig(root=tmp_path, source_dir=tmp_path / "src"))

    outcome = orchestrator.run(scripts)

    assert outcome.source_dir == scripts
    assert (scripts / "a.js").read_text(encoding="utf-8").endswith("// window.foo = 1; // unused\n")


def test_run_raises_when_directory_is_missing(tmp_path: Path) -> None:
    orchestrator = Orchestrator(config=PruneConfig(root=tmp_path, source_dir=tmp_path / "src"))
    with pytest.raises(DirectoryReadError):
        orchestrator.run()


def test_deeply_nested_file_does_not_abort_the_run(corpus_builder: CorpusBuilder) -> None:
    chain = " + ".join(["s"] * 3000)
    corpus_builder.write(
        {
            "a.js": "// Temporary globals\nwindow.foo = 1;\nwindow.s = '';\n",
            "b.js": f"var x = {chain} + foo;\n",
        }
    )

    outcome = _orchestrator(corpus_builder).run()

    assert corpus_builder.read("a.js") == (
        "// Temporary globals\n"
        "window.foo = 1; // may be used by b.js\n"
        "window.s = ''; // may be used by b.js\n"
    )
    assert outcome.parse_failures == []
