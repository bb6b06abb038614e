"""Tests for the skillbook command line interface."""

import json

import pytest

from skillbook.cli import main
from skillbook.services.watcher import SkillWatcher


@pytest.fixture
def run(skills_dir):
    """Invoke the CLI against the temp skills directory."""
    def _run(*argv):
        return main(["--skills-dir", str(skills_dir), *argv])
    return _run


class TestInspect:
    def test_list(self, run, capsys):
        assert run("list") == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0].startswith("debugging ")
        assert out[1].startswith("research ")
        assert "Structured research." in out[1]

    def test_list_empty(self, empty_dir, capsys):
        assert main(["--skills-dir", str(empty_dir), "list"]) == 0
        assert "No skills found" in capsys.readouterr().out

    def test_list_uses_environment(self, skills_dir, monkeypatch, capsys):
        monkeypatch.setenv("SKILLBOOK_SKILLS_DIR", str(skills_dir))
        assert main(["list"]) == 0
        assert "research" in capsys.readouterr().out

    def test_show(self, run, capsys):
        assert run("show", "research") == 0
        assert "## Overview" in capsys.readouterr().out

    def test_show_section(self, run, capsys):
        assert run("show", "research", "--section", "Workflow") == 0
        out = capsys.readouterr().out
        assert "Restate the question." in out
        assert "## Overview" not in out

    def test_show_section_titles(self, run, capsys):
        assert run("show", "research", "--sections") == 0
        assert capsys.readouterr().out.split() == ["Overview", "Workflow", "Examples"]

    def test_show_unknown(self, run, capsys):
        assert run("show", "nonexistent") == 2
        assert "Unknown skill" in capsys.readouterr().err

    def test_match(self, run, capsys):
        assert run("match", "my", "test", "keeps", "failing") == 0
        assert capsys.readouterr().out.startswith("/debugging")

    def test_match_nothing(self, run):
        assert run("match", "hello") == 1


class TestLint:
    def test_lint_clean(self, run, capsys):
        assert run("lint") == 0
        assert "2 skill file(s) checked: 0 error(s), 0 warning(s)" in capsys.readouterr().out

    def test_lint_json(self, run, capsys):
        assert run("lint", "--format", "json") == 0
        report = json.loads(capsys.readouterr().out)
        assert report["ok"] is True
        assert report["files"] == 2

    def test_lint_failure(self, run, skills_dir, make_skill, capsys):
        make_skill(skills_dir, "alpha", "---\nname: beta\ndescription: Beta.\n---\nBody\n")
        assert run("lint") == 1
        out = capsys.readouterr().out
        assert "[name-mismatch]" in out
        assert "1 error(s)" in out

    def test_lint_strict(self, run, skills_dir):
        (skills_dir / "empty-skill").mkdir()
        assert run("lint") == 0
        assert run("lint", "--strict") == 1


class TestInstall:
    def test_install_and_list(self, run, tmp_path, capsys):
        dest = tmp_path / "commands"
        assert run("install", "research", "--dest", str(dest)) == 0
        assert (dest / "research.md").is_file()
        assert "/research" in capsys.readouterr().out

        assert run("installed", "--dest", str(dest)) == 0
        assert capsys.readouterr().out.split() == ["/research"]

    def test_install_all_no_rename(self, run, tmp_path):
        dest = tmp_path / "commands"
        assert run("install", "--all", "--no-rename", "--dest", str(dest)) == 0
        assert (dest / "debugging" / "SKILLS.md").is_file()
        assert (dest / "research" / "SKILLS.md").is_file()

    def test_install_requires_names(self, run, tmp_path):
        assert run("install", "--dest", str(tmp_path)) == 2

    def test_install_failure(self, run, tmp_path, capsys):
        assert run("install", "nonexistent", "--dest", str(tmp_path)) == 1
        assert "unknown skill" in capsys.readouterr().err

    def test_install_uses_environment_destination(self, run, tmp_path, monkeypatch):
        monkeypatch.setenv("SKILLBOOK_INSTALL_DIR", str(tmp_path / "env-dest"))
        assert run("install", "debugging") == 0
        assert (tmp_path / "env-dest" / "debugging.md").is_file()

    def test_uninstall(self, run, tmp_path):
        dest = tmp_path / "commands"
        run("install", "research", "--dest", str(dest))
        assert run("uninstall", "research", "--dest", str(dest)) == 0
        assert run("uninstall", "research", "--dest", str(dest)) == 1


def test_watch_lints_then_polls(run, capsys, monkeypatch):
    calls = []
    monkeypatch.setattr(SkillWatcher, "run", lambda self, max_cycles=None: calls.append(max_cycles))

    assert run("watch", "--interval", "0") == 0
    assert calls == [None]
    out = capsys.readouterr().out
    assert out.startswith("Watching ")
    assert "skill file(s) checked" in out


def test_watch_stops_on_interrupt(run, capsys, monkeypatch):
    def interrupted(self, max_cycles=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(SkillWatcher, "run", interrupted)
    assert run("watch") == 0


def test_watch_has_no_cycle_limit_flag(run):
    with pytest.raises(SystemExit) as exc:
        run("watch", "--cycles", "1")
    assert exc.value.code == 2


def test_unknown_command_is_usage_error(run):
    with pytest.raises(SystemExit) as exc:
        run("frobnicate")
    assert exc.value.code == 2
