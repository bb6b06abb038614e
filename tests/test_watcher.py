"""Tests for skillbook.services.watcher.SkillWatcher."""

import os
import time

import pytest

from skillbook.services import SkillWatcher


@pytest.fixture
def calls():
    return []


@pytest.fixture
def watcher(skills_dir, calls):
    return SkillWatcher(skills_dir, on_change=calls.append, check_interval=0)


def _touch_later(path, seconds=10):
    mtime = path.stat().st_mtime + seconds
    os.utime(path, (mtime, mtime))


class TestDetectChanges:
    def test_no_changes(self, watcher, calls):
        assert watcher.check_and_apply(force=True) == []
        assert calls == []

    def test_added_file(self, watcher, skills_dir, calls, make_skill):
        path = make_skill(skills_dir, "testing", "---\nname: testing\ndescription: Tests.\n---\nBody\n")

        changed = watcher.check_and_apply(force=True)
        assert changed == [path]
        assert calls == [[path]]

    def test_modified_file(self, watcher, skills_dir):
        path = skills_dir / "research" / "SKILLS.md"
        _touch_later(path)

        assert watcher.check_and_apply(force=True) == [path]
        # Snapshot is refreshed after each check
        assert watcher.check_and_apply(force=True) == []

    def test_removed_file(self, watcher, skills_dir):
        path = skills_dir / "debugging" / "SKILLS.md"
        path.unlink()

        assert watcher.check_and_apply(force=True) == [path]

    def test_alias_files_are_watched(self, watcher, skills_dir, make_skill):
        path = make_skill(skills_dir, "legacy", "---\nname: legacy\ndescription: Old.\n---\n", filename="SKILL.md")
        assert watcher.check_and_apply(force=True) == [path]

    def test_other_files_are_ignored(self, watcher, skills_dir):
        (skills_dir / "research" / "notes.txt").write_text("scratch", encoding="utf-8")
        (skills_dir / "README.md").write_text("# Skills", encoding="utf-8")
        assert watcher.check_and_apply(force=True) == []


class TestThrottle:
    def test_checks_are_throttled(self, skills_dir, calls):
        watcher = SkillWatcher(skills_dir, on_change=calls.append, check_interval=3600)
        watcher._last_check = time.monotonic()
        _touch_later(skills_dir / "research" / "SKILLS.md")

        assert watcher.check_and_apply() == []
        assert calls == []
        assert len(watcher.check_and_apply(force=True)) == 1

    def test_run_for_fixed_cycles(self, skills_dir, calls):
        watcher = SkillWatcher(skills_dir, on_change=calls.append, check_interval=0)
        _touch_later(skills_dir / "research" / "SKILLS.md")

        watcher.run(max_cycles=2)
        assert len(calls) == 1


def test_missing_root_has_nothing_to_watch(empty_dir):
    watcher = SkillWatcher(empty_dir)
    assert watcher.check_and_apply(force=True) == []
