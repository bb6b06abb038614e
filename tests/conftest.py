"""Shared pytest fixtures for skillbook tests."""

import pytest


SAMPLE_SKILL = """\
---
name: research
description: "Structured research. Use when the user asks to investigate or compare options."
---

# Research

## Overview
Turn an open question into a sourced answer.

## Workflow
1. Restate the question.
2. Collect sources.

```python
def brief(question):
    return question.strip()
```

## Examples
**Input**: compare SQLite and Postgres
"""

SAMPLE_SKILL_TWO = """\
---
name: debugging
description: "Find the root cause of a bug. Use when the user reports a crash or failing test."
---

## Workflow
Reproduce first.

```bash
git bisect start
```
"""


def _write_skill(root, directory, content, filename="SKILLS.md"):
    skill_dir = root / directory
    skill_dir.mkdir(parents=True, exist_ok=True)
    path = skill_dir / filename
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def skills_dir(tmp_path):
    """A temp skills directory with two valid skills."""
    root = tmp_path / "skills"
    _write_skill(root, "research", SAMPLE_SKILL)
    _write_skill(root, "debugging", SAMPLE_SKILL_TWO)
    # Hidden and private directories are never skills
    _write_skill(root, ".cache", SAMPLE_SKILL)
    _write_skill(root, "_drafts", SAMPLE_SKILL)
    return root


@pytest.fixture
def empty_dir(tmp_path):
    """A directory that does not exist yet."""
    return tmp_path / "empty"


@pytest.fixture(autouse=True)
def no_skillbook_env(monkeypatch):
    """Ensure the developer's SKILLBOOK_* settings never leak into tests."""
    for var in (
        "SKILLBOOK_SKILLS_DIR",
        "SKILLBOOK_INSTALL_DIR",
        "SKILLBOOK_LOG_LEVEL",
        "SKILLBOOK_WATCH_INTERVAL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_skill():
    """Return a helper that writes <root>/<directory>/<filename>."""
    return _write_skill
