"""
Skillbook Skills: Markdown skill document loader

A skill document lives at skills/<skill-name>/SKILLS.md and starts with a
YAML frontmatter block carrying ``name`` and ``description``. Everything
after the frontmatter is free-form Markdown and is returned verbatim.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILLS.md"
# Accepted when SKILLS.md is absent
SKILL_FILENAME_ALIASES = ("SKILL.md",)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)
OPEN_FENCE_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")


class FrontmatterError(ValueError):
    """Raised when a skill document's header block cannot be parsed."""


class SkillLoader:
    """Load and parse skill documents from a skills directory."""

    def __init__(self, skills_dir: Optional[str] = None):
        if skills_dir:
            self.skills_dir = Path(skills_dir).expanduser()
        else:
            self.skills_dir = Path(__file__).resolve().parent.parent.parent / "skills"

    def skill_path(self, name: str) -> Optional[Path]:
        """Return the skill file inside skills/<name>/, or None."""
        if not is_plain_name(name):
            return None
        directory = self.skills_dir / name
        for filename in (SKILL_FILENAME,) + SKILL_FILENAME_ALIASES:
            candidate = directory / filename
            if candidate.is_file():
                return candidate
        return None

    def load_skill(self, name: str) -> Optional[dict]:
        """Load a skill by directory name.

        Args:
            name: Skill directory name.

        Returns:
            Dict with 'name', 'description', 'header', 'body', 'body_line',
            'directory' and 'path', or None if missing or malformed.
        """
        path = self.skill_path(name)
        if path is None:
            logger.warning("Skill not found: %s", name)
            return None

        try:
            return self.load_file(path)
        except (OSError, UnicodeDecodeError, FrontmatterError) as e:
            logger.error("Failed to load skill %s: %s", name, e)
            return None

    def load_file(self, path) -> dict:
        """Parse a single skill file.

        Raises:
            FrontmatterError: the header block is malformed.
            OSError: the file cannot be read.
        """
        path = Path(path)
        content = path.read_text(encoding="utf-8")
        header, body, body_line = self.parse_document(content)

        name = _as_text(header.get("name")) or path.parent.name
        return {
            "name": name,
            "description": _as_text(header.get("description")),
            "header": header,
            "body": body,
            "body_line": body_line,
            "directory": path.parent.name,
            "path": str(path),
        }

    def list_skills(self) -> list:
        """List all skill documents.

        Returns:
            List of dicts with name, description, directory, path.
        """
        skills = []
        for directory in self.iter_skill_dirs():
            path = self.skill_path(directory.name)
            if path is None:
                continue
            try:
                skill = self.load_file(path)
            except (OSError, UnicodeDecodeError, FrontmatterError) as e:
                logger.warning("Failed to parse skill %s: %s", path, e)
                continue

            skills.append({
                "name": skill["name"],
                "description": skill["description"],
                "directory": skill["directory"],
                "path": skill["path"],
            })

        return skills

    def iter_skill_dirs(self) -> List[Path]:
        """Candidate skill directories, sorted by name."""
        if not self.skills_dir.is_dir():
            return []
        return [
            p for p in sorted(self.skills_dir.iterdir(), key=lambda p: p.name)
            if p.is_dir() and not p.name.startswith((".", "_"))
        ]

    def list_sections(self, name: str) -> Optional[list]:
        """Return the titles of the level-2 sections of a skill body."""
        skill = self.load_skill(name)
        if not skill:
            return None
        return [title for title, _ in _split_sections(skill["body"]) if title]

    def get_skill_prompt(self, name: str, sections: Optional[List[str]] = None) -> Optional[str]:
        """Return the body of a skill, optionally narrowed to some sections.

        Args:
            name: Skill name.
            sections: Level-2 section titles to keep (case-insensitive).
                When none of them exist the full body is returned.

        Returns:
            Prompt content string, or None if skill not found.
        """
        skill = self.load_skill(name)
        if not skill:
            return None

        body = skill["body"]
        if not sections:
            return body
        return self._extract_sections(body, sections)

    def _extract_sections(self, body: str, sections: List[str]) -> str:
        """Keep only the named '## ' sections of a markdown body."""
        include = {s.strip().lower() for s in sections}
        kept = [text for title, text in _split_sections(body) if title and title.lower() in include]
        return "\n\n".join(kept) if kept else body

    # ------------------------------------------------------------------
    # Frontmatter parsing
    # ------------------------------------------------------------------

    @staticmethod
    def parse_document(content: str) -> Tuple[dict, str, int]:
        """Split a skill document into header, body and body start line.

        Returns:
            (header_dict, body_string, body_line) where body_line is the
            1-based line number of the first body line in the file.

        Raises:
            FrontmatterError: unterminated block, invalid YAML, or a
                header that is not a mapping.
        """
        if content.startswith("\ufeff"):
            content = content[1:]

        first_line = content.split("\n", 1)[0].rstrip("\r")
        if first_line.rstrip() != "---":
            return {}, content, 1

        match = _FRONTMATTER_RE.match(content)
        if not match:
            raise FrontmatterError("frontmatter block is not terminated by a '---' line")

        try:
            header = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise FrontmatterError(f"invalid YAML in frontmatter: {e}") from e

        if header is None:
            header = {}
        if not isinstance(header, dict):
            raise FrontmatterError("frontmatter must be a mapping of keys to values")

        consumed = content[:match.end()]
        body_line = consumed.count("\n") + 1
        if not consumed.endswith("\n"):
            body_line += 1
        return header, content[match.end():], body_line


def _as_text(value) -> str:
    """Coerce a frontmatter scalar into stripped text."""
    if value is None:
        return ""
    return str(value).strip()


def is_plain_name(name: str) -> bool:
    """True if *name* is a single directory entry, not a path."""
    return bool(name) and name not in (".", "..") and not any(sep in name for sep in ("/", "\\", "\0"))


def open_fence(line: str) -> Optional[Tuple[str, int, str]]:
    """Return (fence, indent, info) if *line* opens a fenced code block.

    Fences are three or more backticks or tildes indented at most three
    spaces; a backtick fence may not carry backticks in its info string.
    """
    match = OPEN_FENCE_RE.match(line.rstrip("\r"))
    if not match:
        return None
    fence, info = match.group(2), match.group(3).strip()
    if fence[0] == "`" and "`" in info:
        return None
    return fence, len(match.group(1)), info


def closes_fence(line: str, fence: str) -> bool:
    """True if *line* closes a block opened with *fence*."""
    line = line.rstrip("\r")
    stripped = line.strip()
    return (
        len(line) - len(line.lstrip(" ")) <= 3
        and stripped.startswith(fence[0] * len(fence))
        and not stripped.strip(fence[0])
    )


def _split_sections(body: str) -> List[Tuple[str, str]]:
    """Split a body on '## ' headings, ignoring headings inside fences.

    Returns (title, text) pairs; text preamble before the first heading has
    an empty title.
    """
    sections: List[Tuple[str, str]] = []
    title = ""
    lines: List[str] = []
    fence = None

    for line in body.split("\n"):
        if fence is None:
            opened = open_fence(line)
            if opened:
                fence = opened[0]
        elif closes_fence(line, fence):
            fence = None
            lines.append(line)
            continue

        if fence is None and line.startswith("## "):
            if title or any(l.strip() for l in lines):
                sections.append((title, "\n".join(lines).strip("\n")))
            title = line[3:].strip()
            lines = [line]
        else:
            lines.append(line)

    if title or any(l.strip() for l in lines):
        sections.append((title, "\n".join(lines).strip("\n")))
    return sections
