"""
Skillbook Linter: structural checks over skill documents.

Every skill file must carry a header with non-empty ``name`` and
``description``, the name must match the directory the file lives in, names
must be unique across the collection, and fenced snippets must parse as the
language they are tagged with.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from skillbook.lint.fences import check_code_block, extract_code_blocks
from skillbook.skills.skill_loader import (
    SKILL_FILENAME,
    FrontmatterError,
    SkillLoader,
)

logger = logging.getLogger(__name__)

NAME_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
MAX_DESCRIPTION_LENGTH = 1024


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


# Rule id → severity
RULES: Dict[str, Severity] = {
    "frontmatter": Severity.ERROR,
    "name-missing": Severity.ERROR,
    "description-missing": Severity.ERROR,
    "name-mismatch": Severity.ERROR,
    "name-duplicate": Severity.ERROR,
    "code-block-syntax": Severity.ERROR,
    "code-block-unclosed": Severity.ERROR,
    "name-format": Severity.WARNING,
    "description-multiline": Severity.WARNING,
    "description-length": Severity.WARNING,
    "code-block-language": Severity.WARNING,
    "body-empty": Severity.WARNING,
    "missing-skill-file": Severity.WARNING,
}


def make_issue(rule: str, path, message: str, line: Optional[int] = None) -> dict:
    return {
        "rule": rule,
        "severity": RULES[rule].value,
        "path": str(path),
        "line": line,
        "message": message,
    }


def format_issue(issue: dict) -> str:
    """Render an issue as ``path:line: severity [rule] message``."""
    location = issue["path"]
    if issue.get("line"):
        location = f"{location}:{issue['line']}"
    return f"{location}: {issue['severity']} [{issue['rule']}] {issue['message']}"


class SkillLinter:
    """Runs the structural checks over one file or a whole skills directory."""

    def __init__(self, skills_dir: Optional[str] = None, strict: bool = False):
        self.loader = SkillLoader(skills_dir)
        self.strict = strict

    # ------------------------------------------------------------------
    # Single file
    # ------------------------------------------------------------------

    def lint_file(self, path) -> List[dict]:
        """Check a single skill file; returns its issues."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return [make_issue("frontmatter", path, f"cannot read file: {e}")]

        try:
            header, body, body_line = SkillLoader.parse_document(content)
        except FrontmatterError as e:
            return [make_issue("frontmatter", path, str(e), line=1)]

        issues = []
        issues.extend(self._check_name(path, header))
        issues.extend(self._check_description(path, header))

        if not body.strip():
            issues.append(make_issue("body-empty", path, "no content after the header block"))
        issues.extend(self._check_code_blocks(path, body, body_line))
        return issues

    def _check_name(self, path: Path, header: dict) -> List[dict]:
        if "name" not in header and not header:
            return [make_issue("name-missing", path, "header block with a 'name' field is missing", line=1)]

        raw = header.get("name")
        if raw is None or not str(raw).strip():
            return [make_issue("name-missing", path, "'name' is missing or empty", line=1)]

        name = str(raw).strip()
        issues = []
        if name != path.parent.name:
            issues.append(make_issue(
                "name-mismatch", path,
                f"name '{name}' does not match directory '{path.parent.name}'", line=1,
            ))
        if not NAME_RE.match(name):
            issues.append(make_issue(
                "name-format", path,
                f"name '{name}' is not lowercase kebab-case", line=1,
            ))
        return issues

    def _check_description(self, path: Path, header: dict) -> List[dict]:
        raw = header.get("description")
        if raw is None or not str(raw).strip():
            return [make_issue("description-missing", path, "'description' is missing or empty", line=1)]

        description = str(raw).strip()
        issues = []
        if "\n" in description:
            issues.append(make_issue(
                "description-multiline", path, "description should be a single line", line=1,
            ))
        if len(description) > MAX_DESCRIPTION_LENGTH:
            issues.append(make_issue(
                "description-length", path,
                f"description is {len(description)} characters (max {MAX_DESCRIPTION_LENGTH})", line=1,
            ))
        return issues

    def _check_code_blocks(self, path: Path, body: str, body_line: int) -> List[dict]:
        issues = []
        for block in extract_code_blocks(body, line_offset=body_line):
            if not block["closed"]:
                issues.append(make_issue(
                    "code-block-unclosed", path, "code fence is never closed", line=block["line"],
                ))
                continue
            if not block["language"]:
                issues.append(make_issue(
                    "code-block-language", path, "code fence has no language tag", line=block["line"],
                ))
                continue
            error = check_code_block(block)
            if error:
                issues.append(make_issue(
                    "code-block-syntax", path, f"```{block['language']} block: {error}", line=block["line"],
                ))
        return issues

    # ------------------------------------------------------------------
    # Whole collection
    # ------------------------------------------------------------------

    def lint_all(self) -> dict:
        """Check every skill directory and cross-file name uniqueness.

        Returns:
            {"files": int, "issues": [...], "errors": int, "warnings": int, "ok": bool}
        """
        issues: List[dict] = []
        files = 0
        seen: Dict[str, str] = {}

        for directory in self.loader.iter_skill_dirs():
            path = self.loader.skill_path(directory.name)
            if path is None:
                issues.append(make_issue(
                    "missing-skill-file", directory,
                    f"directory has no {SKILL_FILENAME}",
                ))
                continue

            files += 1
            issues.extend(self.lint_file(path))

            name = self._declared_name(path)
            if not name:
                continue
            if name in seen:
                issues.append(make_issue(
                    "name-duplicate", path,
                    f"name '{name}' is already used by {seen[name]}", line=1,
                ))
            else:
                seen[name] = str(path)

        report = build_report(files, issues, strict=self.strict)
        logger.info(
            "Linted %d skill file(s): %d error(s), %d warning(s)",
            files, report["errors"], report["warnings"],
        )
        return report

    def _declared_name(self, path: Path) -> Optional[str]:
        try:
            header, _, _ = SkillLoader.parse_document(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, FrontmatterError):
            return None
        raw = header.get("name")
        if raw is None:
            return None
        return str(raw).strip() or None


def build_report(files: int, issues: List[dict], strict: bool = False) -> dict:
    errors = sum(1 for i in issues if i["severity"] == Severity.ERROR.value)
    warnings = len(issues) - errors
    ok = errors == 0 and (not strict or warnings == 0)
    return {
        "files": files,
        "issues": issues,
        "errors": errors,
        "warnings": warnings,
        "ok": ok,
    }
