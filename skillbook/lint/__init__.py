"""Documentation lint checks for skill documents."""

from skillbook.lint.fences import check_code_block, extract_code_blocks
from skillbook.lint.linter import RULES, Severity, SkillLinter, format_issue

__all__ = [
    "RULES",
    "Severity",
    "SkillLinter",
    "check_code_block",
    "extract_code_blocks",
    "format_issue",
]
