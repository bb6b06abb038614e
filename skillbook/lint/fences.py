"""
Fenced code block extraction and per-language syntax checks.

Skill documents embed example snippets as illustrative text. A snippet
tagged with a language should at least parse as that language.
"""

import ast
import json
from typing import Callable, Dict, List, Optional

import yaml

from skillbook.skills.skill_loader import closes_fence, open_fence


def extract_code_blocks(body: str, line_offset: int = 1) -> List[dict]:
    """Find fenced code blocks in a markdown body.

    Args:
        body: Markdown text.
        line_offset: 1-based file line number of the first line of *body*.

    Returns:
        List of {language, info, code, line, closed} dicts in document order.
    """
    blocks = []
    current = None
    code_lines: List[str] = []

    for index, line in enumerate(body.split("\n")):
        line = line.rstrip("\r")
        if current is None:
            opened = open_fence(line)
            if not opened:
                continue
            fence, indent, info = opened
            current = {
                "fence": fence,
                "indent": indent,
                "info": info,
                "language": info.split()[0].lower() if info else "",
                "line": line_offset + index,
            }
            code_lines = []
            continue

        if closes_fence(line, current["fence"]):
            blocks.append(_finish(current, code_lines, closed=True))
            current = None
            continue
        code_lines.append(_dedent(line, current["indent"]))

    if current is not None:
        blocks.append(_finish(current, code_lines, closed=False))
    return blocks


def _finish(current: dict, code_lines: List[str], closed: bool) -> dict:
    return {
        "language": current["language"],
        "info": current["info"],
        "code": "\n".join(code_lines),
        "line": current["line"],
        "closed": closed,
    }


def _dedent(line: str, indent: int) -> str:
    """Strip up to *indent* leading spaces, as the fence indentation implies."""
    removable = len(line) - len(line.lstrip(" "))
    return line[min(indent, removable):]


# ---------------------------------------------------------------------------
# Syntax checkers
# ---------------------------------------------------------------------------

def _check_python(code: str) -> Optional[str]:
    try:
        ast.parse(code)
    except SyntaxError as e:
        return f"invalid Python at snippet line {e.lineno}: {e.msg}"
    return None


def _check_json(code: str) -> Optional[str]:
    try:
        json.loads(code)
    except json.JSONDecodeError as e:
        return f"invalid JSON at snippet line {e.lineno}: {e.msg}"
    return None


def _check_yaml(code: str) -> Optional[str]:
    try:
        for _ in yaml.safe_load_all(code):
            pass
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at snippet line {mark.line + 1}" if mark is not None else ""
        problem = getattr(e, "problem", None) or str(e)
        return f"invalid YAML{where}: {problem}"
    return None


CHECKERS: Dict[str, Callable[[str], Optional[str]]] = {
    "python": _check_python,
    "python3": _check_python,
    "py": _check_python,
    "json": _check_json,
    "yaml": _check_yaml,
    "yml": _check_yaml,
}


def check_code_block(block: dict) -> Optional[str]:
    """Return an error message if the block does not parse as its language.

    Blocks with no language tag or an unchecked tag always pass.
    """
    checker = CHECKERS.get(block.get("language", ""))
    if checker is None:
        return None
    return checker(block["code"])
