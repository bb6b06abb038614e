"""
Skillbook Installer: copies skill documents into a command directory.

A consuming tool exposes ``<dest>/<skill-name>.md`` as the command
``/<skill-name>``. With ``rename=False`` the file keeps its name inside a
per-skill directory: ``<dest>/<skill-name>/SKILLS.md``.
"""

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from skillbook.lint.linter import Severity, SkillLinter
from skillbook.skills.skill_loader import SKILL_FILENAME, SkillLoader, is_plain_name

logger = logging.getLogger(__name__)


def command_name(name: str) -> str:
    return f"/{name}"


class SkillInstaller:
    """Install, list and remove skill documents in a destination directory."""

    def __init__(self, dest_dir, skills_dir: Optional[str] = None, validate: bool = True):
        self.dest_dir = Path(dest_dir).expanduser()
        self.loader = SkillLoader(skills_dir)
        self.validate = validate

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def install(self, name: str, rename: bool = True, overwrite: bool = False) -> Dict[str, Any]:
        """Copy one skill into the destination directory.

        Returns:
            {"installed": bool, "command": str, "path": str or None, "error": str or None}
        """
        result: Dict[str, Any] = {
            "installed": False,
            "command": command_name(name),
            "path": None,
            "error": None,
        }

        if not is_plain_name(name):
            result["error"] = f"invalid skill name: {name!r}"
            logger.warning("Install refused, %s", result["error"])
            return result

        source = self.loader.skill_path(name)
        if source is None:
            result["error"] = f"unknown skill: {name}"
            logger.warning("Install refused, %s", result["error"])
            return result

        if self.validate:
            errors = [
                i for i in SkillLinter(str(self.loader.skills_dir)).lint_file(source)
                if i["severity"] == Severity.ERROR.value
            ]
            if errors:
                result["error"] = f"{len(errors)} lint error(s): {errors[0]['message']}"
                logger.warning("Install of %s refused: %s", name, result["error"])
                return result

        try:
            target = self._target(name, rename)
        except ValueError as e:
            result["error"] = str(e)
            logger.warning("Install refused, %s", result["error"])
            return result

        result["path"] = str(target)
        if target.exists() and not overwrite:
            result["error"] = f"already installed at {target}"
            return result

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        result["installed"] = True
        logger.info("Installed %s as %s", source, command_name(name))
        return result

    def install_all(self, rename: bool = True, overwrite: bool = False) -> List[Dict[str, Any]]:
        """Install every skill directory under the skills dir."""
        return [
            self.install(directory.name, rename=rename, overwrite=overwrite)
            for directory in self.loader.iter_skill_dirs()
            if self.loader.skill_path(directory.name) is not None
        ]

    def uninstall(self, name: str) -> bool:
        """Remove an installed skill in either layout. Returns True if removed."""
        if not is_plain_name(name):
            logger.warning("Uninstall refused, invalid skill name: %r", name)
            return False
        try:
            flat = self._target(name, rename=True)
            nested = self._target(name, rename=False)
        except ValueError as e:
            logger.warning("Uninstall refused, %s", e)
            return False

        removed = False
        if flat.is_file():
            flat.unlink()
            removed = True

        if nested.is_file():
            nested.unlink()
            try:
                nested.parent.rmdir()
            except OSError:
                logger.debug("Left non-empty directory %s in place", nested.parent)
            removed = True

        if removed:
            logger.info("Uninstalled %s", command_name(name))
        return removed

    def installed(self) -> List[str]:
        """Command names currently present in the destination directory."""
        if not self.dest_dir.is_dir():
            return []
        names = set()
        for path in self.dest_dir.iterdir():
            if path.is_file() and path.suffix == ".md":
                names.add(path.stem)
            elif path.is_dir() and (path / SKILL_FILENAME).is_file():
                names.add(path.name)
        return [command_name(n) for n in sorted(names)]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _target(self, name: str, rename: bool) -> Path:
        """Install path for *name*. Raises ValueError if it leaves dest_dir."""
        if rename:
            target = self.dest_dir / f"{name}.md"
        else:
            target = self.dest_dir / name / SKILL_FILENAME
        if self.dest_dir.resolve() not in target.resolve().parents:
            raise ValueError(f"{target} is outside {self.dest_dir}")
        return target
