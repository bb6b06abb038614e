"""
Skillbook Skills Registry: indexes the skill collection by name.
"""

import logging
import re
from typing import Dict, List, Optional

from skillbook.skills.skill_loader import SkillLoader

logger = logging.getLogger(__name__)

_STOPWORDS = {
    "use", "using", "when", "the", "and", "for", "with", "that", "this",
    "from", "into", "about", "your", "user", "users", "asks", "ask",
    "need", "needs", "wants", "want", "should", "would", "could", "any",
    "are", "how", "what", "which", "where", "skill", "task", "tasks",
}


class SkillRegistry:
    """Registry that indexes all skills and provides lookup by name or task."""

    def __init__(self, skills_dir: Optional[str] = None):
        self.loader = SkillLoader(skills_dir)
        self._index: dict = {}
        self._duplicates: Dict[str, List[str]] = {}
        self._scan()

    def _scan(self):
        """Scan skills directory and index all skills."""
        self._index = {}
        self._duplicates = {}
        for skill_info in self.loader.list_skills():
            name = skill_info["name"]
            if name in self._index:
                self._duplicates.setdefault(name, []).append(skill_info["path"])
                logger.warning(
                    "Duplicate skill name '%s' in %s (already defined by %s)",
                    name, skill_info["path"], self._index[name]["path"],
                )
                continue
            skill_info["keywords"] = extract_keywords(skill_info["description"])
            self._index[name] = skill_info

        if self._index:
            logger.info("Skills registry: %d skills indexed", len(self._index))
        else:
            logger.info("Skills registry: no skills found in %s", self.loader.skills_dir)

    def refresh(self):
        """Re-scan skills directory (call when skills are added/removed)."""
        self._scan()

    def match(self, task: str, limit: int = 3) -> list:
        """Rank skills for a free-text task description.

        An explicit ``/name`` or the bare skill name ranks first; the rest
        are ordered by how many description keywords appear in the task.

        Args:
            task: Task description text.
            limit: Maximum number of skills returned.

        Returns:
            List of matching skill info dicts, best first.
        """
        if not task:
            return []
        text = task.lower()
        words = {w.strip(".-") for w in re.findall(r"[a-z0-9][a-z0-9+#.\-]*", text)}

        ranked = []
        for name, skill_info in self._index.items():
            lowered = name.lower()
            explicit = f"/{lowered}" in text or re.search(rf"(?<![\w-]){re.escape(lowered)}(?![\w-])", text)
            hits = sum(1 for keyword in skill_info["keywords"] if keyword in words)
            if not explicit and hits == 0:
                continue
            ranked.append((0 if explicit else 1, -hits, lowered, skill_info))

        ranked.sort(key=lambda item: item[:3])
        return [item[3] for item in ranked[:limit]]

    def get_prompt(self, name: str, sections: Optional[List[str]] = None) -> Optional[str]:
        """Get the body of a skill, or only some of its sections.

        Args:
            name: Skill name.
            sections: Optional level-2 section titles.

        Returns:
            Prompt string or None.
        """
        skill = self._index.get(name)
        if not skill:
            return None
        return self.loader.get_skill_prompt(skill["directory"], sections)

    def get(self, name: str) -> Optional[dict]:
        """Get skill info by name."""
        return self._index.get(name)

    def list_all(self) -> list:
        """List all indexed skills."""
        return list(self._index.values())

    def names(self) -> List[str]:
        return sorted(self._index)

    def duplicates(self) -> Dict[str, List[str]]:
        """Names declared by more than one file, mapped to the shadowed paths."""
        return {name: list(paths) for name, paths in self._duplicates.items()}


def extract_keywords(description: str) -> List[str]:
    """Extract match keywords from a skill description.

    Prefers the clause after "Use when"/"Use for"; falls back to every
    significant word of the description.
    """
    if not description:
        return []

    match = re.search(r"\bUse (?:it )?(?:when|for|to)\b(.+)", description, re.IGNORECASE | re.DOTALL)
    source = match.group(1) if match else description

    keywords = []
    seen = set()
    for word in re.findall(r"[a-z0-9][a-z0-9+#.\-]*", source.lower()):
        word = word.strip(".-")
        if len(word) < 3 or word in _STOPWORDS or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
    return keywords
