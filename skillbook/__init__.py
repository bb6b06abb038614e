"""skillbook: tooling for a collection of Markdown skill documents."""

from skillbook.skills import FrontmatterError, SkillLoader, SkillRegistry

__version__ = "0.1.0"
__all__ = ["FrontmatterError", "SkillLoader", "SkillRegistry", "__version__"]
