"""
Skillbook Skills

Skills are markdown documents that provide structured instructions for an
AI assistant. They are NOT executable code; this package only reads them.
"""

from skillbook.skills.skill_loader import FrontmatterError, SkillLoader
from skillbook.skills.registry import SkillRegistry

__all__ = ["FrontmatterError", "SkillLoader", "SkillRegistry"]
