from skillbook.services.watcher import SkillWatcher

__all__ = ["SkillWatcher"]
