"""File-change watcher for the skills directory."""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from skillbook.skills.skill_loader import SKILL_FILENAME, SKILL_FILENAME_ALIASES

logger = logging.getLogger(__name__)


class SkillWatcher:
    """Polls skill file mtimes and reports added, modified and removed files."""

    def __init__(
        self,
        watch_root: Path,
        on_change: Optional[Callable[[List[Path]], None]] = None,
        check_interval: float = 2.0,
    ):
        self.watch_root = Path(watch_root)
        self.on_change = on_change  # callback e.g. re-run the linter
        self.check_interval = check_interval
        self._last_check = 0.0
        self._watch_mtimes: Dict[str, float] = {}
        self.refresh_snapshot()

    def _iter_watch_files(self) -> Iterator[Path]:
        """Yield skill files that should trigger a change callback."""
        for filename in (SKILL_FILENAME,) + SKILL_FILENAME_ALIASES:
            for path in self.watch_root.glob(f"*/{filename}"):
                if not path.parent.name.startswith((".", "_")):
                    yield path

    def _snapshot(self) -> Dict[str, float]:
        snapshot: Dict[str, float] = {}
        for path in self._iter_watch_files():
            try:
                if path.is_file():
                    snapshot[str(path)] = path.stat().st_mtime
            except OSError:
                continue
        return snapshot

    def refresh_snapshot(self):
        """Capture latest file mtimes for watched files."""
        self._watch_mtimes = self._snapshot()

    def detect_changes(self) -> List[Path]:
        """Return watched files added, modified or removed since last snapshot."""
        current = self._snapshot()
        changed = [
            Path(key) for key, mtime in current.items()
            if self._watch_mtimes.get(key) != mtime
        ]
        changed.extend(Path(key) for key in self._watch_mtimes if key not in current)
        self._watch_mtimes = current
        return sorted(changed)

    def check_and_apply(self, force: bool = False) -> List[Path]:
        """Run the change callback if anything changed since the last check.

        Checks are throttled to one per ``check_interval`` unless *force*.
        """
        now = time.monotonic()
        if not force and now - self._last_check < self.check_interval:
            return []
        self._last_check = now

        changed = self.detect_changes()
        if not changed:
            return []

        logger.info(
            "Skill files changed: %s",
            [_relative(p, self.watch_root) for p in changed],
        )
        if self.on_change is not None:
            self.on_change(changed)
        return changed

    def run(self, max_cycles: Optional[int] = None):
        """Poll until interrupted, or for *max_cycles* iterations."""
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            self.check_and_apply(force=True)
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            time.sleep(self.check_interval)


def _relative(path: Path, root: Path) -> str:
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)
