"""
Hot-reload for rule files.

Watches a rule file for changes and swaps the engine's rule set once the
new file parses. A broken file never replaces working rules.
"""

import asyncio
import hashlib
from pathlib import Path
from typing import Awaitable, Callable, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
import structlog

from ..core.config import HotReloadConfig
from ..core.errors import EngineError
from .engine import RulesEngine

logger = structlog.get_logger()


@dataclass
class ReloadResult:
    """Result of a rule reload attempt."""
    success: bool
    rules_loaded: int = 0
    errors: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)


class RuleFileWatcher:
    """
    Polls a rule file and reloads it into an engine.

    The path and polling settings default to the engine config's
    `rules_path` and `hot_reload` section.

    Features:
    - Content-hash change detection
    - Debounces rapid writes
    - Keeps the previous rules on parse errors
    - Notifies via callback on errors
    """

    def __init__(
        self,
        engine: RulesEngine,
        path: Optional[str] = None,
        config: Optional[HotReloadConfig] = None,
    ):
        self.engine = engine
        path = path or engine.config.rules_path
        if not path:
            raise ValueError("No rule file to watch: pass a path or set rules_path")
        self.path = Path(path)
        self.config = config or engine.config.hot_reload

        self._file_hash: str = ""
        self._on_error: Optional[Callable[[str, List[str]], Awaitable[None]]] = None

        self._running = False
        self._watch_task: Optional[asyncio.Task] = None
        self.last_result: Optional[ReloadResult] = None

    def set_error_callback(
        self,
        callback: Callable[[str, List[str]], Awaitable[None]],
    ) -> None:
        """Set callback for reload errors."""
        self._on_error = callback

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start watching the rule file."""
        if self._running:
            return

        if not self.config.enabled:
            logger.info("hot_reload_disabled")
            return

        self._running = True
        self._file_hash = self._compute_hash()
        self._watch_task = asyncio.create_task(self._watch_loop())
        logger.info(
            "hot_reload_started",
            path=str(self.path),
            interval=self.config.check_interval_seconds,
        )

    async def stop(self) -> None:
        """Stop watching for changes."""
        self._running = False
        if self._watch_task:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None
        logger.info("hot_reload_stopped")

    async def force_reload(self) -> ReloadResult:
        """Reload the rule file immediately."""
        self._file_hash = self._compute_hash()
        return await self._do_reload()

    async def _watch_loop(self) -> None:
        """Background loop to watch for file changes."""
        while self._running:
            try:
                await asyncio.sleep(self.config.check_interval_seconds)

                if not self._detect_change():
                    continue

                # Debounce - wait for writes to settle
                await asyncio.sleep(self.config.debounce_seconds)
                self._detect_change()

                result = await self._do_reload()
                if not result.success and self._on_error:
                    try:
                        await self._on_error("Rule reload failed", result.errors)
                    except Exception as notify_err:
                        logger.error(
                            "hot_reload_notify_failed",
                            error=str(notify_err),
                            original_errors=result.errors,
                        )

            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("hot_reload_watch_error")

    def _detect_change(self) -> bool:
        new_hash = self._compute_hash()
        if new_hash == self._file_hash:
            return False
        logger.debug("rule_file_changed", path=str(self.path))
        self._file_hash = new_hash
        return True

    def _compute_hash(self) -> str:
        """Compute hash of file contents; empty when the file is unreadable."""
        try:
            return hashlib.sha256(self.path.read_bytes()).hexdigest()[:16]
        except OSError:
            return ""

    async def _do_reload(self) -> ReloadResult:
        """Perform the actual reload."""
        try:
            self.engine.load_rules_from_file(str(self.path))
        except EngineError as e:
            logger.error("hot_reload_rules_error", error=e.message)
            result = ReloadResult(success=False, errors=[e.message])
        else:
            result = ReloadResult(success=True, rules_loaded=len(self.engine.store))
            logger.info("hot_reload_applied", rules=result.rules_loaded)

        self.last_result = result
        return result
