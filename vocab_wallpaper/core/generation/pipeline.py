"""
Generation Pipeline
===================

One generation cycle: sample words, resolve them, render the layout, capture
the PNG and store it. Every trigger (startup, timer, request miss, CLI) goes
through ``GenerationService.request_generation``.
"""

from typing import Any, Optional, Set, List
from datetime import datetime, timezone
import asyncio
import time
import uuid

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.config.settings import Settings, get_settings
from vocab_wallpaper.core.dictionary.client import DictionaryClient
from vocab_wallpaper.core.generation.guards import GenerationGuard, NoopGuard, SingleFlightGuard
from vocab_wallpaper.core.rendering.html_generator import (
    BaseHTMLGenerator,
    WallpaperHTMLGenerator,
)
from vocab_wallpaper.core.rendering.png_generator import BaseCompositor, PlaywrightCompositor
from vocab_wallpaper.core.storage.store import WallpaperStore
from vocab_wallpaper.core.words.pool import WordSource
from vocab_wallpaper.models.schemas import (
    CycleStage,
    GenerationOutcome,
    GenerationTrigger,
    WordEntry,
)

logger = get_logger(__name__)


class EmptyBatchError(Exception):
    """Exception raised when every word lookup in a cycle failed."""

    pass


class GenerationService:
    """Runs generation cycles and tracks background triggers."""

    def __init__(
        self,
        word_source: WordSource,
        dictionary: DictionaryClient,
        html_generator: BaseHTMLGenerator,
        compositor: BaseCompositor,
        store: WallpaperStore,
        word_count: Optional[int] = None,
        guard: Optional[GenerationGuard] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.word_source = word_source
        self.dictionary = dictionary
        self.html_generator = html_generator
        self.compositor = compositor
        self.store = store
        self.word_count = word_count or self.settings.word_count
        self.guard = guard or NoopGuard()
        self.last_outcome: Optional[GenerationOutcome] = None
        self.logger: Any = logger.bind(component="generation_service")  # structlog.BoundLoggerBase
        self._tasks: Set["asyncio.Task[GenerationOutcome]"] = set()

    @property
    def in_flight(self) -> int:
        """Number of background cycles not yet finished."""
        return len(self._tasks)

    async def run_cycle(
        self, trigger: GenerationTrigger = GenerationTrigger.MANUAL
    ) -> GenerationOutcome:
        """
        Run one generation cycle to completion or to its first failure.

        Stages run strictly in order; a failing stage ends the cycle without
        touching the stored wallpaper. Never raises for cycle failures.

        Args:
            trigger: Event that started the cycle

        Returns:
            Outcome of the cycle
        """
        log = self.logger.bind(trigger=trigger.value, cycle_id=uuid.uuid4().hex[:8])
        started_at = datetime.now(timezone.utc)
        start = time.monotonic()
        stage = CycleStage.SAMPLING
        words: List[str] = []
        entries: List[WordEntry] = []

        log.info("Generation cycle started", word_count=self.word_count)

        try:
            words = self.word_source.sample(self.word_count)
            log.info("Selected words", words=words)

            stage = CycleStage.RESOLVING
            entries = await self.dictionary.resolve_many(words)
            if not entries:
                raise EmptyBatchError(f"No dictionary entries resolved for {words}")

            stage = CycleStage.RENDERING
            html_content = self.html_generator.render(entries)

            stage = CycleStage.CAPTURING
            png_bytes = await self.compositor.capture(html_content)

            stage = CycleStage.STORING
            await self.store.write(png_bytes)

        except Exception as e:
            outcome = GenerationOutcome(
                trigger=trigger,
                success=False,
                words=words,
                resolved=len(entries),
                failed_stage=stage,
                error_type=type(e).__name__,
                error=str(e),
                started_at=started_at,
                duration=time.monotonic() - start,
            )
            log.error(
                "Generation cycle failed",
                stage=stage.value,
                error_type=outcome.error_type,
                error=outcome.error,
            )
        else:
            outcome = GenerationOutcome(
                trigger=trigger,
                success=True,
                words=words,
                resolved=len(entries),
                started_at=started_at,
                duration=time.monotonic() - start,
            )
            log.info(
                "Generation cycle completed",
                resolved=len(entries),
                path=str(self.store.path),
                duration=round(outcome.duration, 3),
            )

        self.last_outcome = outcome
        return outcome

    def request_generation(self, trigger: GenerationTrigger) -> "asyncio.Task[GenerationOutcome]":
        """
        Start a cycle in the background without waiting for it.

        Must be called from a running event loop.

        Args:
            trigger: Event requesting the cycle

        Returns:
            Task resolving to the cycle outcome
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._guarded_cycle(trigger), name=f"generation-{trigger.value}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        self.logger.info("Generation requested", trigger=trigger.value, in_flight=self.in_flight)
        return task

    async def _guarded_cycle(self, trigger: GenerationTrigger) -> GenerationOutcome:
        async with self.guard.slot(trigger) as admitted:
            if not admitted:
                self.logger.info("Generation skipped, cycle already running", trigger=trigger.value)
                return GenerationOutcome(trigger=trigger, success=False, skipped=True)
            return await self.run_cycle(trigger)

    async def wait_idle(self) -> None:
        """Wait until every background cycle has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Wait for in-flight cycles and release the dictionary session."""
        await self.wait_idle()
        await self.dictionary.close()
        self.logger.info("Generation service closed")


def build_generation_service(settings: Optional[Settings] = None) -> GenerationService:
    """
    Assemble a generation service from configuration.

    Args:
        settings: Settings to use, defaults to the global settings

    Returns:
        Generation service wired to the real dictionary, browser and store
    """
    settings = settings or get_settings()
    guard: GenerationGuard = (
        SingleFlightGuard() if settings.generation_single_flight else NoopGuard()
    )

    return GenerationService(
        word_source=WordSource(),
        dictionary=DictionaryClient(settings=settings),
        html_generator=WallpaperHTMLGenerator(settings=settings),
        compositor=PlaywrightCompositor(settings=settings),
        store=WallpaperStore(settings.image_path),
        word_count=settings.word_count,
        guard=guard,
        settings=settings,
    )
