"""
Daily Scheduler
===============

Fires a timer-triggered generation at a cron-defined wall-clock time in a
named timezone. The cron expression is evaluated with Celery's ``crontab``
schedule; the wait itself is an asyncio task in the serving process.
"""

from typing import Any, Callable, Optional
from datetime import datetime
from zoneinfo import ZoneInfo
import asyncio
import contextlib

from celery.schedules import ParseException, crontab  # type: ignore

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.config.settings import Settings, get_settings
from vocab_wallpaper.core.generation.pipeline import GenerationService
from vocab_wallpaper.models.schemas import GenerationTrigger

logger = get_logger(__name__)


def parse_cron_expression(
    expression: str, nowfun: Optional[Callable[[], datetime]] = None
) -> crontab:
    """
    Build a crontab schedule from a five-field cron expression.

    Args:
        expression: ``minute hour day_of_month month_of_year day_of_week``
        nowfun: Clock returning timezone-aware datetimes

    Returns:
        Celery crontab schedule

    Raises:
        ValueError: If the expression does not have five fields or a field is invalid
    """
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Cron expression must have five fields, got {expression!r}")

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_week=day_of_week,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            nowfun=nowfun,
        )
    except (ParseException, ValueError) as e:
        raise ValueError(f"Invalid cron expression {expression!r}: {e}") from e


class DailyScheduler:
    """Timer that requests a generation each time the cron schedule is due."""

    def __init__(
        self,
        service: GenerationService,
        expression: Optional[str] = None,
        timezone_name: Optional[str] = None,
        nowfun: Optional[Callable[[], datetime]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.service = service
        self.expression = expression or self.settings.schedule_cron
        self.tz = ZoneInfo(timezone_name or self.settings.schedule_timezone)
        self._now = nowfun or (lambda: datetime.now(self.tz))
        self.schedule = parse_cron_expression(self.expression, self._now)
        self.next_run_at: Optional[datetime] = None
        self.logger: Any = logger.bind(component="scheduler")  # structlog.BoundLoggerBase
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_fire_time(self, last_run_at: Optional[datetime] = None) -> datetime:
        """
        Compute the next fire time strictly after ``last_run_at``.

        The cron fields are matched against local wall-clock time, so the
        result keeps its local hour across daylight saving transitions.

        Args:
            last_run_at: Previous fire time, defaults to now

        Returns:
            Timezone-aware datetime in the scheduler's timezone
        """
        last_run_at = (last_run_at or self._now()).astimezone(self.tz)
        start, delta, _ = self.schedule.remaining_delta(last_run_at)
        # ffwd replaces wall-clock fields; the zone supplies the offset for that date
        return (start + delta).astimezone(self.tz)

    def start(self) -> None:
        """Start the timer loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run_loop(), name="daily-scheduler"
        )
        self.logger.info(
            "Scheduler started", cron=self.expression, timezone=str(self.tz)
        )

    async def stop(self) -> None:
        """Cancel the timer loop. In-flight generations are not affected."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self.next_run_at = None
        self.logger.info("Scheduler stopped")

    async def _run_loop(self) -> None:
        last_run_at = self._now()
        while True:
            self.next_run_at = self.next_fire_time(last_run_at)
            delay = max(self.next_run_at.timestamp() - self._now().timestamp(), 0.0)
            self.logger.info(
                "Next generation scheduled",
                next_run_at=self.next_run_at.isoformat(),
                delay_seconds=round(delay, 1),
            )

            await asyncio.sleep(delay)

            last_run_at = self.next_run_at
            self.logger.info("Timer fired", scheduled_for=last_run_at.isoformat())
            self.service.request_generation(GenerationTrigger.TIMER_FIRE)
