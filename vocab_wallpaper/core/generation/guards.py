"""
Generation Guards
=================

Admission policies wrapped around every generation trigger.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator

from vocab_wallpaper.models.schemas import GenerationTrigger


class GenerationGuard(ABC):
    """Decides whether a triggered cycle may run."""

    @abstractmethod
    def slot(self, trigger: GenerationTrigger) -> AsyncContextManager[bool]:
        """Async context manager yielding True when the cycle is admitted."""
        pass


class NoopGuard(GenerationGuard):
    """Admits every trigger; overlapping cycles run side by side."""

    @asynccontextmanager
    async def slot(self, trigger: GenerationTrigger) -> AsyncIterator[bool]:
        yield True


class SingleFlightGuard(GenerationGuard):
    """Admits one cycle at a time and skips triggers while it runs."""

    def __init__(self) -> None:
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    @asynccontextmanager
    async def slot(self, trigger: GenerationTrigger) -> AsyncIterator[bool]:
        if self._busy:
            yield False
            return

        self._busy = True
        try:
            yield True
        finally:
            self._busy = False
