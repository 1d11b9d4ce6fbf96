"""
Vocabulary Pool
===============

Fixed pool of curated vocabulary and uniform sampling without replacement.
"""

import random
from typing import Iterable, List, Optional, Tuple

from vocab_wallpaper.config.logging import get_logger

logger = get_logger(__name__)


# A curated list of sophisticated vocabulary for daily learning
VOCABULARY_POOL: Tuple[str, ...] = (
    "Ephemeral", "Serendipity", "Quintessential", "Ineffable", "Languid",
    "Pervasive", "Eloquent", "Melancholy", "Paradigm", "Surreptitious",
    "Nefarious", "Fastidious", "Capricious", "Resilient", "Stoic",
    "Ubiquitous", "Pragmatic", "Benevolent", "Tenacious", "Altruistic",
    "Enigma", "Aesthetic", "Meticulous", "Placid", "Superfluous",
    "Venerable", "Zealous", "Quixotic", "Arcane", "Luminous",
    "Assiduous", "Clarity", "Euphoria", "Incendiary", "Mellifluous",
    "Petrichor", "Sonorous", "Vivid", "Wanderlust", "Zenith",
    "Abundant", "Bountiful", "Diligent", "Exuberant", "Fervent",
    "Gracious", "Harmonious", "Intrepid", "Jovial", "Kindred",
)


class InsufficientPoolError(Exception):
    """Exception raised when more words are requested than the pool holds."""

    pass


class WordSource:
    """Random, non-repeating word sampler over a fixed pool."""

    def __init__(
        self, pool: Iterable[str] = VOCABULARY_POOL, rng: Optional[random.Random] = None
    ) -> None:
        # dict.fromkeys keeps first occurrence order
        self.pool: Tuple[str, ...] = tuple(dict.fromkeys(pool))
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.pool)

    def sample(self, count: int) -> List[str]:
        """
        Draw distinct words uniformly without replacement.

        Args:
            count: Number of words to draw

        Returns:
            Words in randomized order

        Raises:
            InsufficientPoolError: If count exceeds the pool size
        """
        if count < 0:
            raise ValueError(f"Sample count must be non-negative, got {count}")
        if count > len(self.pool):
            raise InsufficientPoolError(
                f"Requested {count} words from a pool of {len(self.pool)}"
            )

        words = self._rng.sample(self.pool, count)
        logger.debug("Sampled words", count=count, words=words)
        return words
