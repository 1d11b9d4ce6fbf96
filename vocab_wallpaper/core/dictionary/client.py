"""
Dictionary Client
=================

HTTP client for the Free Dictionary API.
Resolves vocabulary words into WordEntry models; every failure is soft.
"""

import asyncio
from typing import Any, List, Optional, Sequence
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.config.settings import Settings, get_settings
from vocab_wallpaper.models.schemas import WordEntry

logger = get_logger(__name__)

FALLBACK_EXAMPLE = "The {part_of_speech} used in a common context."


class LookupFailure(Exception):
    """Exception raised when a single word cannot be resolved."""

    pass


def parse_dictionary_response(word: str, data: Any) -> WordEntry:
    """
    Parse a Free Dictionary API response into a WordEntry.

    The first entry is used. The first definition of the first meaning is the
    default; the first definition carrying an example, scanning meanings in
    order, replaces it.

    Args:
        word: Requested word, used when the entry has no headword
        data: Decoded JSON payload (list of entries)

    Returns:
        Resolved word entry

    Raises:
        LookupFailure: If the payload does not have the expected shape
    """
    if not isinstance(data, list) or not data:
        raise LookupFailure(f"Unexpected response format for: {word}")

    try:
        entry = data[0]
        meanings = entry["meanings"]
        best_meaning = meanings[0]
        best_definition = None

        for meaning in meanings:
            found = next((d for d in meaning["definitions"] if d.get("example")), None)
            if found is not None:
                best_meaning, best_definition = meaning, found
                break

        if best_definition is None:
            best_definition = best_meaning["definitions"][0]

        part_of_speech = best_meaning["partOfSpeech"]
        phonetics = entry.get("phonetics") or []
        first_phonetic = phonetics[0] if phonetics else None
        phonetic = (first_phonetic.get("text") if isinstance(first_phonetic, dict) else None) or ""

        return WordEntry(
            word=entry.get("word") or word,
            phonetic=phonetic,
            part_of_speech=part_of_speech,
            definition=best_definition["definition"],
            example=best_definition.get("example")
            or FALLBACK_EXAMPLE.format(part_of_speech=part_of_speech),
        )
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as e:
        raise LookupFailure(f"Malformed dictionary entry for {word}: {e}") from e


class DictionaryClient:
    """Client for resolving words against the Free Dictionary API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = (base_url or self.settings.dictionary_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else self.settings.dictionary_timeout
        self.logger: Any = logger.bind(component="dictionary_client")  # structlog.BoundLoggerBase
        self._session = session
        self._own_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._own_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._own_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch(self, word: str) -> Any:
        """
        Fetch the raw dictionary payload for a word.

        Raises:
            LookupFailure: On transport errors, timeouts, non-success status or bad JSON
        """
        url = f"{self.base_url}/{quote(word.lower())}"
        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if response.status == 404:
                    raise LookupFailure(f"Word not found: {word}")
                if response.status >= 400:
                    raise LookupFailure(f"Dictionary returned {response.status} for: {word}")
                return await response.json(content_type=None)
        except LookupFailure:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise LookupFailure(f"Dictionary request failed for {word}: {e!r}") from e

    async def resolve(self, word: str) -> Optional[WordEntry]:
        """
        Resolve a word to a WordEntry.

        Args:
            word: Word to look up

        Returns:
            WordEntry, or None when the lookup fails for any reason
        """
        try:
            payload = await self.fetch(word)
            entry = parse_dictionary_response(word, payload)
        except LookupFailure as e:
            self.logger.warning("Dictionary lookup failed", word=word, error=str(e))
            return None

        self.logger.debug("Dictionary lookup succeeded", word=entry.word)
        return entry

    async def resolve_many(self, words: Sequence[str]) -> List[WordEntry]:
        """
        Resolve words concurrently and drop failed lookups.

        All lookups run to completion; one failure never cancels the others.

        Returns:
            Resolved entries in the order of ``words``
        """
        results = await asyncio.gather(*(self.resolve(word) for word in words))
        entries = [entry for entry in results if entry is not None]

        self.logger.info(
            "Dictionary batch resolved",
            requested=len(words),
            resolved=len(entries),
            failed=len(words) - len(entries),
        )
        return entries
