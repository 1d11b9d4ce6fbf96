"""
Unit Tests for Dictionary Client
================================

Tests for parsing Free Dictionary API payloads and for soft lookup failures.
"""

import asyncio

import aiohttp
import pytest

from vocab_wallpaper.core.dictionary.client import (
    DictionaryClient,
    FALLBACK_EXAMPLE,
    LookupFailure,
    parse_dictionary_response,
)
from vocab_wallpaper.models.schemas import WordEntry

from tests.utils.mocks import MockDictionarySession, MockResponse, make_dictionary_payload


class TestParseDictionaryResponse:
    """Test payload parsing and definition selection."""

    def test_parse_basic_entry(self):
        entry = parse_dictionary_response("ephemeral", make_dictionary_payload("ephemeral"))

        assert isinstance(entry, WordEntry)
        assert entry.word == "Ephemeral"
        assert entry.phonetic == "/fÉËnÉtÉªk/"
        assert entry.part_of_speech == "adjective"
        assert entry.definition == "Definition of ephemeral."
        assert entry.example == "An example using ephemeral."

    def test_only_first_letter_capitalized(self):
        entry = parse_dictionary_response("mcGuffin", make_dictionary_payload("mcGuffin"))
        assert entry.word == "McGuffin"

    def test_first_definition_with_example_wins(self):
        meanings = [
            {
                "partOfSpeech": "noun",
                "definitions": [
                    {"definition": "Noun sense without example."},
                    {"definition": "Second noun sense.", "example": ""},
                ],
            },
            {
                "partOfSpeech": "verb",
                "definitions": [
                    {"definition": "Verb sense without example."},
                    {"definition": "Verb sense with example.", "example": "They verbed it."},
                    {"definition": "Later sense.", "example": "Never chosen."},
                ],
            },
        ]
        entry = parse_dictionary_response("verb", make_dictionary_payload("verb", meanings))

        assert entry.part_of_speech == "verb"
        assert entry.definition == "Verb sense with example."
        assert entry.example == "They verbed it."

    def test_fallback_example_uses_first_definition(self):
        meanings = [
            {"partOfSpeech": "noun", "definitions": [{"definition": "First sense."}]},
            {"partOfSpeech": "verb", "definitions": [{"definition": "Other sense."}]},
        ]
        entry = parse_dictionary_response("zenith", make_dictionary_payload("zenith", meanings))

        assert entry.part_of_speech == "noun"
        assert entry.definition == "First sense."
        assert entry.example == FALLBACK_EXAMPLE.format(part_of_speech="noun")
        assert entry.example == "The noun used in a common context."

    def test_missing_phonetic_is_empty(self):
        payload = make_dictionary_payload("stoic", phonetic=None)
        assert parse_dictionary_response("stoic", payload).phonetic == ""

    def test_phonetic_without_text_is_empty(self):
        payload = make_dictionary_payload("stoic")
        payload[0]["phonetics"] = [{"audio": "https://example.invalid/stoic.mp3"}]
        assert parse_dictionary_response("stoic", payload).phonetic == ""

    def test_missing_headword_uses_requested_word(self):
        payload = make_dictionary_payload("arcane")
        del payload[0]["word"]
        assert parse_dictionary_response("arcane", payload).word == "Arcane"

    def test_example_found_after_meaning_without_definitions(self):
        meanings = [
            {"partOfSpeech": "noun", "definitions": []},
            {
                "partOfSpeech": "adjective",
                "definitions": [{"definition": "Enduring pain.", "example": "A stoic response."}],
            },
        ]
        entry = parse_dictionary_response("stoic", make_dictionary_payload("stoic", meanings))

        assert entry.part_of_speech == "adjective"
        assert entry.definition == "Enduring pain."
        assert entry.example == "A stoic response."

    @pytest.mark.parametrize("phonetics", [[None], ["/stoik/"], [{}], None])
    def test_unusable_phonetics_are_empty(self, phonetics):
        payload = make_dictionary_payload("stoic")
        payload[0]["phonetics"] = phonetics

        assert parse_dictionary_response("stoic", payload).phonetic == ""

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"title": "No Definitions Found"},
            None,
            [{"word": "x"}],
            [{"word": "x", "meanings": []}],
            [{"word": "x", "meanings": [{"partOfSpeech": "noun", "definitions": []}]}],
            [{"word": "x", "meanings": [{"definitions": [{"definition": "d"}]}]}],
            [{"word": "x", "meanings": [{"partOfSpeech": "noun", "definitions": [{"definition": ""}]}]}],
            ["not an object"],
        ],
    )
    def test_malformed_payloads(self, payload):
        with pytest.raises(LookupFailure):
            parse_dictionary_response("x", payload)


class TestDictionaryClient:
    """Test HTTP lookups against a mock session."""

    @pytest.mark.asyncio
    async def test_resolve_success(self, dictionary_client, dictionary_session):
        entry = await dictionary_client.resolve("Ephemeral")

        assert entry is not None
        assert entry.word == "Ephemeral"
        assert dictionary_session.requested_urls == [
            "https://api.dictionaryapi.dev/api/v2/entries/en/ephemeral"
        ]

    @pytest.mark.asyncio
    async def test_word_is_url_encoded(self, test_settings):
        session = MockDictionarySession()
        client = DictionaryClient(session=session, settings=test_settings)

        await client.resolve("ad hoc")

        assert session.requested_urls[0].endswith("/ad%20hoc")

    @pytest.mark.asyncio
    async def test_not_found_is_soft(self, dictionary_client):
        assert await dictionary_client.resolve("Petrichor") is None

    @pytest.mark.asyncio
    async def test_not_found_raises_from_fetch(self, dictionary_client):
        with pytest.raises(LookupFailure, match="Word not found"):
            await dictionary_client.fetch("Petrichor")

    @pytest.mark.asyncio
    async def test_server_error_is_soft(self, test_settings):
        session = MockDictionarySession({"stoic": (503, {"message": "unavailable"})})
        client = DictionaryClient(session=session, settings=test_settings)

        with pytest.raises(LookupFailure, match="503"):
            await client.fetch("Stoic")
        assert await client.resolve("Stoic") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("connection reset"), asyncio.TimeoutError()],
    )
    async def test_transport_errors_are_soft(self, test_settings, error):
        session = MockDictionarySession({"stoic": error})
        client = DictionaryClient(session=session, settings=test_settings)

        assert await client.resolve("Stoic") is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_soft(self, test_settings):
        session = MockDictionarySession()
        client = DictionaryClient(session=session, settings=test_settings)
        response = MockResponse(status=200, json_error=ValueError("Expecting value"))
        session.get = lambda url: response  # type: ignore[assignment]

        with pytest.raises(LookupFailure):
            await client.fetch("Stoic")
        assert await client.resolve("Stoic") is None

    @pytest.mark.asyncio
    async def test_resolve_many_drops_failures_in_order(self, dictionary_routes, test_settings):
        dictionary_routes["serendipity"] = (404, {"title": "No Definitions Found"})
        client = DictionaryClient(
            session=MockDictionarySession(dictionary_routes), settings=test_settings
        )

        entries = await client.resolve_many(["Luminous", "Serendipity", "Ephemeral"])

        assert [entry.word for entry in entries] == ["Luminous", "Ephemeral"]

    @pytest.mark.asyncio
    async def test_resolve_many_all_fail(self, test_settings):
        client = DictionaryClient(session=MockDictionarySession(), settings=test_settings)
        assert await client.resolve_many(["Stoic", "Vivid"]) == []

    @pytest.mark.asyncio
    async def test_resolve_many_is_concurrent(self, dictionary_routes, test_settings):
        session = MockDictionarySession(dictionary_routes, delay=0.05)
        client = DictionaryClient(session=session, settings=test_settings)

        entries = await client.resolve_many(["Ephemeral", "Serendipity", "Luminous"])

        assert len(entries) == 3
        assert session.max_active == 3

    @pytest.mark.asyncio
    async def test_close_keeps_injected_session_open(self, dictionary_client, dictionary_session):
        await dictionary_client.close()
        assert dictionary_session.closed is False

    def test_base_url_trailing_slash(self, test_settings):
        client = DictionaryClient(base_url="https://dict.example/api/", settings=test_settings)
        assert client.base_url == "https://dict.example/api"
