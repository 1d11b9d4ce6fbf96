"""
Test Configuration
==================

Pytest configuration with fixtures shared by unit and integration tests.
Every test gets isolated settings pointing at a temporary public directory.
"""

import random
from pathlib import Path
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio

from vocab_wallpaper.config import settings as settings_module
from vocab_wallpaper.config.settings import Settings
from vocab_wallpaper.core.dictionary.client import DictionaryClient
from vocab_wallpaper.core.generation.pipeline import GenerationService
from vocab_wallpaper.core.rendering.html_generator import WallpaperHTMLGenerator
from vocab_wallpaper.core.storage.store import WallpaperStore
from vocab_wallpaper.core.words.pool import WordSource

from tests.utils.mocks import MockCompositor, MockDictionarySession, make_dictionary_payload

TEST_WORDS = ("Ephemeral", "Serendipity", "Luminous")


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings fixture."""
    return Settings(
        _env_file=None,
        environment="testing",
        public_dir=tmp_path / "public",
        word_count=3,
        render_settle_delay=0,
        schedule_enabled=False,
        generate_on_startup=False,
        log_level="DEBUG",
    )


@pytest.fixture(autouse=True)
def override_settings(test_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Override the global settings instance for testing."""
    monkeypatch.setattr(settings_module, "settings", test_settings)
    return test_settings


@pytest.fixture
def dictionary_routes() -> Dict[str, object]:
    """Successful dictionary responses for every test word."""
    return {word.lower(): (200, make_dictionary_payload(word.lower())) for word in TEST_WORDS}


@pytest.fixture
def dictionary_session(dictionary_routes: Dict[str, object]) -> MockDictionarySession:
    return MockDictionarySession(dictionary_routes)


@pytest_asyncio.fixture
async def dictionary_client(
    dictionary_session: MockDictionarySession, test_settings: Settings
) -> AsyncGenerator[DictionaryClient, None]:
    client = DictionaryClient(session=dictionary_session, settings=test_settings)  # type: ignore[arg-type]
    yield client
    await client.close()


@pytest.fixture
def word_source() -> WordSource:
    """Word source over the three test words with a seeded generator."""
    return WordSource(TEST_WORDS, rng=random.Random(7))


@pytest.fixture
def store(test_settings: Settings) -> WallpaperStore:
    wallpaper_store = WallpaperStore(test_settings.image_path)
    wallpaper_store.ensure_directory()
    return wallpaper_store


@pytest.fixture
def compositor() -> MockCompositor:
    return MockCompositor()


@pytest.fixture
def generation_service(
    word_source: WordSource,
    dictionary_session: MockDictionarySession,
    compositor: MockCompositor,
    store: WallpaperStore,
    test_settings: Settings,
) -> GenerationService:
    """Generation service with a fake dictionary and compositor and a real store."""
    return GenerationService(
        word_source=word_source,
        dictionary=DictionaryClient(session=dictionary_session, settings=test_settings),  # type: ignore[arg-type]
        html_generator=WallpaperHTMLGenerator(settings=test_settings),
        compositor=compositor,
        store=store,
        settings=test_settings,
    )
