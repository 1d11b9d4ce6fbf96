"""
PNG Generator
=============

Playwright-based capture of the wallpaper layout element.
Launches a browser per capture and always releases it, whatever the outcome.
"""

from typing import Optional, Any
from abc import ABC, abstractmethod
import asyncio
import io

from playwright.async_api import async_playwright, Browser
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from PIL import Image  # type: ignore

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.config.settings import Settings, get_settings
from vocab_wallpaper.core.rendering.html_generator import THEME_PALETTES
from vocab_wallpaper.models.schemas import WallpaperTheme

logger = get_logger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class PNGGenerationError(Exception):
    """Exception raised when PNG generation fails."""

    pass


class RenderTargetMissing(PNGGenerationError):
    """Exception raised when the layout element cannot be found after load."""

    pass


class BaseCompositor(ABC):
    """Abstract base class for layout rasterizers."""

    @abstractmethod
    async def capture(self, html_content: str) -> bytes:
        """Rasterize an HTML document into PNG bytes."""
        pass


class PlaywrightCompositor(BaseCompositor):
    """Chromium screenshot of the wallpaper target element."""

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        selector: Optional[str] = None,
        settle_delay: Optional[float] = None,
        background_color: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.width = width or self.settings.canvas_width
        self.height = height or self.settings.canvas_height
        self.selector = selector or self.settings.render_target_selector
        self.settle_delay = (
            settle_delay if settle_delay is not None else self.settings.render_settle_delay
        )
        self.background_color = (
            background_color
            or THEME_PALETTES[WallpaperTheme(self.settings.wallpaper_theme)]["background"]
        )
        self.logger: Any = logger.bind(generator="playwright")  # structlog.BoundLoggerBase

    async def capture(self, html_content: str) -> bytes:
        """
        Render HTML in a fresh browser and screenshot the target element.

        Args:
            html_content: Complete HTML document

        Returns:
            Opaque PNG bytes of the target element

        Raises:
            RenderTargetMissing: If the target element never becomes visible
            PNGGenerationError: If launch, load or capture fails
        """
        self.logger.info(
            "Capturing wallpaper",
            html_length=len(html_content),
            width=self.width,
            height=self.height,
            selector=self.selector,
        )

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(
                    headless=self.settings.playwright_headless, args=BROWSER_ARGS
                )
                try:
                    png_bytes = await self._capture_with_browser(browser, html_content)
                finally:
                    await browser.close()
        except PNGGenerationError as e:
            self.logger.error("Wallpaper capture failed", error=str(e))
            raise
        except Exception as e:
            error_msg = f"PNG generation failed: {e}"
            self.logger.error("PNG generation error", error=error_msg)
            raise PNGGenerationError(error_msg) from e

        png_bytes = self._flatten_png(png_bytes)
        self.logger.info("Wallpaper capture completed", file_size=len(png_bytes))
        return png_bytes

    async def _capture_with_browser(self, browser: Browser, html_content: str) -> bytes:
        """Load the document and capture the target element."""
        context = await browser.new_context(
            viewport={"width": self.width, "height": self.height},
            device_scale_factor=1,
        )
        try:
            page = await context.new_page()
            page.set_default_timeout(self.settings.playwright_timeout)

            # Remote fonts are part of the network activity
            await page.set_content(html_content, wait_until="networkidle")
            await page.evaluate("() => document.fonts.ready.then(() => true)")

            try:
                await page.wait_for_selector(self.selector, state="visible")
            except PlaywrightTimeoutError as e:
                raise RenderTargetMissing(
                    f"Wallpaper element {self.selector} not visible: {e}"
                ) from e

            if self.settle_delay > 0:
                await asyncio.sleep(self.settle_delay)

            element = await page.query_selector(self.selector)
            if element is None:
                raise RenderTargetMissing(f"Wallpaper element {self.selector} not found")

            return await element.screenshot(type="png", omit_background=False)
        finally:
            await context.close()

    def _flatten_png(self, png_bytes: bytes) -> bytes:
        """
        Composite the capture onto an opaque background using PIL.

        Args:
            png_bytes: Screenshot bytes

        Returns:
            Opaque RGB PNG bytes

        Raises:
            PNGGenerationError: If the capture is not a decodable image
        """
        try:
            image = Image.open(io.BytesIO(png_bytes))

            if image.mode != "RGB":
                rgba = image.convert("RGBA")
                flattened = Image.new("RGB", rgba.size, self.background_color)
                flattened.paste(rgba, mask=rgba.getchannel("A"))
                image = flattened

            if image.size != (self.width, self.height):
                self.logger.warning(
                    "Captured size differs from canvas",
                    captured=image.size,
                    expected=(self.width, self.height),
                )

            output = io.BytesIO()
            image.save(output, format="PNG", optimize=True)
            return output.getvalue()

        except (OSError, ValueError) as e:
            error_msg = f"Captured screenshot is not a decodable PNG: {e}"
            self.logger.error("PNG normalization failed", error=error_msg)
            raise PNGGenerationError(error_msg) from e
