"""
HTML Generator
==============

Convert resolved word entries into the wallpaper HTML layout.
All entry text is escaped by Jinja2 autoescaping before it reaches the markup.
"""

from typing import Dict, Any, Optional, Sequence
from pathlib import Path
from abc import ABC, abstractmethod
import jinja2

from vocab_wallpaper.config.logging import get_logger
from vocab_wallpaper.config.settings import Settings, get_settings
from vocab_wallpaper.models.schemas import WallpaperTheme, WordEntry

logger = get_logger(__name__)

TEMPLATE_NAME = "wallpaper.html"

# Safe areas for the notch / dynamic island and the home indicator
TOP_SAFE_AREA = 120
BOTTOM_SAFE_AREA = 80

THEME_PALETTES: Dict[WallpaperTheme, Dict[str, str]] = {
    WallpaperTheme.LIGHT: {
        "background": "#efebe0",
        "word": "#111827",
        "part_of_speech": "#6B7280",
        "definition": "#111827",
        "example": "#4B5563",
    },
    WallpaperTheme.DARK: {
        "background": "#111827",
        "word": "#F9FAFB",
        "part_of_speech": "#9CA3AF",
        "definition": "#E5E7EB",
        "example": "#D1D5DB",
    },
    WallpaperTheme.MIDNIGHT: {
        "background": "#0B1026",
        "word": "#E0E7FF",
        "part_of_speech": "#818CF8",
        "definition": "#C7D2FE",
        "example": "#A5B4FC",
    },
}


class HTMLGenerationError(Exception):
    """Exception raised when HTML generation fails."""

    pass


class BaseHTMLGenerator(ABC):
    """Abstract base class for wallpaper layout generators."""

    @abstractmethod
    def render(self, entries: Sequence[WordEntry]) -> str:
        """Render word entries into an HTML document."""
        pass


class WallpaperHTMLGenerator(BaseHTMLGenerator):
    """Jinja2-based wallpaper layout generator."""

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        theme: Optional[WallpaperTheme] = None,
        target_id: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.width = width or self.settings.canvas_width
        self.height = height or self.settings.canvas_height
        self.theme = WallpaperTheme(theme or self.settings.wallpaper_theme)
        self.target_id = target_id or self.settings.render_target_selector.lstrip("#")
        self.logger: Any = logger.bind(generator="jinja2")  # structlog.BoundLoggerBase
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            undefined=jinja2.StrictUndefined,
        )

        def px(value: float) -> str:
            """Convert numeric value to CSS pixels."""
            return f"{value}px"

        self.env.filters["px"] = px

    def _prepare_context(self, entries: Sequence[WordEntry]) -> Dict[str, Any]:
        """
        Prepare template rendering context.

        Args:
            entries: Resolved word entries, in display order

        Returns:
            Template context dictionary
        """
        return {
            "entries": list(entries),
            "width": self.width,
            "height": self.height,
            "palette": THEME_PALETTES[self.theme],
            "target_id": self.target_id,
            "top_safe_area": TOP_SAFE_AREA,
            "bottom_safe_area": BOTTOM_SAFE_AREA,
        }

    def render(self, entries: Sequence[WordEntry]) -> str:
        """
        Generate the wallpaper HTML for the given entries.

        Args:
            entries: Resolved word entries

        Returns:
            Complete HTML document

        Raises:
            HTMLGenerationError: If template rendering fails
        """
        try:
            template = self.env.get_template(TEMPLATE_NAME)
            html = template.render(**self._prepare_context(entries))
        except jinja2.TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            self.logger.error("HTML generation failed", error=error_msg)
            raise HTMLGenerationError(error_msg) from e

        self.logger.info(
            "HTML generation completed",
            template=TEMPLATE_NAME,
            entries=len(entries),
            html_length=len(html),
        )
        return html
