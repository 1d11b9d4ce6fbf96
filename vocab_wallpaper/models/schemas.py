"""
Pydantic Models and Schemas
===========================

Core data models for word entries, generation cycles, and API responses.
"""

from typing import Optional, Dict, Any, Literal
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class WallpaperTheme(str, Enum):
    """Wallpaper colour themes."""
    LIGHT = "light"
    DARK = "dark"
    MIDNIGHT = "midnight"


class GenerationTrigger(str, Enum):
    """Event that started a generation cycle."""
    STARTUP_MISS = "startup-miss"
    TIMER_FIRE = "timer-fire"
    REQUEST_MISS = "request-miss"
    MANUAL = "manual"


class CycleStage(str, Enum):
    """Stages of a generation cycle, in execution order."""
    IDLE = "idle"
    SAMPLING = "sampling"
    RESOLVING = "resolving"
    RENDERING = "rendering"
    CAPTURING = "capturing"
    STORING = "storing"


# Word Models
class WordEntry(BaseModel):
    """Resolved lexical data for a single vocabulary word."""
    model_config = ConfigDict(frozen=True)

    word: str = Field(..., min_length=1, description="Headword, first letter capitalized")
    phonetic: str = Field("", description="Phonetic transcription, may be empty")
    part_of_speech: str = Field(..., min_length=1, description="Part of speech")
    definition: str = Field(..., min_length=1, description="Selected definition")
    example: str = Field(..., min_length=1, description="Example sentence")

    @field_validator("word")
    @classmethod
    def capitalize_first_letter(cls, v: str) -> str:
        """Upper-case only the first character of the headword."""
        return v[:1].upper() + v[1:]


# Generation Models
class GenerationOutcome(BaseModel):
    """Result of one generation cycle."""
    trigger: GenerationTrigger = Field(..., description="What started the cycle")
    success: bool = Field(..., description="Whether a new wallpaper was stored")
    skipped: bool = Field(False, description="Cycle was not admitted by the generation guard")
    words: list[str] = Field(default_factory=list, description="Sampled words")
    resolved: int = Field(0, ge=0, description="Number of successfully resolved entries")
    failed_stage: Optional[CycleStage] = Field(None, description="Stage that aborted the cycle")
    error_type: Optional[str] = Field(None, description="Exception class that aborted the cycle")
    error: Optional[str] = Field(None, description="Error message if failed")
    started_at: datetime = Field(default_factory=_utcnow, description="Cycle start time")
    duration: float = Field(0.0, ge=0, description="Cycle duration in seconds")


# Health Check Models
class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["healthy", "degraded"] = Field(..., description="Overall status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")

    artifact_present: bool = Field(..., description="Whether a wallpaper is available")
    scheduler_running: bool = Field(..., description="Daily timer status")
    next_run_at: Optional[datetime] = Field(None, description="Next scheduled generation")
    generations_in_flight: int = Field(0, ge=0, description="Cycles currently running")
    last_outcome: Optional[GenerationOutcome] = Field(None, description="Most recent cycle")


# Error Models
class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=_utcnow, description="Error timestamp")
    request_id: Optional[str] = Field(None, description="Request identifier for tracking")
