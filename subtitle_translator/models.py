#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Data models shared by the codec, the engine gateway and the job driver.
"""

from datetime import timedelta
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TRANSLATION_MODES = ("auto", "srt_direct", "separator")
SUBTITLE_FORMATS = ("srt", "smi", "vtt")

FAILURE_MARKER = "[translation-failed]"


def failure_placeholder(text: str) -> str:
    """Mark an entry whose translation failed"""
    return f"{FAILURE_MARKER} {text}"


def _clamp_int(value: Any, default: int, lower: int, upper: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = default
    # 0 behaves like a missing value
    if number == 0 and lower > 0:
        number = default
    return max(lower, min(number, upper))


class SubtitleEntry(BaseModel):
    """A single timed subtitle entry"""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1)
    start: timedelta
    end: timedelta
    text: str = ""

    def with_text(self, text: str) -> "SubtitleEntry":
        """Return a copy with only the text replaced"""
        return self.model_copy(update={"text": text})


class TranslationOptions(BaseModel):
    """
    Per-job translation settings.

    Out-of-range values are clamped and unknown choices replaced with
    their defaults instead of being rejected.
    """
    target_lang: str = Field("", description="Target language code")
    source_lang: str = Field("auto", description="Source language code or 'auto'")
    engine: str = Field("ollama-gemma2-sapie", description="Primary engine id")
    translation_mode: str = Field("auto", description="auto, srt_direct or separator")
    max_retries: int = Field(5, description="Retries per strategy and engine")
    retry_delay: int = Field(1000, description="Pause between retries in milliseconds")
    enable_fallback: bool = Field(True, description="Try fallback engines on failure")
    source_format: str = Field("srt", description="Format of the parsed input")
    chunk_size: int = Field(50, description="Entries per chunk")

    @field_validator("source_lang", mode="before")
    @classmethod
    def default_source_lang(cls, v):
        return v or "auto"

    @field_validator("target_lang", mode="before")
    @classmethod
    def default_target_lang(cls, v):
        return v or ""

    @field_validator("translation_mode", mode="before")
    @classmethod
    def clamp_translation_mode(cls, v):
        return v if v in TRANSLATION_MODES else "auto"

    @field_validator("source_format", mode="before")
    @classmethod
    def clamp_source_format(cls, v):
        v = str(v or "").lower().lstrip(".")
        return v if v in SUBTITLE_FORMATS else "srt"

    @field_validator("max_retries", mode="before")
    @classmethod
    def clamp_max_retries(cls, v):
        return _clamp_int(v, 5, 1, 10)

    @field_validator("retry_delay", mode="before")
    @classmethod
    def clamp_retry_delay(cls, v):
        return _clamp_int(v, 1000, 100, 10000)

    @field_validator("chunk_size", mode="before")
    @classmethod
    def clamp_chunk_size(cls, v):
        return _clamp_int(v, 50, 1, 1000)

    @field_validator("enable_fallback", mode="before")
    @classmethod
    def coerce_enable_fallback(cls, v):
        if isinstance(v, str):
            return v.strip().lower() not in ("false", "0", "no", "off", "")
        return bool(v) if v is not None else True


class TranslationResult(BaseModel):
    """Result of one engine gateway call"""
    translated_text: str
    detected_source_lang: Optional[str] = None
    engine: str
    model: Optional[str] = None


class ChunkResult(BaseModel):
    """Outcome of translating one chunk; translated_texts matches the chunk length"""
    success: bool
    translated_texts: List[str]
    used_engine: Optional[str] = None
    strategy: Optional[str] = None
    error: Optional[str] = None
    duration: float = 0.0
    chars: int = 0


class JobProgress(BaseModel):
    """Mutable progress snapshot of one translation job"""
    job_id: str
    status: str = "processing"
    progress: int = 0
    total_entries: int = 0
    processed_entries: int = 0
    total_characters: int = 0
    processed_characters: int = 0
    start_time: float = 0.0
    current_chunk: int = 0
    total_chunks: int = 0
    average_chars_per_second: int = 0
    estimated_time_remaining: int = 0
    message: str = ""
    total_time: Optional[float] = None
    expires_at: Optional[float] = None


class ChunkOutcome(BaseModel):
    """Per-chunk record kept in the job statistics"""
    chunk_index: int
    entries: int
    success: bool
    used_engine: Optional[str] = None
    strategy: Optional[str] = None
    error: Optional[str] = None


class JobStats(BaseModel):
    """Aggregate statistics of a finished job"""
    total_time: float
    total_entries: int
    total_characters: int
    average_chars_per_second: int
    total_chunks: int
    failed_chunks: int = 0
    retranslated_entries: int = 0
    chunks: List[ChunkOutcome] = Field(default_factory=list)


class JobResult(BaseModel):
    """Translated entries plus statistics"""
    translated_entries: List[SubtitleEntry]
    stats: JobStats


class BatchItem(BaseModel):
    """Result of one independent text in a batch"""
    index: int
    success: bool
    original_text: str
    translated_text: Optional[str] = None
    engine: Optional[str] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    """Batch results ordered by index, with a success/failure summary"""
    results: List[BatchItem]
    summary: Dict[str, int]

    @property
    def successful(self) -> List[BatchItem]:
        return [item for item in self.results if item.success]

    @property
    def failed(self) -> List[BatchItem]:
        return [item for item in self.results if not item.success]
