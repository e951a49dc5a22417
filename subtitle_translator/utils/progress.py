#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Job progress tracking for Subtitle Translator.
"""

import time
import logging
import threading
from typing import Callable, Dict, Optional

from ..models import JobProgress

# Get logger
logger = logging.getLogger("subtitle_translator")

# Finished jobs are kept for polling this long (seconds)
DEFAULT_PROGRESS_TTL = 24 * 60 * 60


class ProgressTracker:
    """
    Thread-safe in-memory store of job progress, keyed by job id.

    The job driver owning a job id is the only writer for that id; pollers
    may read concurrently. Completed and failed jobs expire after `ttl`
    seconds and are removed by `sweep()`, which `get()` and `all()` run first.
    """

    def __init__(self, ttl: float = DEFAULT_PROGRESS_TTL, clock: Callable[[], float] = time.time):
        """
        Initialize the tracker.

        Args:
            ttl: Seconds a finished job stays readable
            clock: Time source returning seconds, replaceable in tests
        """
        self.ttl = ttl
        self.clock = clock
        self._jobs: Dict[str, JobProgress] = {}
        self.lock = threading.RLock()

    def initialize(self, job_id: str, total_entries: int, total_characters: int) -> JobProgress:
        """Create (or reset) the progress entry of a job"""
        with self.lock:
            progress = JobProgress(
                job_id=job_id,
                status="processing",
                total_entries=total_entries,
                total_characters=total_characters,
                start_time=self.clock(),
                message="Preparing translation...",
            )
            self._jobs[job_id] = progress

        logger.info(f"Progress initialized: {job_id} ({total_entries} entries, {total_characters} chars)")
        return progress.model_copy()

    def update(
        self,
        job_id: str,
        processed_entries: Optional[int] = None,
        processed_characters: Optional[int] = None,
        current_chunk: Optional[int] = None,
        total_chunks: Optional[int] = None,
        message: Optional[str] = None,
    ) -> Optional[JobProgress]:
        """
        Merge the given fields and recompute the derived statistics.

        Processed counters never move backwards.
        """
        with self.lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                logger.warning(f"No progress entry for job: {job_id}")
                return None

            if processed_entries is not None:
                progress.processed_entries = min(
                    max(progress.processed_entries, processed_entries), progress.total_entries
                )
            if processed_characters is not None:
                progress.processed_characters = min(
                    max(progress.processed_characters, processed_characters), progress.total_characters
                )
            if current_chunk is not None:
                progress.current_chunk = current_chunk
            if total_chunks is not None:
                progress.total_chunks = total_chunks

            if progress.total_entries > 0:
                percent = round(progress.processed_entries / progress.total_entries * 100)
                progress.progress = max(0, min(100, percent))
            else:
                progress.progress = 0

            elapsed = self.clock() - progress.start_time
            if elapsed > 0:
                progress.average_chars_per_second = round(progress.processed_characters / elapsed)
            else:
                progress.average_chars_per_second = 0

            remaining_chars = progress.total_characters - progress.processed_characters
            if progress.average_chars_per_second > 0:
                progress.estimated_time_remaining = round(remaining_chars / progress.average_chars_per_second)
            else:
                progress.estimated_time_remaining = 0

            if message:
                progress.message = message
            else:
                progress.message = (
                    f"Progress: {progress.progress}% ({progress.processed_entries}/{progress.total_entries}) "
                    f"- average {progress.average_chars_per_second} chars/s"
                )

            logger.debug(
                f"Progress update {job_id}: {progress.progress}% "
                f"({progress.average_chars_per_second} chars/s, ETA {progress.estimated_time_remaining}s)"
            )
            return progress.model_copy()

    def set_chunk_status(self, job_id: str, chunk_index: int, total_chunks: int,
                         chunk_size: int, chunk_chars: int) -> None:
        """Record which chunk is being translated"""
        with self.lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                return
            progress.current_chunk = chunk_index
            progress.total_chunks = total_chunks
            progress.message = (
                f"Translating chunk {chunk_index}/{total_chunks}... "
                f"({chunk_size} entries, {chunk_chars} chars)"
            )

    def complete(self, job_id: str, total_time: float, final_rate: int) -> Optional[JobProgress]:
        """Mark a job completed and schedule its removal"""
        with self.lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                logger.warning(f"No progress entry for job: {job_id}")
                return None

            progress.status = "completed"
            progress.progress = 100
            progress.processed_entries = progress.total_entries
            progress.processed_characters = progress.total_characters
            progress.estimated_time_remaining = 0
            progress.total_time = total_time
            progress.average_chars_per_second = final_rate
            progress.message = "Translation completed"
            progress.expires_at = self.clock() + self.ttl

        logger.info(f"Translation completed: {job_id} ({total_time:.1f}s, {final_rate} chars/s)")
        return progress.model_copy()

    def set_error(self, job_id: str, message: str) -> None:
        """Mark a job failed; the entry stays readable until it expires"""
        with self.lock:
            progress = self._jobs.get(job_id)
            if progress is None:
                return
            progress.status = "error"
            progress.message = message
            progress.expires_at = self.clock() + self.ttl

        logger.error(f"Translation error: {job_id} - {message}")

    def get(self, job_id: str) -> Optional[JobProgress]:
        """Return a snapshot of a job's progress, or None"""
        with self.lock:
            self.sweep()
            progress = self._jobs.get(job_id)
            return progress.model_copy() if progress is not None else None

    def all(self) -> Dict[str, JobProgress]:
        """Return snapshots of every tracked job"""
        with self.lock:
            self.sweep()
            return {job_id: progress.model_copy() for job_id, progress in self._jobs.items()}

    def clear(self, job_id: str) -> None:
        with self.lock:
            if self._jobs.pop(job_id, None) is not None:
                logger.info(f"Progress removed: {job_id}")

    def sweep(self) -> int:
        """Remove expired entries; returns how many were removed"""
        now = self.clock()
        with self.lock:
            expired = [
                job_id for job_id, progress in self._jobs.items()
                if progress.expires_at is not None and progress.expires_at <= now
            ]
            for job_id in expired:
                del self._jobs[job_id]

        for job_id in expired:
            logger.info(f"Progress expired: {job_id}")
        return len(expired)
