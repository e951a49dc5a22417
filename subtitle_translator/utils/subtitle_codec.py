#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Subtitle file parsing and generation (SRT, SMI and VTT).
"""

import os
import re
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import srt

from ..exceptions import MalformedFile, UnsupportedFormat
from ..models import SUBTITLE_FORMATS, SubtitleEntry

# Get logger
logger = logging.getLogger("subtitle_translator")

# Encodings tried in order when decoding raw subtitle bytes
FALLBACK_ENCODINGS = ("utf-8-sig", "cp949", "latin-1")

# SMI entries without a following SYNC last this long
SMI_DEFAULT_DURATION_MS = 3000

SMI_SYNC_PATTERN = re.compile(r"<SYNC\s+Start\s*=\s*\"?(\d+)\"?[^>]*>", re.IGNORECASE)
SMI_P_PATTERN = re.compile(r"<P[^>]*>(.*?)(?:</P>|(?=<SYNC)|(?=</BODY>)|\Z)", re.IGNORECASE | re.DOTALL)
SMI_BR_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]+>")

VTT_TIMING_PATTERN = re.compile(
    r"((?:\d{1,2}:)?\d{2}:\d{2}[.,]\d{3})\s*-->\s*((?:\d{1,2}:)?\d{2}:\d{2}[.,]\d{3})"
)


def detect_format(declared_format: str) -> str:
    """
    Resolve a declared format, extension or filename to a format name.

    Args:
        declared_format: 'srt', '.vtt', 'movie.smi', ...

    Returns:
        One of 'srt', 'smi', 'vtt'
    """
    value = (declared_format or "").strip().lower()
    if value in SUBTITLE_FORMATS:
        return value
    ext = os.path.splitext(value)[1] if "." in value else ""
    ext = ext.lstrip(".") or value.lstrip(".")
    if ext in SUBTITLE_FORMATS:
        return ext
    raise UnsupportedFormat(f"Unsupported subtitle format: {declared_format}")


def decode_content(content: Union[bytes, str]) -> str:
    """Decode subtitle bytes, trying a few common encodings"""
    if isinstance(content, str):
        return content.lstrip("\ufeff")

    for encoding in FALLBACK_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"Subtitle content is not {encoding}")
            continue
    raise MalformedFile("Could not decode subtitle content with any known encoding")


def ms_to_timedelta(ms: int) -> timedelta:
    return timedelta(milliseconds=ms)


def timedelta_to_ms(value: timedelta) -> int:
    return int(round(value.total_seconds() * 1000))


def format_timestamp(value: timedelta, separator: str = ",") -> str:
    """Format a timedelta as HH:MM:SS,mmm (or HH:MM:SS.mmm for VTT)"""
    total_ms = timedelta_to_ms(value)
    hours, rest = divmod(total_ms, 3600000)
    minutes, rest = divmod(rest, 60000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{millis:03d}"


def parse_timestamp(value: str) -> timedelta:
    """Parse HH:MM:SS,mmm, HH:MM:SS.mmm or MM:SS.mmm"""
    clock, _, millis = value.replace(",", ".").partition(".")
    parts = [int(part) for part in clock.split(":")]
    if len(parts) == 2:
        parts.insert(0, 0)
    hours, minutes, seconds = parts
    return timedelta(hours=hours, minutes=minutes, seconds=seconds, milliseconds=int(millis or 0))


def parse_srt(content: str) -> List[SubtitleEntry]:
    """Parse SRT content using the srt library"""
    try:
        subtitles = list(srt.parse(content))
    except srt.SRTParseError as e:
        raise MalformedFile(f"Failed to parse SRT content: {e}") from e

    return [
        SubtitleEntry(
            index=max(1, subtitle.index or position),
            start=subtitle.start,
            end=subtitle.end,
            text=subtitle.content.strip(),
        )
        for position, subtitle in enumerate(subtitles, start=1)
    ]


def generate_srt(entries: Sequence[SubtitleEntry]) -> str:
    """Generate SRT content, keeping the original entry numbers"""
    subtitles = [
        srt.Subtitle(index=entry.index, start=entry.start, end=entry.end, content=entry.text)
        for entry in entries
    ]
    return srt.compose(subtitles, reindex=False)


def parse_smi(content: str) -> List[SubtitleEntry]:
    """
    Parse SAMI content.

    Each <SYNC Start=ms> opens an entry whose text is the first <P> before
    the next SYNC. An entry ends where the next SYNC starts; the last one
    lasts SMI_DEFAULT_DURATION_MS. SYNC blocks without text (the usual
    "&nbsp;" clear markers) only close the previous entry.
    """
    syncs = [(int(m.group(1)), m.start(), m.end()) for m in SMI_SYNC_PATTERN.finditer(content)]
    entries = []

    for position, (start_ms, _, body_start) in enumerate(syncs):
        if position + 1 < len(syncs):
            next_ms, body_end, _ = syncs[position + 1]
        else:
            next_ms, body_end = start_ms + SMI_DEFAULT_DURATION_MS, len(content)

        body = content[body_start:body_end]
        match = SMI_P_PATTERN.search(body)
        if not match:
            continue

        text = SMI_BR_PATTERN.sub("\n", match.group(1))
        text = TAG_PATTERN.sub("", text).replace("&nbsp;", " ")
        text = "\n".join(line.strip() for line in text.splitlines()).strip()
        if not text:
            continue

        entries.append(SubtitleEntry(
            index=position + 1,
            start=ms_to_timedelta(start_ms),
            end=ms_to_timedelta(next_ms),
            text=text,
        ))

    return entries


def generate_smi(entries: Sequence[SubtitleEntry], title: Optional[str] = None) -> str:
    """Generate a SAMI document"""
    title = title or "Translated Subtitle"
    lines = [
        "<SAMI>",
        "<HEAD>",
        f"<TITLE>{title}</TITLE>",
        '<STYLE TYPE="text/css">',
        "<!--",
        "P { margin-left:8pt; margin-right:8pt; margin-bottom:2pt; margin-top:2pt;",
        "    font-size:12pt; text-align:center; font-family:Arial;",
        "    font-weight:normal; color:white; }",
        ".KRCC { Name:Korean; lang: ko-KR; SAMIType: CC; }",
        "-->",
        "</STYLE>",
        "</HEAD>",
        "<BODY>",
    ]
    for entry in entries:
        text = entry.text.replace("\n", "<br>")
        lines.append(f"<SYNC Start={timedelta_to_ms(entry.start)}><P Class=KRCC>{text}</P></SYNC>")
    lines.append("</BODY>")
    lines.append("</SAMI>")
    return "\n".join(lines)


def parse_vtt(content: str) -> List[SubtitleEntry]:
    """Parse WebVTT content; cue identifiers, settings and NOTE blocks are ignored"""
    entries = []
    blocks = re.split(r"\n\s*\n", content.replace("\r\n", "\n").replace("\r", "\n").strip())

    for block in blocks:
        lines = [line.strip() for line in block.split("\n")]
        timing_line = next((i for i, line in enumerate(lines) if "-->" in line), None)
        if timing_line is None:
            # WEBVTT header, NOTE, STYLE or REGION block
            continue
        if lines[0].startswith(("NOTE", "STYLE", "REGION")):
            continue

        match = VTT_TIMING_PATTERN.search(lines[timing_line])
        if not match:
            logger.warning(f"Skipping VTT cue with invalid timing: {lines[timing_line]}")
            continue

        text = "\n".join(line for line in lines[timing_line + 1:] if line)
        entries.append(SubtitleEntry(
            index=len(entries) + 1,
            start=parse_timestamp(match.group(1)),
            end=parse_timestamp(match.group(2)),
            text=text,
        ))

    return entries


def generate_vtt(entries: Sequence[SubtitleEntry]) -> str:
    """Generate WebVTT content"""
    cues = [
        f"{format_timestamp(entry.start, '.')} --> {format_timestamp(entry.end, '.')}\n{entry.text}\n"
        for entry in entries
    ]
    return "WEBVTT\n\n" + "\n".join(cues)


PARSERS = {
    "srt": parse_srt,
    "smi": parse_smi,
    "vtt": parse_vtt,
}


def parse_subtitle(content: Union[bytes, str], declared_format: str) -> Tuple[str, List[SubtitleEntry]]:
    """
    Parse subtitle content into ordered entries.

    Args:
        content: Raw file bytes or decoded text
        declared_format: Format name, extension or filename

    Returns:
        Tuple of (format, entries)

    Raises:
        UnsupportedFormat: Format is not srt, smi or vtt
        MalformedFile: Content cannot be decoded or holds no entries
    """
    fmt = detect_format(declared_format)
    text = decode_content(content)
    entries = PARSERS[fmt](text)

    if not entries:
        raise MalformedFile(f"No subtitle entries found in {fmt.upper()} content")

    logger.info(f"Parsed {len(entries)} {fmt.upper()} entries")
    return fmt, entries


def generate_subtitle(entries: Sequence[SubtitleEntry], fmt: str, title: Optional[str] = None) -> str:
    """
    Serialize entries to the given format.

    Raises:
        UnsupportedFormat: Format is not srt, smi or vtt
    """
    fmt = detect_format(fmt)
    if fmt == "srt":
        return generate_srt(entries)
    if fmt == "smi":
        return generate_smi(entries, title)
    return generate_vtt(entries)


def read_subtitle_file(file_path: str) -> Tuple[str, List[SubtitleEntry]]:
    """
    Read and parse a subtitle file; the format comes from its extension.

    Args:
        file_path: Path to an .srt, .smi or .vtt file

    Returns:
        Tuple of (format, entries)
    """
    logger.info(f"Reading subtitle file: {file_path}")

    with open(file_path, "rb") as f:
        content = f.read()

    return parse_subtitle(content, file_path)


def write_subtitle_file(content: str, file_path: str) -> None:
    """Write generated subtitle content as UTF-8"""
    logger.info(f"Writing translated subtitles to: {file_path}")

    os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        f.write(content)


def get_subtitle_statistics(entries: Sequence[SubtitleEntry]) -> Dict[str, Any]:
    """
    Get statistics about subtitle entries.

    Args:
        entries: Subtitle entries

    Returns:
        Dictionary with entry, duration, character and word counts
    """
    if not entries:
        return {
            "total_entries": 0,
            "total_duration": 0,
            "total_characters": 0,
            "total_words": 0,
            "average_characters_per_entry": 0,
            "average_words_per_entry": 0,
        }

    count = len(entries)
    total_chars = sum(len(entry.text) for entry in entries)
    total_words = sum(len(entry.text.split()) for entry in entries)
    duration = entries[-1].end - entries[0].start

    return {
        "total_entries": count,
        "total_duration": round(duration.total_seconds()),
        "total_characters": total_chars,
        "total_words": total_words,
        "average_characters_per_entry": round(total_chars / count),
        "average_words_per_entry": round(total_words / count),
    }


def generate_output_filename(input_file: str, target_lang: str, engine: str, fmt: Optional[str] = None) -> str:
    """
    Generate the output filename for a translated subtitle file.

    Args:
        input_file: Input subtitle file path
        target_lang: Target language code
        engine: Engine id; an "ollama-" prefix is dropped
        fmt: Output format (default: input extension)

    Returns:
        Output file path next to the input file
    """
    base_name, ext = os.path.splitext(input_file)
    fmt = fmt or ext.lstrip(".") or "srt"
    engine_label = engine.replace("ollama-", "")
    return f"{base_name}_translated_{target_lang}_{engine_label}.{fmt}"
