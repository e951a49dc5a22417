#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
CLI interface for Subtitle Translator using Typer and Rich.
"""

import os
import time
import uuid
import asyncio
from datetime import datetime
from typing import List, Optional, Sequence

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn, TimeRemainingColumn
from rich.table import Table
from pydantic import BaseModel, Field, field_validator

from ..batch import translate_text, translate_texts
from ..config import EngineSettings
from ..core import detect_subtitle_language, translate_subtitle_file
from ..exceptions import EngineError, SubtitleFormatError, SubtitleTranslatorError
from ..models import SUBTITLE_FORMATS, TRANSLATION_MODES, SubtitleEntry, TranslationOptions
from ..translators import EngineGateway, build_registry, check_ollama_status
from ..utils import get_subtitle_statistics, read_subtitle_file, setup_logging
from ..utils.progress import ProgressTracker
from ..utils.subtitle_codec import generate_output_filename
from ..utils.text import get_language_name

# Create Typer app
app = typer.Typer(
    name="Subtitle Translator",
    help="Translate SRT, SMI and VTT subtitle files with local and hosted translation engines",
    add_completion=False,
)

console = Console()

DEFAULT_ENGINE = "ollama-gemma2-sapie"


class TranslationConfig(BaseModel):
    """Configuration model for a file translation job"""
    input_file: str = Field(..., description="Input subtitle file to translate")
    output: Optional[str] = Field(None, description="Output subtitle file")
    output_format: Optional[str] = Field(None, description="Output format (srt, smi or vtt)")
    verbose: bool = Field(False, description="Enable verbose logging")
    log_file: Optional[str] = Field(None, description="Log file path")

    @field_validator('input_file')
    @classmethod
    def validate_input_file(cls, v):
        if not os.path.isfile(v):
            raise ValueError(f"Input file not found: {v}")
        return v

    @field_validator('output_format')
    @classmethod
    def validate_output_format(cls, v):
        if v is None:
            return v
        v = v.lower().lstrip(".")
        if v not in SUBTITLE_FORMATS:
            raise ValueError(f"Unknown output format: {v}. Supported formats: {', '.join(SUBTITLE_FORMATS)}")
        return v


def create_gateway() -> EngineGateway:
    """Gateway over every engine the environment configures"""
    return EngineGateway(build_registry(EngineSettings.from_env()))


def create_rich_progress() -> Progress:
    """Create a Rich progress bar"""
    return Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40),
        TextColumn("[progress.percentage]{task.percentage:>3.1f}%"),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TimeRemainingColumn(),
        console=console,
        expand=True
    )


def display_error(message: str, title: str = "Translation Failed"):
    console.print(Panel(
        f"[bold red]Error:[/bold red] {message}",
        title=title,
        border_style="red"
    ))


def display_subtitle_preview(entries: Sequence[SubtitleEntry], count: int = 3, title: str = "Subtitle Preview"):
    """Display a preview of the subtitles in a Rich table"""
    if not entries:
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Index", style="cyan")
    table.add_column("Timing", style="green")
    table.add_column("Content", style="white")

    # Show first few subtitles
    for entry in entries[:count]:
        table.add_row(str(entry.index), f"{entry.start} → {entry.end}", entry.text)

    # If there are more subtitles, add an ellipsis row
    if len(entries) > count:
        table.add_row("...", "...", "...")

    console.print(table)


def display_statistics(stats: dict, fmt: str):
    console.print(Panel(
        f"Format: [bold]{fmt.upper()}[/bold]\n"
        f"Found [bold]{stats['total_entries']}[/bold] subtitles\n"
        f"Duration: [bold]{stats['total_duration']}[/bold] seconds\n"
        f"Total characters: [bold]{stats['total_characters']}[/bold]\n"
        f"Total words: [bold]{stats['total_words']}[/bold]\n"
        f"Average characters per subtitle: [bold]{stats['average_characters_per_entry']}[/bold]",
        title="Subtitle Statistics",
        border_style="green"
    ))


def display_translation_summary(config: TranslationConfig, options: TranslationOptions, result, total_time: float):
    """Display a summary of the translation job"""
    stats = result.stats
    engines = sorted({chunk.used_engine for chunk in stats.chunks if chunk.used_engine})

    table = Table(title="Translation Summary", box=box.ROUNDED)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    table.add_row("Input File", config.input_file)
    table.add_row("Output File", config.output)
    table.add_row("Translation Direction", f"{options.source_lang} → {options.target_lang}")
    table.add_row("Engine", options.engine)
    table.add_row("Engines Used", ", ".join(engines) or "none")
    table.add_row("Translation Mode", options.translation_mode)
    table.add_row("Subtitles Processed", str(stats.total_entries))
    table.add_row("Total Characters", str(stats.total_characters))
    table.add_row("Chunks", f"{stats.total_chunks} ({stats.failed_chunks} failed)")
    table.add_row("Retranslated Entries", str(stats.retranslated_entries))
    table.add_row("Processing Time", f"{total_time:.2f} seconds")
    table.add_row("Processing Speed", f"{stats.average_chars_per_second} chars/second")

    console.print(table)


@app.command()
def translate(
    input_file: str = typer.Argument(..., help="Input subtitle file (.srt, .smi or .vtt)"),
    target_lang: str = typer.Option(..., "--target-lang", "-t", help="Target language code (ISO 639-1)"),
    source_lang: str = typer.Option("auto", "--source-lang", "-s", help="Source language code or 'auto'"),
    engine: str = typer.Option(DEFAULT_ENGINE, "--engine", "-e", help="Translation engine to use"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (default: <name>_translated_<lang>_<engine>.<fmt>)"),
    output_format: Optional[str] = typer.Option(None, "--output-format", "-f", help="Output format: srt, smi or vtt (default: input format)"),
    mode: str = typer.Option("auto", "--mode", "-m", help=f"Translation mode: {', '.join(TRANSLATION_MODES)}"),
    chunk_size: int = typer.Option(50, "--chunk-size", "-c", help="Subtitles per request (1-1000)"),
    max_retries: int = typer.Option(5, "--max-retries", help="Retries per chunk and engine (1-10)"),
    retry_delay: int = typer.Option(1000, "--retry-delay", help="Pause between retries in milliseconds (100-10000)"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Do not try fallback engines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path"),
    preview: bool = typer.Option(False, "--preview", help="Preview subtitles without translating"),
):
    """
    Translate a subtitle file.

    Examples:

    - Translate a Korean SRT file to English with the default local model:
      $ subtitle-translator translate drama.srt -t en

    - Translate a SAMI file to Korean with Groq and write VTT:
      $ subtitle-translator translate movie.smi -t ko -e groq -f vtt
    """
    start_time = time.time()

    try:
        config = TranslationConfig(
            input_file=input_file,
            output=output,
            output_format=output_format,
            verbose=verbose,
            log_file=log_file,
        )
        options = TranslationOptions(
            target_lang=target_lang,
            source_lang=source_lang,
            engine=engine,
            translation_mode=mode,
            chunk_size=chunk_size,
            max_retries=max_retries,
            retry_delay=retry_delay,
            enable_fallback=not no_fallback,
        )
    except ValueError as e:
        display_error(str(e), title="Invalid Options")
        raise typer.Exit(code=1)

    logger = setup_logging(config.log_file, config.verbose)

    console.print(Panel.fit(
        "[bold cyan]Subtitle Translator[/bold cyan] - [bold]Starting translation job[/bold]",
        title="Job Info",
        subtitle=f"Started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        border_style="blue"
    ))

    try:
        with console.status("[bold green]Reading subtitle file...[/bold green]"):
            fmt, entries = read_subtitle_file(config.input_file)
    except (SubtitleFormatError, OSError) as e:
        display_error(str(e))
        raise typer.Exit(code=1)

    display_statistics(get_subtitle_statistics(entries), fmt)
    display_subtitle_preview(entries)

    # If preview mode, exit here
    if preview:
        console.print("[bold green]Preview completed. Exiting without translation.[/bold green]")
        return

    if options.source_lang == "auto":
        detected = detect_subtitle_language(entries)
        if detected:
            console.print(f"Detected source language: [bold cyan]{get_language_name(detected)}[/bold cyan] ({detected})")

    gateway = create_gateway()
    if options.engine not in gateway.registry:
        logger.warning(f"Engine {options.engine} is not configured; fallback engines will be used")

    config.output = config.output or generate_output_filename(
        config.input_file, options.target_lang, options.engine, config.output_format
    )
    console.print(
        f"Translation direction: [bold cyan]{options.source_lang}[/bold cyan] → "
        f"[bold cyan]{options.target_lang}[/bold cyan] with [bold]{options.engine}[/bold]"
    )

    tracker = ProgressTracker()
    job_id = uuid.uuid4().hex

    try:
        with create_rich_progress() as progress:
            task_id = progress.add_task("[cyan]Translating[/cyan]", total=len(entries))

            def progress_callback(current, total):
                progress.update(task_id, completed=current)

            output_path, result = asyncio.run(translate_subtitle_file(
                job_id,
                config.input_file,
                config.output,
                options,
                gateway=gateway,
                progress=tracker,
                output_format=config.output_format,
                progress_callback=progress_callback,
            ))
    except SubtitleTranslatorError as e:
        display_error(str(e))
        if verbose:
            console.print_exception()
        raise typer.Exit(code=1)

    display_subtitle_preview(result.translated_entries, title="Translated Preview")
    display_translation_summary(config, options, result, time.time() - start_time)

    console.print(Panel.fit(
        f"[bold green]Translation completed![/bold green]\n"
        f"Output file: [bold]{output_path}[/bold]",
        title="Job Complete",
        subtitle=f"Finished at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        border_style="green"
    ))


@app.command()
def text(
    text: str = typer.Argument(..., help="Text to translate"),
    target_lang: str = typer.Option(..., "--target-lang", "-t", help="Target language code (ISO 639-1)"),
    source_lang: str = typer.Option("auto", "--source-lang", "-s", help="Source language code or 'auto'"),
    engine: str = typer.Option(DEFAULT_ENGINE, "--engine", "-e", help="Translation engine to use"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Do not try fallback engines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Translate a single piece of text"""
    setup_logging(verbose=verbose)
    gateway = create_gateway()

    try:
        with console.status(f"[bold green]Translating with {engine}...[/bold green]"):
            result = asyncio.run(translate_text(
                gateway, text, target_lang, source_lang, engine, enable_fallback=not no_fallback
            ))
    except (EngineError, ValueError) as e:
        display_error(str(e))
        raise typer.Exit(code=1)

    console.print(Panel(
        result.translated_text,
        title=f"{get_language_name(target_lang)} ({result.engine})",
        border_style="green"
    ))


@app.command()
def batch(
    texts: List[str] = typer.Argument(..., help="Texts to translate (at most 20)"),
    target_lang: str = typer.Option(..., "--target-lang", "-t", help="Target language code (ISO 639-1)"),
    source_lang: str = typer.Option("auto", "--source-lang", "-s", help="Source language code or 'auto'"),
    engine: str = typer.Option(DEFAULT_ENGINE, "--engine", "-e", help="Translation engine to use"),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Do not try fallback engines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Translate several independent texts"""
    setup_logging(verbose=verbose)
    gateway = create_gateway()

    try:
        with console.status(f"[bold green]Translating {len(texts)} texts...[/bold green]"):
            result = asyncio.run(translate_texts(
                gateway, texts, target_lang, source_lang, engine, enable_fallback=not no_fallback
            ))
    except ValueError as e:
        display_error(str(e))
        raise typer.Exit(code=1)

    table = Table(title="Batch Translation", box=box.ROUNDED)
    table.add_column("#", style="cyan")
    table.add_column("Original", style="white")
    table.add_column("Translation", style="green")
    table.add_column("Engine", style="magenta")

    for item in result.results:
        translation = item.translated_text if item.success else f"[red]{item.error}[/red]"
        table.add_row(str(item.index + 1), item.original_text, translation, item.engine or "-")

    console.print(table)
    summary = result.summary
    console.print(f"[bold]{summary['successful']}[/bold]/{summary['total']} translated, "
                  f"[bold red]{summary['failed']}[/bold red] failed")

    if summary["successful"] == 0:
        raise typer.Exit(code=1)


@app.command()
def engines(
    check_ollama: bool = typer.Option(False, "--check-ollama", help="Query the Ollama server for installed models"),
):
    """List the configured translation engines"""
    gateway = create_gateway()

    table = Table(title="Translation Engines", box=box.ROUNDED)
    table.add_column("Engine", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Fallback Order", style="green")

    for engine_id, name in gateway.engine_names().items():
        table.add_row(engine_id, name, ", ".join(gateway.get_fallback_engines(engine_id)))

    console.print(table)

    if check_ollama:
        settings = EngineSettings.from_env()
        with console.status("[bold green]Checking Ollama server...[/bold green]"):
            status = asyncio.run(check_ollama_status(settings.ollama_url))

        if status["status"] == "online":
            models = ", ".join(model["name"] for model in status["models"]) or "none"
            console.print(Panel(
                f"Server: [bold]{status['url']}[/bold]\nModels ({status['model_count']}): {models}",
                title="Ollama Online",
                border_style="green"
            ))
        else:
            console.print(Panel(
                f"Server: [bold]{status['url']}[/bold]\n{status['error']}",
                title="Ollama Offline",
                border_style="red"
            ))


@app.command()
def formats():
    """List the supported subtitle formats"""
    table = Table(title="Supported Formats", box=box.ROUNDED)
    table.add_column("Format", style="cyan")
    table.add_column("Extension", style="green")
    table.add_column("Description", style="white")

    table.add_row("SRT", ".srt", "SubRip subtitles")
    table.add_row("SMI", ".smi", "SAMI (Synchronized Accessible Media Interchange)")
    table.add_row("VTT", ".vtt", "WebVTT (Web Video Text Tracks)")

    console.print(table)


@app.command()
def info(
    input_file: str = typer.Argument(..., help="Subtitle file to inspect"),
    count: int = typer.Option(5, "--count", "-n", help="Number of subtitles to preview"),
):
    """Show statistics, a preview and the detected language of a subtitle file"""
    try:
        fmt, entries = read_subtitle_file(input_file)
    except (SubtitleFormatError, OSError) as e:
        display_error(str(e), title="Cannot Read File")
        raise typer.Exit(code=1)

    display_statistics(get_subtitle_statistics(entries), fmt)
    display_subtitle_preview(entries, count=count)

    detected = detect_subtitle_language(entries)
    if detected:
        console.print(f"Detected language: [bold cyan]{get_language_name(detected)}[/bold cyan] ({detected})")
    else:
        console.print("[yellow]Could not detect the subtitle language[/yellow]")


def main():
    """Main entry point for the CLI"""
    app()
