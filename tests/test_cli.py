"""Tests for the Typer command-line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from subtitle_translator.cli import app
from subtitle_translator.translators.gateway import EngineGateway

runner = CliRunner()

SAMPLE_SRT = (
    "1\n00:00:01,000 --> 00:00:02,000\nhello\n\n"
    "2\n00:00:03,000 --> 00:00:04,000\nworld\n"
)


class TestCli:
    """Test cases for the CLI commands."""

    def test_formats(self):
        result = runner.invoke(app, ["formats"])

        assert result.exit_code == 0
        assert "SMI" in result.output
        assert ".vtt" in result.output

    def test_info(self, tmp_path):
        path = tmp_path / "movie.srt"
        path.write_text(SAMPLE_SRT, encoding="utf-8")

        result = runner.invoke(app, ["info", str(path)])

        assert result.exit_code == 0
        assert "Subtitle Statistics" in result.output
        assert "hello" in result.output

    def test_info_missing_file(self, tmp_path):
        result = runner.invoke(app, ["info", str(tmp_path / "missing.srt")])

        assert result.exit_code == 1

    def test_text(self, fake_provider):
        gateway = EngineGateway({"groq": fake_provider("groq")})

        with patch("subtitle_translator.cli.typer_cli.create_gateway", return_value=gateway):
            result = runner.invoke(app, ["text", "hello", "-t", "ko", "-e", "groq", "--no-fallback"])

        assert result.exit_code == 0
        assert "HELLO" in result.output

    def test_translate_writes_output(self, tmp_path, fake_provider):
        # Arrange
        path = tmp_path / "movie.srt"
        path.write_text(SAMPLE_SRT, encoding="utf-8")
        output = tmp_path / "movie.ko.vtt"
        gateway = EngineGateway({"groq": fake_provider("groq")})

        # Act
        with patch("subtitle_translator.cli.typer_cli.create_gateway", return_value=gateway):
            result = runner.invoke(app, [
                "translate", str(path), "-t", "ko", "-s", "en", "-e", "groq",
                "-o", str(output), "-f", "vtt",
            ])

        # Assert
        assert result.exit_code == 0, result.output
        content = output.read_text(encoding="utf-8")
        assert content.startswith("WEBVTT")
        assert "HELLO" in content
        assert "WORLD" in content

    def test_translate_rejects_unknown_output_format(self, tmp_path):
        path = tmp_path / "movie.srt"
        path.write_text(SAMPLE_SRT, encoding="utf-8")

        result = runner.invoke(app, ["translate", str(path), "-t", "ko", "-f", "ass"])

        assert result.exit_code == 1
