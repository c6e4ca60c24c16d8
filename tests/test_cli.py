"""
Tests for CLI module.

Tests command-line interface commands and output.
"""

import json

import pytest
import yaml
from typer.testing import CliRunner

from entity_intel.cli import app
from entity_intel.cli import main as cli_main
from entity_intel.pipeline import AnalysisPipeline

PAGE_URL = "https://example.com/seo-ppc-course"


@pytest.fixture
def runner() -> CliRunner:
    """Provide a CLI test runner."""
    return CliRunner()


@pytest.fixture
def offline_pipeline(monkeypatch, fake_web, sample_html, test_settings):
    """Route every command's pipeline through the fake web."""
    fake_web.pages[PAGE_URL] = sample_html

    def build(settings):
        return AnalysisPipeline.from_settings(
            test_settings,
            transport=fake_web.transport,
            sleep=lambda seconds: None,
        )

    monkeypatch.setattr(cli_main, "build_pipeline", build)
    return fake_web


class TestCLI:
    """Tests for general CLI behaviour."""

    def test_cli_help(self, runner: CliRunner):
        """CLI should show help."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, runner: CliRunner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "Entity Intelligence" in result.output

    def test_analyze_help(self, runner: CliRunner):
        """Analyze command should show help."""
        result = runner.invoke(app, ["analyze", "--help"])

        assert result.exit_code == 0
        assert "--strategy" in result.output


class TestConfigCommand:
    """Tests for config command."""

    def test_config_show(self, runner: CliRunner):
        """Config show should display settings."""
        result = runner.invoke(app, ["config", "--show"])

        assert result.exit_code == 0
        assert "knowledge" in result.output

    def test_config_init(self, runner: CliRunner, temp_dir):
        """Config init writes a loadable default file."""
        path = temp_dir / "entity-intel.yaml"

        result = runner.invoke(app, ["config", "--init", "--output", str(path)])

        assert result.exit_code == 0
        data = yaml.safe_load(path.read_text())
        assert data["analysis"]["default_strategy"] == "strict"

    def test_config_without_flags(self, runner: CliRunner):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "--show" in result.output


class TestAnalyzeCommands:
    """Tests for analyze and analyze-text."""

    def test_analyze_url(self, runner: CliRunner, offline_pipeline):
        result = runner.invoke(app, ["analyze", PAGE_URL])

        assert result.exit_code == 0
        assert "Main topic" in result.output
        assert "Entities" in result.output

    def test_analyze_writes_json(self, runner: CliRunner, offline_pipeline, temp_dir):
        output = temp_dir / "result.json"

        result = runner.invoke(app, ["analyze", PAGE_URL, "--output", str(output)])

        assert result.exit_code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["url"] == PAGE_URL
        assert payload["json_ld"]["@context"] == "https://schema.org"

    def test_analyze_invalid_url(self, runner: CliRunner, offline_pipeline):
        result = runner.invoke(app, ["analyze", "not-a-url"])

        assert result.exit_code == cli_main.EXIT_INVALID_INPUT
        assert "Invalid input" in result.output

    def test_analyze_unreachable(self, runner: CliRunner, offline_pipeline):
        result = runner.invoke(app, ["analyze", "https://example.com/missing"])

        assert result.exit_code == cli_main.EXIT_FETCH_FAILED
        assert "Could not retrieve content" in result.output

    def test_unknown_strategy(self, runner: CliRunner, offline_pipeline):
        result = runner.invoke(app, ["analyze", PAGE_URL, "--strategy", "random"])

        assert result.exit_code != 0
        assert offline_pipeline.requests == []

    def test_analyze_text_file(self, runner: CliRunner, offline_pipeline, sample_html, temp_dir):
        source = temp_dir / "page.html"
        source.write_text(sample_html, encoding="utf-8")
        output = temp_dir / "result.json"

        result = runner.invoke(
            app, ["analyze-text", str(source), "--strategy", "title", "--output", str(output)])

        assert result.exit_code == 0
        payload = json.loads(output.read_text(encoding="utf-8"))
        assert payload["url"] is None
        assert payload["main_topic_strategy"] == "title"

    def test_analyze_text_stdin(self, runner: CliRunner, offline_pipeline, temp_dir):
        output = temp_dir / "result.json"

        result = runner.invoke(
            app,
            ["analyze-text", "-", "--output", str(output)],
            input="Kubernetes Operators\nOperators run inside Kubernetes Clusters.\n",
        )

        assert result.exit_code == 0
        assert json.loads(output.read_text(encoding="utf-8"))["title"] == "Kubernetes Operators"

    def test_analyze_text_missing_file(self, runner: CliRunner, offline_pipeline, temp_dir):
        result = runner.invoke(app, ["analyze-text", str(temp_dir / "missing.html")])

        assert result.exit_code == cli_main.EXIT_INVALID_INPUT

    def test_analyze_text_empty(self, runner: CliRunner, offline_pipeline):
        result = runner.invoke(app, ["analyze-text", "-"], input="   \n")

        assert result.exit_code == cli_main.EXIT_INVALID_INPUT
