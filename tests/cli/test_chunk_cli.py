"""Tests for the chunksmith command line."""

import json

import pytest
from typer.testing import CliRunner

from chunksmith import __version__
from chunksmith.cli.main import app

# Mark all tests as unit tests (no external services)
pytestmark = pytest.mark.unit

LONG_TEXT = "This is sentence 1. " * 100


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory so no config file is auto-discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestBasics:
    def test_version(self, runner, isolated):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config(self, runner, isolated):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "MESSAGE_MAX_LENGTH=2000" in result.output
        assert "CHUNK_SAFE_OVERHEAD=50" in result.output

    def test_config_file_applies(self, runner, isolated):
        path = isolated / "custom.yaml"
        path.write_text("MESSAGE_MAX_LENGTH: 300\n")

        result = runner.invoke(app, ["--config", str(path), "config"])

        assert result.exit_code == 0
        assert "MESSAGE_MAX_LENGTH=300" in result.output

    def test_invalid_config_file(self, runner, isolated):
        path = isolated / "bad.yaml"
        path.write_text("CHUNK_SAFE_OVERHEAD: 2\n")

        result = runner.invoke(app, ["--config", str(path), "config"])

        assert result.exit_code == 2


class TestChunkCommand:
    def test_json_output(self, runner, isolated):
        source = isolated / "message.txt"
        source.write_text(LONG_TEXT)

        result = runner.invoke(app, ["chunk", str(source), "--max-length", "500", "--format", "json"])

        assert result.exit_code == 0
        chunks = json.loads(result.output)
        assert len(chunks) > 1
        assert chunks[0].startswith("[1/")
        assert all(len(chunk) <= 500 for chunk in chunks)

    def test_text_output_from_stdin(self, runner, isolated):
        result = runner.invoke(app, ["chunk", "-"], input="A short message.")
        assert result.exit_code == 0
        assert result.output == "A short message.\n"

    def test_links_flag(self, runner, isolated):
        text = "Watch the intro at youtu.be/abc123 before you begin. " * 10

        result = runner.invoke(app, ["chunk", "-", "--max-length", "300", "--links", "--format", "json"], input=text)

        assert result.exit_code == 0
        chunks = json.loads(result.output)
        assert "[YouTube Video](https://youtu.be/abc123)" in chunks[0]
        assert all(len(chunk) <= 300 for chunk in chunks)

    def test_limit_below_overhead(self, runner, isolated):
        result = runner.invoke(app, ["chunk", "-", "--max-length", "40"], input="Some text.")
        assert result.exit_code == 2

    def test_unknown_format(self, runner, isolated):
        result = runner.invoke(app, ["chunk", "-", "--format", "xml"], input="Some text.")
        assert result.exit_code == 1

    def test_missing_file(self, runner, isolated):
        result = runner.invoke(app, ["chunk", str(isolated / "nope.txt")])
        assert result.exit_code == 1


class TestValidateCommand:
    def _write(self, directory, chunks):
        path = directory / "chunks.json"
        path.write_text(json.dumps(chunks))
        return str(path)

    def test_clean_boundaries(self, runner, isolated):
        result = runner.invoke(app, ["validate", self._write(isolated, ["Question?", "Exclamation!"])])
        assert result.exit_code == 0
        assert "boundaries clean" in result.output

    def test_violation(self, runner, isolated):
        path = self._write(isolated, ["This is an incomplete sentence", "that continues here."])
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 1

    def test_not_an_array(self, runner, isolated):
        result = runner.invoke(app, ["validate", self._write(isolated, {"a": 1})])
        assert result.exit_code == 1

    def test_invalid_json(self, runner, isolated):
        path = isolated / "broken.json"
        path.write_text("[not json")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1

    def test_config_file_suffixes_apply(self, runner, isolated):
        path = self._write(isolated, ["Visit example.", "dev/docs for more."])
        assert runner.invoke(app, ["validate", path]).exit_code == 0

        (isolated / ".chunksmith.yaml").write_text("SPLIT_DOMAIN_SUFFIXES: [dev]\n")

        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 1


def test_stats(runner, isolated):
    result = runner.invoke(app, ["stats", "-", "--max-length", "500"], input=LONG_TEXT)
    assert result.exit_code == 0
    assert "Chunking Statistics" in result.output
    assert "chunk_count" in result.output
