"""Tests for main.py CLI functionality."""

import json
import logging
from unittest.mock import patch

import pytest

from thumbnails_pipeline.core.factories import PipelineFactory
from thumbnails_pipeline.main import build_config, main, parse_args
from thumbnails_pipeline.testing.fakes import (
    UUID_KEY,
    FakeResizeOperation,
    setup_test_s3_environment,
)

ENV_VARS = ("DEST_BUCKET", "STAGING_DIR", "UPLOAD_ACL", "RESIZER", "PRESET_CONCURRENCY", "DEBUG")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def quiet_logs():
    """Keep stdout log handlers out of the captured CLI output."""
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def fake_s3():
    return setup_test_s3_environment()


@pytest.fixture
def patched_factory(fake_s3):
    """Route the CLI's processor construction through the fake S3 client."""
    original = PipelineFactory.create_batch_processor

    def build(config, **kwargs):
        return original(config, s3_client=fake_s3, resizer=FakeResizeOperation(), **kwargs)

    with patch("thumbnails_pipeline.main.PipelineFactory.create_batch_processor", side_effect=build):
        yield


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_repeatable_keys(self):
        args = parse_args(["--bucket", "b", "--key", "one.jpg", "--key", "two.jpg"])

        assert args.bucket == "b"
        assert args.keys == ["one.jpg", "two.jpg"]
        assert args.json is False

    def test_missing_required_arguments_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["--bucket", "b"])

    def test_overrides_applied_over_environment(self, monkeypatch):
        monkeypatch.setenv("DEST_BUCKET", "from-env")
        monkeypatch.setenv("RESIZER", "convert")
        args = parse_args(
            ["--bucket", "b", "--key", "k.jpg", "--dest-bucket", "from-cli", "--concurrency", "3"]
        )

        config = build_config(args)

        assert config.dest_bucket == "from-cli"
        assert config.resizer == "convert"
        assert config.preset_concurrency == 3


class TestMainCLI:
    """Tests for the main CLI functionality."""

    def test_success_prints_outcomes(self, patched_factory, quiet_logs, fake_s3, tmp_path, capsys):
        exit_code = main(
            [
                "--bucket", "test-originals",
                "--key", UUID_KEY,
                "--dest-bucket", "test-derivatives",
                "--staging-dir", str(tmp_path),
            ]
        )

        assert exit_code == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 4
        assert all(line.startswith("succeeded") for line in lines)
        assert len(fake_s3.put_calls) == 4

    def test_json_output_with_preset_override(self, patched_factory, quiet_logs, tmp_path, capsys):
        exit_code = main(
            [
                "--bucket", "test-originals",
                "--key", "a/b/c.png",
                "--dest-bucket", "test-derivatives",
                "--staging-dir", str(tmp_path),
                "--presets", "tiny:32x32:70",
                "--json",
            ]
        )

        summary = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert summary["outcomes"][0]["destination"] == "s3://test-derivatives/a/b/c/tiny.png"

    def test_missing_source_returns_one(self, patched_factory, quiet_logs, tmp_path, capsys):
        exit_code = main(
            [
                "--bucket", "test-originals",
                "--key", "nope.jpg",
                "--dest-bucket", "test-derivatives",
                "--staging-dir", str(tmp_path),
            ]
        )

        assert exit_code == 1
        assert capsys.readouterr().out.startswith("fetch_failed")

    def test_invalid_presets_return_one(self, patched_factory, tmp_path):
        exit_code = main(
            ["--bucket", "b", "--key", "k.jpg", "--staging-dir", str(tmp_path), "--presets", "bogus"]
        )

        assert exit_code == 1

    def test_keyboard_interrupt_returns_one(self):
        with patch(
            "thumbnails_pipeline.main.PipelineFactory.create_batch_processor",
            side_effect=KeyboardInterrupt,
        ):
            assert main(["--bucket", "b", "--key", "k.jpg"]) == 1
