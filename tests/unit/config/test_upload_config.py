import logging
from pathlib import Path

import pytest

from resumable_upload.config.config import read_env_overrides, resolve_upload_config
from resumable_upload.config.upload_config import UploadConfig
from resumable_upload.const import DEFAULT_CHUNK_SIZE
from resumable_upload.core.exceptions import ConfigError


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ACCESS_TOKEN",
        "CHUNK_SIZE",
        "MAX_RETRIES",
        "RETRY_BACKOFF",
        "TIMEOUT",
    ):
        monkeypatch.delenv(f"RESUMABLE_UPLOAD_{name}", raising=False)
    return monkeypatch


def test_defaults(source_file: Path):
    config = UploadConfig(
        file_path=source_file, session_endpoint="https://u", total_size=10
    )

    assert config.chunk_size == DEFAULT_CHUNK_SIZE == 16_777_216
    assert config.metadata == {}
    assert config.access_token is None
    assert config.max_retries == 3
    assert config.retry_backoff == 0


def test_from_options_ignores_none_values(source_file: Path):
    config = UploadConfig.from_options(
        file_path=source_file,
        file_url=None,
        session_endpoint="https://u",
        total_size=10,
        chunk_size=None,
    )

    assert config.chunk_size == DEFAULT_CHUNK_SIZE


def test_from_options_collects_all_errors():
    with pytest.raises(ConfigError) as exc_info:
        UploadConfig.from_options(session_endpoint="", total_size=0)

    fields = " ".join(exc_info.value.errors)
    assert "session_endpoint" in fields
    assert "total_size" in fields


def test_unknown_option_is_rejected(source_file: Path):
    with pytest.raises(ConfigError, match="resumableUrl"):
        UploadConfig.from_options(
            file_path=source_file,
            session_endpoint="https://u",
            total_size=10,
            resumableUrl="https://u",
        )


def test_chunk_size_not_multiple_of_256_kib_warns(source_file: Path, caplog):
    with caplog.at_level(logging.WARNING):
        UploadConfig(
            file_path=source_file,
            session_endpoint="https://u",
            total_size=10,
            chunk_size=1000,
        )

    assert "not a multiple of 262144" in caplog.text


@pytest.mark.parametrize("chunk_size", [0, -262144])
def test_chunk_size_must_be_positive(source_file: Path, chunk_size):
    with pytest.raises(ConfigError, match="chunk_size"):
        UploadConfig.from_options(
            file_path=source_file,
            session_endpoint="https://u",
            total_size=10,
            chunk_size=chunk_size,
        )


def test_env_overrides_are_parsed(clean_env):
    clean_env.setenv("RESUMABLE_UPLOAD_ACCESS_TOKEN", "env-token")
    clean_env.setenv("RESUMABLE_UPLOAD_CHUNK_SIZE", "8mb")
    clean_env.setenv("RESUMABLE_UPLOAD_MAX_RETRIES", "5")
    clean_env.setenv("RESUMABLE_UPLOAD_TIMEOUT", "12.5")

    assert read_env_overrides() == {
        "access_token": "env-token",
        "chunk_size": 8 * 1024 * 1024,
        "max_retries": 5,
        "timeout": 12.5,
    }


def test_invalid_env_values_are_ignored(clean_env, caplog):
    clean_env.setenv("RESUMABLE_UPLOAD_CHUNK_SIZE", "lots")
    clean_env.setenv("RESUMABLE_UPLOAD_RETRY_BACKOFF", "soon")

    with caplog.at_level(logging.WARNING):
        assert read_env_overrides() == {}

    assert "RESUMABLE_UPLOAD_CHUNK_SIZE" in caplog.text


def test_explicit_options_override_environment(clean_env, source_file: Path):
    clean_env.setenv("RESUMABLE_UPLOAD_ACCESS_TOKEN", "env-token")
    clean_env.setenv("RESUMABLE_UPLOAD_CHUNK_SIZE", "1mb")

    config = resolve_upload_config({
        "file_path": source_file,
        "session_endpoint": "https://u",
        "total_size": 10,
        "access_token": "cli-token",
        "chunk_size": None,
    })

    assert config.access_token == "cli-token"
    assert config.chunk_size == 1024 * 1024


def test_blank_source_values_are_treated_as_unset(source_file: Path):
    config = UploadConfig(
        file_path=source_file,
        file_url="",
        session_endpoint=" https://u ",
        total_size=10,
    )

    assert config.file_url is None
    assert config.session_endpoint == "https://u"

    with pytest.raises(ConfigError, match="Exactly one"):
        UploadConfig.from_options(
            file_path="", session_endpoint="https://u", total_size=10
        )
