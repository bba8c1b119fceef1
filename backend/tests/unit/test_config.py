"""Unit Tests: environment-driven settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from friday.config import Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults(tmp_path):
    settings = make_settings(data_dir=tmp_path, database_url="")

    assert settings.port == 3000
    assert settings.leaderboard_rate_limit == 10
    assert settings.rate_limit_window_ms == 900_000
    assert settings.database_path == tmp_path.resolve() / "leaderboard.db"
    assert settings.cors_origin_list == ["https://friday-boi.pages.dev"]


@pytest.mark.parametrize(
    "url,expected",
    [
        ("sqlite:/srv/data/leaderboard.db", Path("/srv/data/leaderboard.db")),
        ("sqlite:////srv/data/leaderboard.db", Path("/srv/data/leaderboard.db")),
        ("/srv/friday.db", Path("/srv/friday.db")),
    ],
)
def test_database_url_forms(url, expected):
    assert make_settings(database_url=url).database_path == expected


def test_node_env_alias(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.setenv("NODE_ENV", "production")

    settings = make_settings()

    assert settings.is_production
    assert not settings.is_development


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LEADERBOARD_RATE_LIMIT", "25")
    monkeypatch.setenv("ENABLE_PUBLIC_STATS", "false")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")

    settings = make_settings()

    assert settings.leaderboard_rate_limit == 25
    assert settings.enable_public_stats is False
    assert settings.cors_origin_list == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize("field", ["leaderboard_rate_limit", "rate_limit_max_requests", "rate_limit_window_ms"])
def test_rate_limits_must_be_positive(field):
    with pytest.raises(ValidationError):
        make_settings(**{field: 0})


def test_s3_upload_needs_bucket_and_credentials():
    assert not make_settings(s3_bucket_name="", aws_access_key_id="", aws_secret_access_key="").s3_upload_enabled
    assert not make_settings(
        s3_bucket_name="friday-backups", aws_access_key_id="AKIA", aws_secret_access_key=""
    ).s3_upload_enabled
    assert make_settings(
        s3_bucket_name="friday-backups", aws_access_key_id="AKIA", aws_secret_access_key="secret"
    ).s3_upload_enabled
