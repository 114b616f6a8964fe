"""Tests for the cinegoods-crawl command."""

from unittest.mock import AsyncMock, patch

import pytest

from cinegoods.config import Settings
from cinegoods.scripts import crawl
from cinegoods.tasks.crawl_job import ALL_SOURCES, CrawlSummary

COMPLETE = Settings(
    _env_file=None,
    database_url="postgresql+asyncpg://localhost/test",
    gemini_api_key="key",
    google_service_account_email="bot@example.com",
    google_private_key="key",
    google_sheet_id="sheet",
)


def test_missing_configuration_exits(monkeypatch):
    monkeypatch.setattr("sys.argv", ["cinegoods-crawl", "cgv"])

    with (
        patch.object(crawl, "get_settings", return_value=Settings(_env_file=None, database_url="")),
        pytest.raises(SystemExit) as exc_info,
    ):
        crawl.main()

    assert exc_info.value.code == 1


def test_all_runs_every_source(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["cinegoods-crawl", "all", "--dry-run", "--headed"])
    settings = COMPLETE.model_copy()
    run = AsyncMock(return_value=[CrawlSummary(source="cgv", targets=2)])

    with (
        patch.object(crawl, "get_settings", return_value=settings),
        patch.object(crawl, "run_crawl", run),
    ):
        crawl.main()

    names, passed_settings = run.call_args.args
    assert names == list(ALL_SOURCES)
    assert passed_settings.headless is False
    assert run.call_args.kwargs["dry_run"] is True
    assert "cgv: 2 targets" in capsys.readouterr().out


def test_unknown_source_is_rejected(monkeypatch):
    monkeypatch.setattr("sys.argv", ["cinegoods-crawl", "cinecube"])

    with pytest.raises(SystemExit) as exc_info:
        crawl.main()

    assert exc_info.value.code == 2
