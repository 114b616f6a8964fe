"""Tests for the daily crawl scheduler."""

from cinegoods.config import Settings
from cinegoods.main import create_scheduler
from cinegoods.tasks.crawl_job import ALL_SOURCES, run_crawl


def test_daily_crawl_job_is_registered():
    settings = Settings(_env_file=None, schedule_hour=7)

    scheduler = create_scheduler(settings)
    job = scheduler.get_job("daily_crawl")

    assert job is not None
    assert job.func is run_crawl
    assert job.args[0] == list(ALL_SOURCES)
    assert job.args[1] is settings
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["hour"] == "7"
    assert fields["minute"] == "0"
    assert job.max_instances == 1
