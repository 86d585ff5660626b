import asyncio

from pytz import timezone

from growwsim import scheduler
from growwsim.utils.decorators import job_runner


def test_build_trigger_parses_hour_minute_weekday():
    trigger = scheduler.build_trigger("9-15 */5 mon-fri", timezone("Asia/Kolkata"))
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["hour"] == "9-15"
    assert fields["minute"] == "*/5"
    assert fields["day_of_week"] == "mon-fri"


def test_build_trigger_defaults_to_weekdays():
    trigger = scheduler.build_trigger("10 0 *", timezone("Asia/Kolkata"))
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["day_of_week"] == "mon-fri"


def test_job_runner_returns_result():
    @job_runner("ok")
    async def job():
        return 3

    assert asyncio.run(job()) == 3


def test_job_runner_contains_failures():
    @job_runner("boom")
    async def job():
        raise RuntimeError("boom")

    assert asyncio.run(job()) is None


def test_market_tick_job_uses_shared_database(db, stocks):
    moved = asyncio.run(scheduler.run_market_tick())
    assert moved == 12
