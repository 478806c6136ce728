"""Tests for background time and weather refresh."""

import asyncio
from datetime import datetime

from services.chat.ambient import AmbientContextRefresher, current_time_string
from services.chat.session_store import SessionStore


def test_current_time_string_format():
    assert current_time_string(datetime(2024, 5, 1, 15, 0)) == "03:00 PM"


def test_start_seeds_existing_sessions():
    store = SessionStore()
    session_id = store.create().session_id
    refresher = AmbientContextRefresher(store, clock=lambda: "3:00 PM", weather_provider=lambda: "Sunny, 25°C")

    async def run():
        await refresher.start()
        await refresher.stop()

    asyncio.run(run())
    context = store.get(session_id).context
    assert context.current_time == "3:00 PM"
    assert context.weather == "Sunny, 25°C"


def test_periodic_refresh_and_async_weather():
    store = SessionStore()
    session_id = store.create().session_id
    ticks = iter(f"tick-{i}" for i in range(1000))

    async def weather():
        return "Cloudy"

    refresher = AmbientContextRefresher(
        store,
        clock=lambda: next(ticks),
        weather_provider=weather,
        time_interval=0.01,
        weather_interval=0.01,
    )

    async def run():
        await refresher.start()
        await asyncio.sleep(0.05)
        await refresher.stop()

    asyncio.run(run())
    context = store.get(session_id).context
    assert context.current_time != "tick-0"
    assert context.weather == "Cloudy"


def test_weather_failure_keeps_previous_value():
    store = SessionStore()
    session_id = store.create().session_id
    store.update_context(session_id, weather="Sunny, 25°C")

    def broken():
        raise RuntimeError("weather API down")

    refresher = AmbientContextRefresher(store, clock=lambda: "now", weather_provider=broken)

    async def run():
        await refresher.start()
        await refresher.stop()

    asyncio.run(run())
    assert store.get(session_id).context.weather == "Sunny, 25°C"


def test_time_failure_keeps_previous_value_and_loop_alive():
    store = SessionStore()
    session_id = store.create().session_id
    calls = []

    def flaky_clock():
        calls.append(None)
        if len(calls) == 2:
            raise RuntimeError("clock unavailable")
        return f"tick-{len(calls)}"

    refresher = AmbientContextRefresher(
        store,
        clock=flaky_clock,
        weather_provider=lambda: "Sunny, 25°C",
        time_interval=0.01,
        weather_interval=60,
    )

    async def run():
        await refresher.start()
        await asyncio.sleep(0.06)
        alive = not refresher._tasks[0].done()
        await refresher.stop()
        return alive

    assert asyncio.run(run()) is True
    assert len(calls) > 2
    context = store.get(session_id).context
    assert context.current_time == f"tick-{len(calls)}"
    assert context.weather == "Sunny, 25°C"
