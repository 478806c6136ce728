"""Background refresh of the time and weather strings shown to Niva."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Union

from services.chat.session_store import SessionStore

LOGGER = logging.getLogger(__name__)
TIME_REFRESH_SECONDS = float(os.getenv("NIVA_TIME_REFRESH_SECONDS", "60"))
WEATHER_REFRESH_SECONDS = float(os.getenv("NIVA_WEATHER_REFRESH_SECONDS", "600"))

WeatherProvider = Callable[[], Union[str, Awaitable[str]]]


def current_time_string(now: Optional[datetime] = None) -> str:
	"""Return the local time as e.g. '03:00 PM'."""
	return (now or datetime.now()).strftime("%I:%M %p")


def placeholder_weather() -> str:
	# No weather API is wired in yet.
	return "Sunny, 25°C"


class AmbientContextRefresher:
	"""Periodically push time and weather into every session."""

	def __init__(
		self,
		store: SessionStore,
		*,
		weather_provider: WeatherProvider = placeholder_weather,
		clock: Callable[[], str] = current_time_string,
		time_interval: float = TIME_REFRESH_SECONDS,
		weather_interval: float = WEATHER_REFRESH_SECONDS,
	) -> None:
		self.store = store
		self.weather_provider = weather_provider
		self.clock = clock
		self.time_interval = time_interval
		self.weather_interval = weather_interval
		self._tasks: List[asyncio.Task] = []

	def refresh_time(self) -> str:
		value = self.clock()
		self.store.update_context_all(time=value)
		return value

	async def refresh_weather(self) -> str:
		result = self.weather_provider()
		if inspect.isawaitable(result):
			result = await result
		self.store.update_context_all(weather=result)
		return result

	async def start(self) -> None:
		"""Seed both values immediately, then refresh them on their intervals."""
		self.refresh_time()
		await self._tick_weather()
		self._tasks = [
			asyncio.create_task(self._loop(self.time_interval, self._tick_time)),
			asyncio.create_task(self._loop(self.weather_interval, self._tick_weather)),
		]

	async def stop(self) -> None:
		for task in self._tasks:
			task.cancel()
		await asyncio.gather(*self._tasks, return_exceptions=True)
		self._tasks = []

	async def _loop(self, interval: float, refresh: Callable[[], Awaitable[None]]) -> None:
		while True:
			await asyncio.sleep(interval)
			await refresh()

	async def _tick_time(self) -> None:
		try:
			self.refresh_time()
		except Exception:
			LOGGER.exception("Time refresh failed; keeping the previous value")

	async def _tick_weather(self) -> None:
		try:
			await self.refresh_weather()
		except Exception:
			LOGGER.exception("Weather refresh failed; keeping the previous value")
