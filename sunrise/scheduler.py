"""Alarm Scheduler - Turns a resolved sunrise into an armed alarm.

This module coordinates the location registry, the sunrise resolver and
the external dispatcher. It is the only owner of the AlarmState.

Concurrency model:
- Sunrise resolution runs on a single worker thread, so at most one
  network round-trip is in flight. A setup or refresh requested while one
  is pending is rejected with Busy.
- Every state transition happens under one lock. The lock is released
  while the network call runs and taken again to apply the result.
- Each scheduling attempt gets a generation number. A resolution whose
  generation is no longer current (cancelled or superseded) is discarded.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sunrise.core.alarm import (
    DISABLED_STATE,
    AlarmState,
    AlarmStatus,
    alarm_state_from_dict,
    alarm_state_to_dict,
    compute_fire_instant,
    message_variant_for,
)
from sunrise.core.errors import (
    Busy,
    DispatchError,
    NoLocationSelected,
    SunriseAlarmError,
)
from sunrise.core.location import SavedLocation
from sunrise.registry import LocationRegistry
from sunrise.resolver import SunriseResolver


logger = logging.getLogger(__name__)


ALARM_STATE_KEY = "AlarmState"

# Label used by the diagnostic alarm when no location is selected
TEST_ALARM_LABEL = "Test Alarm"


@dataclass
class AlarmResult:
    """Outcome of a scheduler operation.

    Attributes:
        success: Whether the operation did what was asked
        state: Alarm state after the operation
        error: Most specific error if it failed
        sunrise: Sunrise instant used, if one was resolved or cached
        discarded: True when a resolution finished after being
            cancelled or superseded and its result was dropped
    """
    success: bool
    state: AlarmState
    error: SunriseAlarmError | None = None
    sunrise: datetime | None = None
    discarded: bool = False

    @property
    def message(self) -> str | None:
        """Displayable error message."""
        return str(self.error) if self.error is not None else None


def _done(result: AlarmResult) -> "Future[AlarmResult]":
    future: Future[AlarmResult] = Future()
    future.set_result(result)
    return future


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AlarmScheduler:
    """State machine for the single sunrise alarm.

    Disabled -> Enabling -> Enabled, back to Disabled on cancel or on a
    failed setup. All public operations return a Future[AlarmResult];
    errors are carried in the result, never raised from the future.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        resolver: SunriseResolver,
        dispatcher: Any,
        store: Any,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize scheduler and restore the persisted alarm.

        Args:
            registry: Source of the selected location and timing preference
            resolver: Sunrise resolver
            dispatcher: External alarm hand-off with schedule_daily() and
                cancel_all()
            store: Key-value store for the alarm state
            clock: Returns the current aware datetime
        """
        self.registry = registry
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.store = store
        self.clock = clock

        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="sunrise-resolve",
        )
        self._generation = 0
        self._pending: Future | None = None
        self._sunrise: datetime | None = None
        # Location (id, latitude, longitude) the cached sunrise belongs to
        self._sunrise_for: tuple[str, float, float] | None = None
        self._last_error: SunriseAlarmError | None = None
        self._state = self._load_state()

    def _load_state(self) -> AlarmState:
        state = alarm_state_from_dict(self.store.get(ALARM_STATE_KEY))
        if state.enabled and state.fire_instant is not None:
            state = AlarmState(
                status=state.status,
                fire_instant=state.fire_instant.astimezone(self.resolver.tz),
                location_label=state.location_label,
            )
            logger.info(
                "Restored alarm for %s at %s",
                state.location_label,
                state.fire_instant.isoformat(),
            )
        return state

    # ----- accessors -----

    def state(self) -> AlarmState:
        with self._lock:
            return self._state

    def sunrise(self) -> datetime | None:
        """Most recently resolved upcoming sunrise, for display."""
        with self._lock:
            return self._sunrise

    def last_error(self) -> SunriseAlarmError | None:
        with self._lock:
            return self._last_error

    @property
    def busy(self) -> bool:
        """True while a sunrise resolution is in flight."""
        with self._lock:
            return self._pending is not None

    def close(self, wait: bool = True) -> None:
        """Stop the worker thread.

        Args:
            wait: Block until an in-flight resolution finishes. With
                False, queued work is cancelled and a running resolution
                is left to finish on its own.
        """
        self._executor.shutdown(wait=wait, cancel_futures=not wait)

    # ----- internal helpers (caller holds the lock) -----

    def _set_state(self, state: AlarmState) -> None:
        self._state = state
        if state.status is AlarmStatus.ENABLING:
            return
        if not self.store.set(ALARM_STATE_KEY, alarm_state_to_dict(state)):
            logger.error("Failed to persist alarm state")

    def _fail(
        self,
        error: SunriseAlarmError,
        sunrise: datetime | None = None,
    ) -> AlarmResult:
        self._last_error = error
        return AlarmResult(
            success=False,
            state=self._state,
            error=error,
            sunrise=sunrise,
        )

    def _dispatch(self, fire_instant: datetime, label: str, timing: Any) -> None:
        response = self.dispatcher.schedule_daily(
            fire_instant,
            message_variant_for(timing),
            label,
        )
        if not response.success:
            raise DispatchError(
                f"Failed to schedule alarm: {response.error}"
                if response.error
                else "Failed to schedule alarm"
            )

    def _arm(
        self,
        sunrise: datetime,
        label: str,
        on_failure: AlarmState,
    ) -> AlarmResult:
        """Compute the fire instant and hand it off.

        The timing preference is read here, at computation time.
        """
        timing = self.registry.alarm_timing()
        fire_instant = compute_fire_instant(sunrise, timing)

        try:
            self._dispatch(fire_instant, label, timing)
        except DispatchError as e:
            logger.error("Alarm hand-off failed: %s", e)
            self._set_state(on_failure)
            return self._fail(e, sunrise)

        self._set_state(AlarmState(
            status=AlarmStatus.ENABLED,
            fire_instant=fire_instant,
            location_label=label,
        ))
        self._last_error = None

        logger.info(
            "Alarm armed for %s at %s (%s)",
            label,
            fire_instant.isoformat(),
            timing.value,
        )
        return AlarmResult(success=True, state=self._state, sunrise=sunrise)

    def _cache_sunrise(self, location: SavedLocation, sunrise: datetime) -> None:
        self._sunrise = sunrise
        self._sunrise_for = (location.id, location.latitude, location.longitude)

    def _cached_sunrise(self, location: SavedLocation) -> datetime | None:
        """Cached sunrise if it is upcoming and was resolved for location."""
        if self._sunrise is None or self._sunrise <= self.clock():
            return None
        if self._sunrise_for != (location.id, location.latitude, location.longitude):
            return None
        return self._sunrise

    def _discard(self, generation: int, sunrise: datetime | None) -> AlarmResult:
        logger.info(
            "Discarding stale sunrise result (generation %d, current %d)",
            generation,
            self._generation,
        )
        return AlarmResult(
            success=False,
            state=self._state,
            sunrise=sunrise,
            discarded=True,
        )

    # ----- worker -----

    def _resolve_then(
        self,
        generation: int,
        location: SavedLocation,
        apply: Callable[..., AlarmResult],
    ) -> AlarmResult:
        """Resolve tomorrow's sunrise off-lock, then apply it under the lock."""
        sunrise = None
        error = None
        try:
            sunrise = self.resolver.resolve_tomorrow(
                location.latitude,
                location.longitude,
            )
        except SunriseAlarmError as e:
            error = e
        except Exception as e:
            logger.exception("Unexpected error resolving sunrise")
            error = SunriseAlarmError(f"Unexpected error resolving sunrise: {e}")

        with self._lock:
            try:
                if generation != self._generation:
                    return self._discard(generation, sunrise)
                return apply(location, sunrise, error)
            finally:
                self._pending = None

    def _finish_setup(
        self,
        location: SavedLocation,
        sunrise: datetime | None,
        error: SunriseAlarmError | None,
    ) -> AlarmResult:
        if error is not None:
            logger.error("Failed to fetch sunrise time: %s", error)
            self._set_state(DISABLED_STATE)
            return self._fail(error)

        self._cache_sunrise(location, sunrise)
        return self._arm(sunrise, location.name, on_failure=DISABLED_STATE)

    def _finish_refresh(
        self,
        location: SavedLocation,
        sunrise: datetime | None,
        error: SunriseAlarmError | None,
    ) -> AlarmResult:
        if error is not None:
            # An armed alarm stays armed on a failed refresh
            logger.warning("Refresh failed, keeping current alarm: %s", error)
            return self._fail(error)

        self._cache_sunrise(location, sunrise)

        if not self._state.enabled:
            self._last_error = None
            return AlarmResult(success=True, state=self._state, sunrise=sunrise)

        return self._arm(sunrise, location.name, on_failure=self._state)

    # ----- public operations -----

    def setup_alarm(self) -> "Future[AlarmResult]":
        """Arm the alarm for the selected location.

        Uses the cached upcoming sunrise when there is one, otherwise
        resolves tomorrow's sunrise first. On an alarm that is already
        enabled this re-arms with refresh semantics, so a failure keeps
        the existing alarm.
        """
        with self._lock:
            if self._pending is not None:
                return _done(self._fail(Busy()))

            location = self.registry.selected()
            if location is None:
                logger.warning("Cannot set up alarm: no location selected")
                return _done(self._fail(NoLocationSelected()))

            self._generation += 1
            generation = self._generation

            if self._state.enabled:
                finish = self._finish_refresh
            else:
                finish = self._finish_setup
                self._set_state(AlarmState(
                    status=AlarmStatus.ENABLING,
                    location_label=location.name,
                ))

            sunrise = self._cached_sunrise(location)
            if sunrise is not None:
                return _done(finish(location, sunrise, None))

            logger.info("Setting up alarm for %s", location.name)
            future = self._executor.submit(
                self._resolve_then, generation, location, finish,
            )
            self._pending = future
            return future

    def refresh(self) -> "Future[AlarmResult]":
        """Re-resolve tomorrow's sunrise and re-arm an enabled alarm.

        This is the entry point for the external periodic trigger. A
        disabled alarm only gets its displayed sunrise updated. A failed
        refresh leaves an enabled alarm untouched.
        """
        with self._lock:
            if self._pending is not None:
                return _done(self._fail(Busy()))

            location = self.registry.selected()
            if location is None:
                logger.warning("Cannot refresh: no location selected")
                return _done(self._fail(NoLocationSelected()))

            self._generation += 1
            logger.info("Refreshing sunrise for %s", location.name)
            future = self._executor.submit(
                self._resolve_then, self._generation, location, self._finish_refresh,
            )
            self._pending = future
            return future

    def cancel_alarm(self) -> "Future[AlarmResult]":
        """Disable the alarm and cancel it with the dispatcher.

        Idempotent, and safe while a resolution is in flight: that
        resolution's result is discarded when it arrives.
        """
        with self._lock:
            self._generation += 1
            self._set_state(DISABLED_STATE)
            self._last_error = None

            response = self.dispatcher.cancel_all()
            if response is not None and not response.success:
                # Best effort: the alarm is disabled here regardless
                logger.warning("Dispatcher cancel failed: %s", response.error)

            logger.info("Alarm cancelled")
            return _done(AlarmResult(success=True, state=self._state))

    def schedule_test_alarm(self, delay_seconds: int = 10) -> "Future[AlarmResult]":
        """Arm a one-off alarm delay_seconds from now.

        Bypasses sunrise resolution to check the dispatch path on its own.
        It replaces any sunrise alarm, including one still resolving, and
        is cancelled the same way.
        """
        with self._lock:
            self._generation += 1

            location = self.registry.selected()
            label = location.name if location is not None else TEST_ALARM_LABEL
            timing = self.registry.alarm_timing()
            fire_instant = (
                self.clock() + timedelta(seconds=delay_seconds)
            ).astimezone(self.resolver.tz)

            try:
                self._dispatch(fire_instant, label, timing)
            except DispatchError as e:
                logger.error("Test alarm hand-off failed: %s", e)
                self._set_state(DISABLED_STATE)
                return _done(self._fail(e))

            self._set_state(AlarmState(
                status=AlarmStatus.ENABLED,
                fire_instant=fire_instant,
                location_label=label,
            ))
            self._last_error = None

            logger.info("Test alarm armed for %s", fire_instant.isoformat())
            return _done(AlarmResult(success=True, state=self._state))
