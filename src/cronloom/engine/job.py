"""Single-job scheduling state machine."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from cronloom.models import (
    MAX_TIMEOUT_SECONDS,
    CronTime,
    ExecutionRecord,
    JobMetrics,
    JobSnapshot,
    JobStatus,
)

from .errors import (
    ExpressionError,
    JobConfigError,
    NoMatchError,
    PresetBoundsError,
    SchedulerError,
)
from .parser import CronParser
from .strategies import (
    CalculatedTimeoutStrategy,
    PollingStrategy,
    TimerStrategy,
    seconds_until,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from cronloom.models import JobDefinition


class CronJob:
    """A callback bound to a cron schedule.

    The job computes its next occurrence, arms a timer strategy on the
    running asyncio loop and, when the timer fires, runs the callback,
    records the outcome and re-arms. All state is touched from the loop
    thread only.

    Status transitions:
        - stopped/paused/error -> running: ``start()``
        - running -> paused: ``pause()``; paused/error -> running: ``resume()``
        - running/paused/error -> stopped: ``stop()`` or ``destroy()``
        - running -> error: ``max_consecutive_failures`` failures in a row

    Example:
        ```python
        job = CronJob("report", "@at_9:30", send_report, start=True)
        ```
    """

    def __init__(
        self,
        name: str,
        cron: str,
        callback: Callable[[], Any],
        *,
        on_tick: Callable[[], Any] | None = None,
        on_complete: Callable[[], Any] | None = None,
        on_error: Callable[[BaseException], Any] | None = None,
        priority: int = 0,
        max_history: int = 100,
        start: bool = False,
        use_calculated_timeouts: bool = True,
        polling_interval: float = 1.0,
        max_timeout: float = MAX_TIMEOUT_SECONDS,
        max_consecutive_failures: int | None = None,
        timezone: str | tzinfo | None = None,
        logger: logging.Logger | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            name: Unique, non-empty job name.
            cron: Six-field cron expression or preset.
            callback: Job body, sync or async.
            on_tick: Called after each successful execution.
            on_complete: Called once, when the job is destroyed.
            on_error: Called with the exception of each failed execution.
            priority: Ordering hint for schedulers; never preempts a timer.
            max_history: Number of execution records kept, newest first.
            start: Start immediately (requires a running event loop).
            use_calculated_timeouts: Single-shot timers when True, polling otherwise.
            polling_interval: Seconds between checks in polling mode.
            max_timeout: Longest single-shot delay; longer waits are polled.
            max_consecutive_failures: Failures in a row before entering the
                error state. Disabled when None.
            timezone: IANA zone name or tzinfo for the schedule. Local time when None.
            logger: Logger for hook failures and lifecycle messages.
            loop: Event loop to arm timers on. The running loop when None.

        Raises:
            JobConfigError: If the name or an option is invalid.
            ExpressionError: If the cron expression is malformed.
            PresetBoundsError: If a preset parameter is out of bounds.
        """
        if not name or not isinstance(name, str) or not name.strip():
            raise JobConfigError("Cron job name is required and must be a string")
        if not callable(callback):
            raise JobConfigError(f"Callback for job '{name}' must be callable", name)
        if max_history < 1:
            raise JobConfigError(f"max_history must be at least 1, got {max_history}", name)
        if polling_interval <= 0:
            raise JobConfigError(
                f"polling_interval must be positive, got {polling_interval}", name
            )
        if max_consecutive_failures is not None and max_consecutive_failures < 1:
            raise JobConfigError(
                f"max_consecutive_failures must be at least 1, got {max_consecutive_failures}",
                name,
            )

        self.name = name
        self.cron = cron
        self.callback = callback
        self.on_tick = on_tick
        self.on_complete = on_complete
        self.on_error = on_error
        self.priority = priority
        self.max_history = max_history
        self.use_calculated_timeouts = use_calculated_timeouts
        self.polling_interval = polling_interval
        self.max_timeout = max_timeout
        self.max_consecutive_failures = max_consecutive_failures
        try:
            self.timezone = ZoneInfo(timezone) if isinstance(timezone, str) else timezone
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise JobConfigError(f"Unknown timezone '{timezone}' for job '{name}'", name) from e

        try:
            self._parser = CronParser(cron, self.timezone)
        except PresetBoundsError:
            raise
        except ExpressionError as e:
            raise ExpressionError(f"Invalid cron expression: {cron} ({e})", cron) from e

        self._logger = logger or logging.getLogger(__name__)
        self._loop = loop
        self._status = JobStatus.STOPPED
        self._next_run: datetime | None = None
        self._strategy: TimerStrategy | None = None
        self._timeout_strategy: CalculatedTimeoutStrategy | None = None
        self._polling_strategy: PollingStrategy | None = None
        # Bumped on every control transition so stale cycles never re-arm
        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._destroyed = False
        self._history: deque[ExecutionRecord] = deque(maxlen=max_history)
        self._metrics = JobMetrics()

        if start:
            self.start()

    @classmethod
    def from_definition(cls, definition: JobDefinition, **options: Any) -> CronJob:
        """Create a job from a JobDefinition plus scheduler-level options."""
        fields: dict[str, Any] = {
            "on_tick": definition.on_tick,
            "on_complete": definition.on_complete,
            "on_error": definition.on_error,
            "priority": definition.priority,
            "start": definition.start,
        }
        if definition.max_history is not None:
            fields["max_history"] = definition.max_history
        fields.update(options)
        return cls(definition.name, definition.cron, definition.callback, **fields)

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Compute the next occurrence and arm the timer.

        No-op if already running. Also recovers a job from the error state.

        Raises:
            NoMatchError: If the expression never matches.
            SchedulerError: If no event loop is available.
        """
        if self._status == JobStatus.RUNNING:
            return
        self._activate()
        self._logger.debug(f"Job '{self.name}' started, next run {self._next_run}")

    def stop(self) -> None:
        """Disarm the timer and forget the next occurrence."""
        if self._status == JobStatus.STOPPED:
            return
        self._deactivate(JobStatus.STOPPED)
        self._logger.debug(f"Job '{self.name}' stopped")

    def pause(self) -> None:
        """Disarm a running job. ``resume()`` picks a fresh occurrence."""
        if self._status != JobStatus.RUNNING:
            return
        self._deactivate(JobStatus.PAUSED)
        self._logger.debug(f"Job '{self.name}' paused")

    def resume(self) -> None:
        """Re-arm a paused (or errored) job from the current time.

        Occurrences that fell inside the paused window are skipped.

        Raises:
            NoMatchError: If the expression never matches.
            SchedulerError: If no event loop is available.
        """
        if self._status not in (JobStatus.PAUSED, JobStatus.ERROR):
            return
        self._activate()
        self._logger.debug(f"Job '{self.name}' resumed, next run {self._next_run}")

    def destroy(self) -> None:
        """Stop for good and call ``on_complete``. Safe to call repeatedly."""
        self._deactivate(JobStatus.STOPPED)
        if self._destroyed:
            return
        self._destroyed = True
        self._logger.debug(f"Job '{self.name}' destroyed")

        if self.on_complete is None:
            return
        try:
            result = self.on_complete()
            if inspect.iscoroutine(result):
                result.close()
                self._logger.warning(
                    f"on_complete for job '{self.name}' returned a coroutine; "
                    "completion hooks must be synchronous"
                )
        except Exception:
            self._logger.exception(f"on_complete handler failed for job '{self.name}'")

    def _activate(self) -> None:
        loop = self._get_loop()
        next_run = self._parser.get_next(self._now())

        if loop is not self._loop:
            self._timeout_strategy = None
            self._polling_strategy = None
        self._loop = loop
        self._generation += 1
        if self._status == JobStatus.ERROR:
            self._metrics.consecutive_failures = 0
        self._status = JobStatus.RUNNING
        self._next_run = next_run
        self._arm()

    def _deactivate(self, status: JobStatus) -> None:
        self._generation += 1
        self._disarm()
        self._status = status
        self._next_run = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None and not self._loop.is_closed():
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError as e:
            raise SchedulerError(
                f"Job '{self.name}' needs a running event loop to be scheduled", self.name
            ) from e

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _arm(self) -> None:
        """Arm the strategy matching the current delay."""
        assert self._loop is not None and self._next_run is not None

        delay = seconds_until(self._next_run)
        strategy: TimerStrategy
        if self.use_calculated_timeouts and delay <= self.max_timeout:
            if self._timeout_strategy is None:
                self._timeout_strategy = CalculatedTimeoutStrategy(self._loop)
            strategy = self._timeout_strategy
        else:
            if self.use_calculated_timeouts:
                self._logger.debug(
                    f"Job '{self.name}': delay {delay:.0f}s exceeds single-shot limit, "
                    "polling until it is in range"
                )
            if self._polling_strategy is None:
                self._polling_strategy = PollingStrategy(self._loop, self.polling_interval)
            strategy = self._polling_strategy

        if self._strategy is not None and self._strategy is not strategy:
            self._strategy.disarm()
        self._strategy = strategy
        strategy.arm(self._next_run, self._on_fire)

    def _disarm(self) -> None:
        if self._strategy is not None:
            self._strategy.disarm()
            self._strategy = None

    def _on_fire(self, target: datetime) -> None:
        """Timer callback: run the job in a task on the loop."""
        if self._status != JobStatus.RUNNING or self._loop is None:
            return

        serialized = self.use_calculated_timeouts
        if serialized:
            # Nothing stays armed until this cycle has finished executing
            if self._strategy is not None:
                self._strategy.disarm()
        elif not self._advance(target):
            return

        task = self._loop.create_task(self._run_cycle(self._generation, target, serialized))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_cycle(self, generation: int, target: datetime, rearm: bool) -> None:
        await self._execute()
        if not rearm or generation != self._generation or self._status != JobStatus.RUNNING:
            return
        self._advance(target)

    def _advance(self, target: datetime) -> bool:
        """Move to the occurrence after ``target`` and arm for it."""
        # A timer may fire a hair early; never hand back the same occurrence
        reference = max(self._now(), target)
        try:
            self._next_run = self._parser.get_next(reference)
        except NoMatchError:
            self._logger.exception(f"Job '{self.name}' has no further occurrences")
            self._deactivate(JobStatus.ERROR)
            return False
        self._arm()
        return True

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run_now(self) -> ExecutionRecord:
        """Run the callback immediately, outside the schedule.

        The outcome is recorded exactly like a scheduled execution.

        Returns:
            The recorded execution.
        """
        return await self._execute()

    async def _execute(self) -> ExecutionRecord:
        """Run the callback inside a failure boundary and record the outcome."""
        started_at = self._now()
        started = time.perf_counter()
        error: Exception | None = None

        try:
            result = self.callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            error = e

        duration_ms = (time.perf_counter() - started) * 1000
        error_message = None if error is None else (str(error) or type(error).__name__)

        self._metrics.record(duration_ms, error_message)
        record = ExecutionRecord(
            started_at=started_at,
            duration_ms=duration_ms,
            succeeded=error is None,
            error_message=error_message,
        )
        self._history.appendleft(record)

        if error is None:
            await self._call_hook("on_tick", self.on_tick)
        else:
            self._logger.warning(f"Job '{self.name}' failed: {error_message}")
            await self._call_hook("on_error", self.on_error, error)
            self._check_failure_limit()

        return record

    async def _call_hook(
        self, hook_name: str, hook: Callable[..., Any] | None, *args: Any
    ) -> None:
        """Invoke a user hook; its failures are logged, never raised."""
        if hook is None:
            return
        try:
            result = hook(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            self._logger.exception(f"{hook_name} handler failed for job '{self.name}'")

    def _check_failure_limit(self) -> None:
        limit = self.max_consecutive_failures
        if limit is None or self._status != JobStatus.RUNNING:
            return
        if self._metrics.consecutive_failures >= limit:
            self._logger.error(
                f"Job '{self.name}' failed {limit} times in a row, entering error state"
            )
            self._deactivate(JobStatus.ERROR)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def status(self) -> JobStatus:
        return self._status

    @property
    def next_run(self) -> datetime | None:
        """Armed target, None unless running."""
        return self._next_run

    @property
    def cron_time(self) -> CronTime:
        return self._parser.parse()

    @property
    def strategy(self) -> TimerStrategy | None:
        """The strategy currently holding the timer, if any."""
        return self._strategy

    def get_status(self) -> JobStatus:
        return self._status

    def is_running(self) -> bool:
        return self._status == JobStatus.RUNNING

    def next_execution(self) -> datetime:
        """Armed target, or now when the job is idle."""
        return self._next_run or self._now()

    def last_execution(self) -> datetime:
        """Most recent occurrence of the schedule before now."""
        return self._parser.get_previous(self._now())

    def remaining(self) -> float:
        """Seconds until the armed target, 0.0 when idle."""
        if self._next_run is None:
            return 0.0
        return max(0.0, seconds_until(self._next_run))

    def time(self) -> float:
        """Current epoch time in seconds."""
        return time.time()

    def get_history(self) -> list[ExecutionRecord]:
        """Execution records, newest first."""
        return [record.model_copy() for record in self._history]

    def get_metrics(self) -> JobMetrics:
        return self._metrics.model_copy()

    def reset_metrics(self) -> None:
        """Clear history and counters."""
        self._history.clear()
        self._metrics = JobMetrics()

    def restore_metrics(self, metrics: JobMetrics, history: list[ExecutionRecord]) -> None:
        """Replace counters and history, e.g. from a saved snapshot.

        ``history`` is newest first; entries past ``max_history`` are dropped.
        """
        self._metrics = metrics.model_copy()
        self._history.clear()
        self._history.extend(record.model_copy() for record in history[: self.max_history])

    def snapshot(self, include_metrics: bool = True) -> JobSnapshot:
        """Serializable view of this job (callbacks excluded)."""
        return JobSnapshot(
            name=self.name,
            cron=self.cron,
            status=self._status,
            priority=self.priority,
            metrics=self.get_metrics() if include_metrics else None,
            history=self.get_history() if include_metrics else None,
        )

    def _now(self) -> datetime:
        return self._parser.now()

    def __repr__(self) -> str:
        return f"CronJob(name={self.name!r}, cron={self.cron!r}, status={self._status.value!r})"

    # ------------------------------------------------------------------
    # Expression helpers
    # ------------------------------------------------------------------

    @staticmethod
    def parse(cron: str) -> CronTime:
        """Parse an expression without creating a job."""
        return CronParser(cron).parse()

    @staticmethod
    def get_next(cron: str, after: datetime | None = None) -> datetime:
        """Next occurrence of an expression after ``after`` (default: now)."""
        return CronParser(cron).get_next(after)

    @staticmethod
    def get_previous(cron: str, before: datetime | None = None) -> datetime:
        """Previous occurrence of an expression before ``before`` (default: now)."""
        return CronParser(cron).get_previous(before)

    @staticmethod
    def is_valid(cron: str) -> bool:
        """Check whether an expression parses."""
        try:
            CronParser(cron)
        except ExpressionError:
            return False
        return True
