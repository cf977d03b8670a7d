"""Multi-job scheduler service for cronloom."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from cronloom.engine.errors import CronloomError, JobConfigError
from cronloom.engine.job import CronJob
from cronloom.models import (
    JobDefinition,
    JobMetrics,
    JobStatus,
    PersistenceOptions,
    SchedulerConfig,
    SchedulerStateDocument,
)
from cronloom.storage import StateStore

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable
    from datetime import datetime

    from cronloom.models import ExecutionRecord, JobSnapshot

logger = logging.getLogger(__name__)


class SchedulerService:
    """Registry of named cron jobs sharing one configuration.

    Jobs are created from JobDefinitions with the service's defaults applied
    (history size, timer strategy, polling interval, failure limit, timezone).
    Control calls take a job name; unknown names are ignored so callers can
    fire and forget.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        *,
        persistence: PersistenceOptions | None = None,
        enable_metrics: bool = True,
        on_error: Callable[[BaseException, str], Any] | None = None,
        auto_start: bool = False,
        logger: logging.Logger | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the scheduler service.

        Args:
            config: Defaults applied to every job.
            persistence: Where state is saved. Auto-save is off unless enabled.
            enable_metrics: Expose history and metrics through the service.
            on_error: Global sink called with ``(error, job_name)`` for jobs
                that have no handler of their own.
            auto_start: Start every job as soon as it is added.
            logger: Logger passed down to jobs.
            loop: Event loop jobs arm their timers on.
        """
        self.config = config or SchedulerConfig()
        self.persistence = persistence or PersistenceOptions()
        self.enable_metrics = enable_metrics
        self.on_error = on_error
        self.auto_start = auto_start
        self._logger = logger or logging.getLogger(__name__)
        self._loop = loop
        self._jobs: dict[str, CronJob] = {}
        self._store = StateStore(self.persistence.file_path)

        if self.persistence.enabled and self.persistence.auto_restore:
            self.restore_state()

    @classmethod
    def create(
        cls,
        config: SchedulerConfig | dict[str, Any] | None = None,
        persistence: PersistenceOptions | dict[str, Any] | None = None,
        **options: Any,
    ) -> SchedulerService:
        """Build a service from plain dictionaries or models.

        Raises:
            JobConfigError: If the configuration does not validate.
        """
        try:
            if isinstance(config, dict):
                config = SchedulerConfig.model_validate(config)
            if isinstance(persistence, dict):
                persistence = PersistenceOptions.model_validate(persistence)
        except ValidationError as e:
            raise JobConfigError(f"Invalid scheduler configuration: {e}") from e
        return cls(config, persistence=persistence, **options)

    @property
    def store(self) -> StateStore:
        return self._store

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, definition: JobDefinition | None = None, **fields: Any) -> CronJob:
        """Create and register a job.

        Args:
            definition: Job definition. Built from ``fields`` when omitted.
            **fields: JobDefinition fields (name, cron, callback, ...).

        Returns:
            The registered job.

        Raises:
            JobConfigError: If the name is taken or the definition is invalid.
            ExpressionError: If the cron expression is malformed.
        """
        if definition is None:
            try:
                definition = JobDefinition(**fields)
            except ValidationError as e:
                raise JobConfigError(
                    f"Invalid job definition: {e}", fields.get("name")
                ) from e

        if definition.name in self._jobs:
            raise JobConfigError(
                f"Cron job with name '{definition.name}' already exists", definition.name
            )

        job = CronJob.from_definition(
            definition,
            max_history=definition.max_history or self.config.max_history_entries,
            on_error=self._wrap_error_handler(definition.name, definition.on_error),
            start=definition.start or self.auto_start,
            **self._job_options(),
        )
        self._jobs[job.name] = job
        self._logger.info(f"Added cron job '{job.name}' ({job.cron})")
        self._auto_save()
        return job

    def remove(self, name: str) -> bool:
        """Destroy a job and forget it.

        Returns:
            True if the job existed.
        """
        job = self._jobs.pop(name, None)
        if job is None:
            return False
        job.destroy()
        self._logger.info(f"Removed cron job '{name}'")
        self._auto_save()
        return True

    def destroy(self, name: str) -> bool:
        """Alias of ``remove``."""
        return self.remove(name)

    def _job_options(self) -> dict[str, Any]:
        return {
            "use_calculated_timeouts": self.config.use_calculated_timeouts,
            "polling_interval": self.config.polling_interval,
            "max_timeout": self.config.max_timeout,
            "max_consecutive_failures": self.config.max_consecutive_failures,
            "timezone": self.config.timezone,
            "logger": self._logger,
            "loop": self._loop,
        }

    def _wrap_error_handler(
        self, name: str, handler: Callable[[BaseException], Any] | None
    ) -> Callable[[BaseException], Any]:
        """Route a job's failures to its own handler, or to the global sink."""

        async def forward(error: BaseException) -> None:
            if handler is not None:
                # Failures here surface through the job's own hook logging
                result = handler(error)
                if inspect.isawaitable(result):
                    await result
                return

            if self.on_error is None:
                return
            try:
                result = self.on_error(error, name)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._logger.exception(f"Global error handler failed for job '{name}'")

        return forward

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self, name: str) -> None:
        if job := self._jobs.get(name):
            job.start()
            self._auto_save()

    def stop(self, name: str) -> None:
        if job := self._jobs.get(name):
            job.stop()
            self._auto_save()

    def pause(self, name: str) -> None:
        if job := self._jobs.get(name):
            job.pause()
            self._auto_save()

    def resume(self, name: str) -> None:
        if job := self._jobs.get(name):
            job.resume()
            self._auto_save()

    def start_all(self) -> None:
        """Start every job, highest priority first."""
        for job in self.get_all_jobs():
            job.start()
        self._auto_save()

    def stop_all(self) -> None:
        for job in self._jobs.values():
            job.stop()
        self._auto_save()

    def pause_all(self) -> None:
        for job in self._jobs.values():
            job.pause()
        self._auto_save()

    def resume_all(self) -> None:
        for job in self._jobs.values():
            job.resume()
        self._auto_save()

    def destroy_all(self) -> None:
        """Destroy and forget every job."""
        jobs = list(self._jobs.values())
        self._jobs.clear()
        for job in jobs:
            job.destroy()
        self._logger.info(f"Destroyed {len(jobs)} cron job(s)")
        self._auto_save()

    def reset_all_metrics(self) -> None:
        for job in self._jobs.values():
            job.reset_metrics()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_job(self, name: str) -> CronJob | None:
        return self._jobs.get(name)

    def get_job_names(self) -> list[str]:
        return list(self._jobs)

    def get_all_jobs(self) -> list[CronJob]:
        """All jobs ordered by descending priority (insertion order on ties)."""
        return sorted(self._jobs.values(), key=lambda job: job.priority, reverse=True)

    def get_status(self, name: str) -> JobStatus:
        job = self._jobs.get(name)
        return job.status if job else JobStatus.STOPPED

    def is_running(self, name: str) -> bool:
        job = self._jobs.get(name)
        return job.is_running() if job else False

    def next_execution(self, name: str) -> datetime | None:
        job = self._jobs.get(name)
        return job.next_execution() if job else None

    def last_execution(self, name: str) -> datetime | None:
        job = self._jobs.get(name)
        return job.last_execution() if job else None

    def remaining(self, name: str) -> float:
        job = self._jobs.get(name)
        return job.remaining() if job else 0.0

    def get_history(self, name: str) -> list[ExecutionRecord]:
        job = self._jobs.get(name)
        if job is None or not self.enable_metrics:
            return []
        return job.get_history()

    def get_metrics(self, name: str) -> JobMetrics:
        job = self._jobs.get(name)
        if job is None or not self.enable_metrics:
            return JobMetrics()
        return job.get_metrics()

    def __contains__(self, name: object) -> bool:
        return name in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> SchedulerStateDocument:
        """Serializable view of every registered job."""
        jobs: list[JobSnapshot] = [
            job.snapshot(include_metrics=self.enable_metrics) for job in self.get_all_jobs()
        ]
        return SchedulerStateDocument(jobs=jobs, config=self.config)

    def save_state(self) -> None:
        """Write the current snapshot to the state file.

        Raises:
            StateError: If the file cannot be written.
        """
        self._store.save(self.snapshot())

    def restore_state(self) -> int:
        """Recreate jobs from the state file.

        Restored jobs get a placeholder callback that only logs a warning.
        Jobs saved as running are started again, jobs saved as paused are
        started and paused. Entries that fail to validate, and names that
        are already registered, are skipped.

        Returns:
            Number of jobs restored.

        Raises:
            StateError: If the state file is malformed.
        """
        document = self._store.load()
        if document is None:
            self._logger.debug(f"No state file at {self._store.path}, nothing to restore")
            return 0

        restored = 0
        for snapshot in document.jobs:
            if snapshot.name in self._jobs:
                self._logger.warning(f"Skipping restored job '{snapshot.name}': name in use")
                continue
            try:
                job = CronJob(
                    snapshot.name,
                    snapshot.cron,
                    _placeholder_callback(snapshot.name, self._logger),
                    priority=snapshot.priority,
                    max_history=self.config.max_history_entries,
                    on_error=self._wrap_error_handler(snapshot.name, None),
                    **self._job_options(),
                )
            except CronloomError as e:
                self._logger.warning(f"Skipping invalid job '{snapshot.name}' in state file: {e}")
                continue

            if snapshot.metrics is not None:
                job.restore_metrics(snapshot.metrics, snapshot.history or [])
            self._jobs[job.name] = job
            restored += 1

            if snapshot.status in (JobStatus.RUNNING, JobStatus.PAUSED):
                try:
                    job.start()
                except CronloomError as e:
                    self._logger.warning(f"Could not restart restored job '{job.name}': {e}")
                    continue
                if snapshot.status == JobStatus.PAUSED:
                    job.pause()

        self._logger.info(f"Restored {restored} cron job(s) from {self._store.path}")
        return restored

    def _auto_save(self) -> None:
        if not self.persistence.enabled:
            return
        try:
            self.save_state()
        except CronloomError:
            self._logger.exception("Failed to save scheduler state")


def _placeholder_callback(name: str, log: logging.Logger) -> Callable[[], None]:
    def callback() -> None:
        log.warning(
            f"Job '{name}' was restored without a callback; add it again to run real work"
        )

    return callback
