"""Background execution of imports off the caller's thread.

The runner owns one worker thread, so imports queue behind each other rather
than writing to the store concurrently. Each submitted file becomes an
ImportJob: a future for the terminal ImportResult, a cancel flag polled by
the pipeline between rows, and a queue of progress events for the caller.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Iterator

from haulpay.core.config import ImportConfig
from haulpay.core.exceptions import ImportJobNotFoundError
from haulpay.core.protocols import IEmployeeDirectory, IFieldMapStore, ITransactionStore
from haulpay.models.field_map import FieldMap
from haulpay.models.imports import ImportProgress, ImportResult, ImportState
from haulpay.services.import_pipeline import ImportPipeline

logger = logging.getLogger(__name__)


class ImportJob:
    """Handle for one submitted import."""

    def __init__(self, path: str | Path, max_events: int = 0) -> None:
        self.job_id = uuid.uuid4().hex
        self.path = Path(path)
        self.future: Future[ImportResult] = Future()
        self._cancel_event = threading.Event()
        self._events: queue.Queue[ImportProgress | None] = queue.Queue(maxsize=max_events)
        self._lock = threading.Lock()
        self._latest = ImportProgress(state=ImportState.IDLE, message="Queued")

    # ---- Caller side ----

    def cancel(self) -> None:
        """Request cooperative cancellation; takes effect at the next row."""
        logger.info("Cancellation requested for import %s", self.job_id)
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def latest_progress(self) -> ImportProgress:
        with self._lock:
            return self._latest

    @property
    def state(self) -> ImportState:
        return self.latest_progress.state

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: float | None = None) -> ImportResult:
        return self.future.result(timeout)

    async def wait(self) -> ImportResult:
        return await asyncio.wrap_future(self.future)

    def iter_progress(self, timeout: float | None = None) -> Iterator[ImportProgress]:
        """Yield progress events until the job reaches a terminal state."""
        while True:
            event = self._events.get(timeout=timeout)
            if event is None:
                return
            yield event

    # ---- Worker side ----

    def publish(self, progress: ImportProgress) -> None:
        with self._lock:
            self._latest = progress
        self._offer(progress)

    def close_events(self) -> None:
        self._offer(None)

    def _offer(self, event: ImportProgress | None) -> None:
        # A slow reader loses the oldest events, never the terminal sentinel.
        while True:
            try:
                self._events.put_nowait(event)
                return
            except queue.Full:
                try:
                    self._events.get_nowait()
                except queue.Empty:
                    continue


class ImportRunner:
    """Serializes imports on a single background worker."""

    def __init__(
        self,
        *,
        store: ITransactionStore,
        directory: IEmployeeDirectory,
        field_map_store: IFieldMapStore | None = None,
        config: ImportConfig | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._field_map_store = field_map_store
        self._config = config or ImportConfig()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fuel-import")
        self._jobs: dict[str, ImportJob] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> ImportRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def submit(self, path: str | Path, field_map: FieldMap | None = None) -> ImportJob:
        """Queue ``path`` for import with a snapshot of ``field_map``."""
        if field_map is None:
            field_map = self._field_map_store.load() if self._field_map_store else FieldMap.load_default()
        snapshot = field_map.model_copy(deep=True)

        job = ImportJob(path, max_events=self._config.progress_buffer)
        with self._lock:
            self._prune()
            self._jobs[job.job_id] = job
        job.future = self._executor.submit(self._run, job, snapshot)
        logger.info("Queued import %s for %s", job.job_id, job.path.name)
        return job

    def get(self, job_id: str) -> ImportJob:
        with self._lock:
            job = self._jobs.get(job_id)
        if job is None:
            raise ImportJobNotFoundError(job_id)
        return job

    def jobs(self) -> list[ImportJob]:
        with self._lock:
            return list(self._jobs.values())

    def shutdown(self, wait: bool = True) -> None:
        for job in self.jobs():
            if not job.done():
                job.cancel()
        self._executor.shutdown(wait=wait)

    def _prune(self) -> None:
        """Forget the oldest finished jobs beyond the configured history."""
        finished = [job_id for job_id, job in self._jobs.items() if job.done()]
        excess = len(finished) - self._config.job_history
        for job_id in finished[:max(excess, 0)]:
            del self._jobs[job_id]

    def _run(self, job: ImportJob, field_map: FieldMap) -> ImportResult:
        try:
            if job.cancelled:
                result = ImportResult(state=ImportState.CANCELLED)
                job.publish(ImportProgress(state=ImportState.CANCELLED, message="Import cancelled"))
                return result
            pipeline = ImportPipeline(
                store=self._store,
                directory=self._directory,
                field_map=field_map,
                config=self._config,
                progress=job.publish,
                is_cancelled=lambda: job.cancelled,
            )
            return pipeline.start(job.path)
        finally:
            job.close_events()

