"""
Batch job scheduler.

Applies one action to many images with a bounded number of concurrent model
calls. Workers pull from a shared queue, so a worker that finishes early
picks up the next job right away.
"""

import asyncio
import io
import uuid
import zipfile
from collections import deque
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, Field

from ..config import settings
from ..editing.actions import BatchAction, apply_action
from ..errors import OperationInProgressError
from ..models.base import ImageModel
from ..raster.base import Artifact


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    DONE = "done"
    ERROR = "error"


class BatchJob(BaseModel):
    """One image in a batch and the outcome of processing it."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    source: Artifact
    result: Artifact | None = None
    status: JobStatus = JobStatus.PENDING
    error_message: str | None = None


JobCallback = Callable[[BatchJob], None]


class BatchScheduler:
    """Processes batch jobs with a pull-based worker pool."""

    def __init__(self, model: ImageModel, concurrency: int | None = None):
        self.model = model
        self.concurrency = settings.batch_concurrency if concurrency is None else concurrency
        if self.concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {self.concurrency}")
        self.jobs: list[BatchJob] = []
        self._running = False

    def add(self, artifacts: list[Artifact]) -> list[BatchJob]:
        """Create a pending job for every artifact."""
        added = [BatchJob(source=artifact) for artifact in artifacts]
        self.jobs.extend(added)
        logger.debug("Added {} jobs to batch ({} total)", len(added), len(self.jobs))
        return added

    @property
    def total_count(self) -> int:
        return len(self.jobs)

    @property
    def done_count(self) -> int:
        return sum(1 for job in self.jobs if job.status is JobStatus.DONE)

    @property
    def error_count(self) -> int:
        return sum(1 for job in self.jobs if job.status is JobStatus.ERROR)

    @property
    def all_finished(self) -> bool:
        """True once every job is done; gates the archive download."""
        return self.total_count > 0 and self.done_count == self.total_count

    @property
    def is_running(self) -> bool:
        return self._running

    async def process(self, action: BatchAction, on_update: JobCallback | None = None) -> int:
        """
        Run an action over every pending or failed job.

        Jobs already done are left untouched. A failing job records its
        error and does not affect the others.

        Args:
            action: Batch-eligible edit action
            on_update: Called with a job each time its status changes

        Returns:
            Number of jobs that were queued

        Raises:
            OperationInProgressError: If a run is already in progress
        """
        if self._running:
            raise OperationInProgressError("Batch processing is already running")

        queue = deque(
            job for job in self.jobs if job.status in (JobStatus.PENDING, JobStatus.ERROR)
        )
        queued = len(queue)
        if not queued:
            logger.info("No pending jobs to process")
            return 0

        def notify(job: BatchJob) -> None:
            if on_update is not None:
                on_update(job)

        async def worker(worker_id: int) -> None:
            while queue:
                job = queue.popleft()
                job.status = JobStatus.PROCESSING
                job.error_message = None
                notify(job)
                try:
                    result = await apply_action(self.model, job.source, action)
                except Exception as e:
                    job.status = JobStatus.ERROR
                    job.error_message = str(e)
                    logger.warning("Batch job {} failed: {}", job.source.filename, e)
                else:
                    job.result = result.model_copy(
                        update={"filename": f"edited-{job.source.filename}"}
                    )
                    job.status = JobStatus.DONE
                    logger.debug("Worker {} finished {}", worker_id, job.source.filename)
                notify(job)

        workers = min(self.concurrency, queued)
        logger.info(
            "Processing {} jobs with {} workers ({})", queued, workers, action.describe()
        )
        self._running = True
        try:
            await asyncio.gather(*(worker(index) for index in range(workers)))
        finally:
            self._running = False

        logger.info(
            "Batch complete: {} done, {} failed of {}",
            self.done_count,
            self.error_count,
            self.total_count,
        )
        return queued

    def export_zip(self) -> bytes:
        """Package every finished result into a zip archive, keeping filenames."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for job in self.jobs:
                if job.status is JobStatus.DONE and job.result is not None:
                    archive.writestr(job.result.filename, job.result.data)
        return buffer.getvalue()

    def write_zip(self, path: Path | str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.export_zip())
        logger.info("Wrote {} results to {}", self.done_count, path)
        return path

    def clear(self) -> None:
        """Drop every job.

        Raises:
            OperationInProgressError: If a run is in progress
        """
        if self._running:
            raise OperationInProgressError("Cannot clear the batch while it is running")
        self.jobs = []
