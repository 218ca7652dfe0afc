"""Batch processing of many images with one action."""

from .scheduler import BatchJob, BatchScheduler, JobStatus

__all__ = ["BatchJob", "BatchScheduler", "JobStatus"]
