"""Background import worker.

Each submitted job runs on a fixed-size thread pool. Submissions beyond the
pool size wait in the executor's queue and stay ``pending`` until a worker
thread picks them up. Within a job, items are imported in input order; a failed
item is recorded and counted as processed, and the remaining items are still
attempted. Cancellation is checked before each item.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, ContextManager, Optional, Sequence, TypeVar

from ...base import BaseObjectStore, BaseRelationalClient
from ..exceptions import FileServiceError, JobStateError
from ..import_progress import ImportJob, ImportJobRegistry, ImportStatus
from ..local_storage import LocalFileStore
from .postgres_browser import PostgresBrowser, split_table_name
from .table_export import serialize_table

logger = logging.getLogger(__name__)

SourceT = TypeVar("SourceT")

# Opens the data-source connection for one job; released when the job ends.
SourceOpener = Callable[[], ContextManager[SourceT]]
# Imports one item through the open connection, returning the stored name.
ItemTransfer = Callable[[SourceT, str], str]


def make_s3_transfer(bucket: str, local_store: LocalFileStore) -> ItemTransfer:
    """Download an object and store it locally under its key."""
    def transfer(store: BaseObjectStore, key: str) -> str:
        data = store.get_object(bucket, key)
        return local_store.store(key, data)
    return transfer


def make_table_transfer(
    local_store: LocalFileStore,
    default_schema: Optional[str],
    row_limit: int,
) -> ItemTransfer:
    """Export up to ``row_limit`` rows of a table to "<schema>.<table>.csv"."""
    def transfer(client: BaseRelationalClient, item: str) -> str:
        schema, table = split_table_name(item, default_schema)
        data = PostgresBrowser(client).fetch_table(schema, table, row_limit)
        content = serialize_table(data.columns, data.rows)
        return local_store.store(f"{schema}.{table}.csv", content.encode("utf-8"))
    return transfer


def summarize(processed: int, total: int, failed_items: Sequence[str]) -> str:
    if not failed_items:
        return f"Import completed: {processed} of {total} items processed"
    return (
        f"Import completed with errors: {processed} of {total} items processed, "
        f"{len(failed_items)} failed. Failed items: {'; '.join(failed_items)}"
    )


class ImportWorker:
    """Runs import jobs in the background and reports progress to the registry."""

    def __init__(self, registry: ImportJobRegistry, max_workers: int = 4):
        self.registry = registry
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="import-worker")

    def submit(
        self,
        job_id: str,
        items: Sequence[str],
        open_source: SourceOpener,
        transfer: ItemTransfer,
    ) -> Future:
        """
        Queue a job and return immediately

        Raises:
            FileServiceError: If the pool no longer accepts work; the job is
                removed from the registry so it never lingers as pending
        """
        try:
            future = self._executor.submit(self._run_safely, job_id, list(items), open_source, transfer)
        except RuntimeError as e:
            self.registry.discard(job_id)
            logger.error(f"Could not queue import job {job_id[:8]}: {str(e)}")
            raise FileServiceError("Import worker is not accepting jobs", code="WORKER_UNAVAILABLE", status_code=503) from e
        logger.info(f"Queued import job {job_id[:8]} with {len(items)} item(s)")
        return future

    def _run_safely(self, job_id: str, items: list[str], open_source: SourceOpener, transfer: ItemTransfer):
        try:
            return self.run_job(job_id, items, open_source, transfer)
        except Exception as e:
            logger.error(f"Import job {job_id[:8]} crashed: {str(e)}", exc_info=True)
            return None

    def run_job(
        self,
        job_id: str,
        items: Sequence[str],
        open_source: SourceOpener,
        transfer: ItemTransfer,
    ) -> Optional[ImportJob]:
        """
        Run one job to completion on the calling thread

        Args:
            job_id: ID of a job created in the registry
            items: Item identifiers, imported in this order
            open_source: Opens the data-source connection for the job
            transfer: Imports one item through the open connection

        Returns:
            The job's terminal snapshot, or None if the job is unknown
        """
        job = self.registry.get(job_id)
        if job is None:
            logger.warning(f"Import job {job_id} not found in registry")
            return None
        if job.status.is_terminal:
            logger.info(f"Import job {job_id[:8]} already {job.status.value}, skipping")
            return job

        total = len(items)
        failed_items: list[str] = []
        attempted = 0

        try:
            self.registry.start(job_id)
        except JobStateError:
            # Cancelled between the snapshot above and start.
            job = self.registry.get(job_id)
            logger.info(f"Import job {job_id[:8]} no longer pending ({job.status.value}), skipping")
            return job

        try:
            with open_source() as source:
                for index, item in enumerate(items, 1):
                    if self.registry.is_cancel_requested(job_id):
                        return self.registry.finish(
                            job_id,
                            ImportStatus.CANCELLED,
                            f"Import cancelled: {attempted} of {total} items processed, {len(failed_items)} failed",
                        )

                    self.registry.set_message(job_id, f"Importing {item} ({index}/{total})...")
                    attempted += 1
                    try:
                        stored = transfer(source, item)
                    except Exception as e:
                        logger.error(f"Import job {job_id[:8]}: failed to import {item}: {str(e)}")
                        failure = f"{item} (Error: {e})"
                        failed_items.append(failure)
                        self.registry.advance(job_id, failed_item=failure)
                    else:
                        logger.info(f"Import job {job_id[:8]}: imported {item} -> {stored}")
                        self.registry.advance(job_id)
        except Exception as e:
            # Connection could not be opened or released, or the loop itself broke.
            current = self.registry.get(job_id)
            if current.status.is_terminal:
                logger.warning(f"Import job {job_id[:8]} already {current.status.value}, error after finish: {str(e)}")
                return current
            logger.error(f"Import job {job_id[:8]} failed: {str(e)}", exc_info=True)
            for item in items[attempted:]:
                failure = f"{item} (Error: {e})"
                failed_items.append(failure)
                self.registry.advance(job_id, failed_item=failure)
            if not failed_items:
                failed_items.append(f"(Error: {e})")

        status = ImportStatus.ERROR if failed_items else ImportStatus.DONE
        return self.registry.finish(job_id, status, summarize(total, total, failed_items))

    def shutdown(self, wait: bool = True) -> None:
        logger.info("Shutting down import worker pool")
        self._executor.shutdown(wait=wait, cancel_futures=not wait)
