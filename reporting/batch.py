"""
reporting/batch.py

Runs many MAC jobs across worker threads and records one row per job,
writing the rows to a CSV report under DATA_DIR.

Each job gets its own context (contexts are single-owner); the registry is
shared read-only by all workers. Rows are appended under a lock and flushed
to disk every SAVE_INTERVAL records, then written out in full at the end.

Usage:
    from reporting.batch import MacBatchRunner, MacJob
    runner = MacBatchRunner([MacJob("hmac", [("digest", "sha256"), ("key", "k")], b"msg")])
    runner.run()
"""

import logging
import os
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from config import CHUNK_SIZE, DATA_DIR, REPORT_FILENAME, SAVE_INTERVAL, THREAD_COUNT
from core.api import context_create
from core.crypto_utils import bytes_to_hex
from core.errors import MacError
from core.registry import Registry, default_registry

log = logging.getLogger("reporting.batch")

REPORT_COLUMNS = [
    "job_id", "algorithm", "mac_id", "message_len", "chunk_size", "size",
    "tag", "success", "error", "elapsed_ms",
]


@dataclass
class MacJob:
    algorithm: str
    controls: List[Tuple[str, str]]
    message: bytes
    chunk_size: int = CHUNK_SIZE
    expected: Optional[bytes] = field(default=None, repr=False)


def feed_chunks(ctx, message: bytes, chunk_size: int) -> None:
    """Stream ``message`` into a running context, ``chunk_size`` bytes at a time (0 = one update)."""
    if chunk_size <= 0:
        ctx.update(message)
        return
    for start in range(0, len(message), chunk_size):
        ctx.update(message[start:start + chunk_size])


class MacBatchRunner:
    def __init__(self,
                 jobs: Iterable[MacJob],
                 workers: int = THREAD_COUNT,
                 registry: Optional[Registry] = None,
                 out_dir: str = DATA_DIR,
                 report_filename: str = REPORT_FILENAME,
                 save_interval: int = SAVE_INTERVAL):
        self.jobs = list(jobs)
        self.workers = max(1, workers)
        self.registry = default_registry() if registry is None else registry
        self.out_path = os.path.join(out_dir, report_filename)
        self.save_interval = save_interval

        # storage
        self.records: List[Dict[str, Any]] = []
        self._lock = threading.Lock()
        self._flushed = 0

    # -------------------
    # One job
    # -------------------
    def run_job(self, job_id: int, job: MacJob) -> Dict[str, Any]:
        rec = {
            "job_id": job_id,
            "algorithm": job.algorithm,
            "mac_id": None,
            "message_len": len(job.message),
            "chunk_size": job.chunk_size,
            "size": None,
            "tag": None,
            "success": False,
            "error": None,
            "elapsed_ms": None,
        }
        start = time.perf_counter()
        try:
            with context_create(job.algorithm, *job.controls, registry=self.registry) as ctx:
                rec["mac_id"] = ctx.descriptor.mac_id
                ctx.init()
                feed_chunks(ctx, job.message, job.chunk_size)
                tag = ctx.finalize()
            rec["size"] = len(tag)
            rec["tag"] = bytes_to_hex(tag)
            rec["success"] = job.expected is None or tag == job.expected
            if not rec["success"]:
                rec["error"] = "tag mismatch"
        except MacError as exc:
            log.warning("job %d (%s) failed: %s", job_id, job.algorithm, exc)
            rec["error"] = f"{type(exc).__name__}: {exc}"
        rec["elapsed_ms"] = round((time.perf_counter() - start) * 1000.0, 3)
        return rec

    # -------------------
    # Orchestration
    # -------------------
    def _worker(self, pending: "queue.Queue[Tuple[int, MacJob]]"):
        while True:
            try:
                job_id, job = pending.get_nowait()
            except queue.Empty:
                return
            rec = self.run_job(job_id, job)
            with self._lock:
                self.records.append(rec)
                due = len(self.records) - self._flushed >= self.save_interval
            if due:
                self._flush_records_to_csv(partial=True)

    def run(self) -> List[Dict[str, Any]]:
        os.makedirs(os.path.dirname(self.out_path), exist_ok=True)
        if os.path.exists(self.out_path):
            os.remove(self.out_path)

        pending: "queue.Queue[Tuple[int, MacJob]]" = queue.Queue()
        for job_id, job in enumerate(self.jobs):
            pending.put((job_id, job))

        log.info("running %d jobs on %d workers", len(self.jobs), self.workers)
        threads = [threading.Thread(target=self._worker, args=(pending,), daemon=True)
                   for _ in range(self.workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        with self._lock:
            self.records.sort(key=lambda r: r["job_id"])
        self._flush_records_to_csv(partial=False)
        failed = sum(1 for r in self.records if not r["success"])
        log.info("finished %d jobs, %d failed", len(self.records), failed)
        return self.records

    def _flush_records_to_csv(self, partial: bool = True):
        """
        Write collected records to the report. A partial flush appends the rows
        not yet on disk; the final flush overwrites the file with every row.
        """
        with self._lock:
            if partial:
                rows = self.records[self._flushed:]
                self._flushed = len(self.records)
            else:
                rows = list(self.records)
            if not rows:
                return
            df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
            if partial and os.path.exists(self.out_path):
                df.to_csv(self.out_path, mode="a", header=False, index=False)
            else:
                df.to_csv(self.out_path, index=False)
        log.info("wrote %d records to %s (partial=%s)", len(rows), self.out_path, partial)
