"""Batch MAC runs written out as CSV reports."""

from reporting.batch import MacBatchRunner, MacJob

__all__ = ["MacBatchRunner", "MacJob"]
