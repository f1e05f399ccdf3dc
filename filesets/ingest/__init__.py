"""Filesets ingest collaborators.

- IngestProgress: progress reporting for data source ingest modules
"""

from .progress import IngestProgress, ProgressBar

__all__ = ["IngestProgress", "ProgressBar"]
