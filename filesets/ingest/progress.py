#!/usr/bin/env python3
"""Progress reporting for data source ingest.

IngestProgress wraps the host's progress bar so an ingest module can report
how far it got. Reporting is informational only: a failing progress bar is
logged and otherwise ignored, so it never interrupts classification.

Example:
    >>> progress = IngestProgress(job)
    >>> progress.switch_to_determinate(len(entries))
    >>> for done, entry in enumerate(entries, 1):
    ...     progress.advance(done, message=entry.name)
"""

from typing import Optional, Protocol, Union

from filesets.core.logging import Logger, get_logger


class ProgressBar(Protocol):
    """What the host's ingest job exposes for its progress bar."""

    def switch_to_determinate(self, work_units: int) -> None:
        ...

    def switch_to_indeterminate(self) -> None:
        ...

    def advance(self, message: str, work_units: Optional[int] = None) -> None:
        ...


class IngestProgress:
    """Progress reporter handed to data source ingest modules."""

    def __init__(self, bar: ProgressBar, logger: Optional[Logger] = None):
        """Initialize reporter.

        Args:
            bar: Host progress bar
            logger: Optional logger
        """
        self._bar = bar
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    def switch_to_determinate(self, work_units: int) -> None:
        """Switch to determinate mode once the total work is known.

        Args:
            work_units: Total number of work units for the data source
        """
        self._call("switch_to_determinate", work_units)

    def switch_to_indeterminate(self) -> None:
        """Switch to indeterminate mode when the total work is unknown."""
        self._call("switch_to_indeterminate")

    def advance(
        self, work_units: Union[int, str, None] = None, message: Optional[str] = None
    ) -> None:
        """Report progress.

        ``advance(10)``, ``advance("Scanning")`` and ``advance(10, message="Scanning")``
        are all accepted.

        Args:
            work_units: Work units done so far, if in determinate mode, or the
                        message when given as a string
            message: Sub-title to display
        """
        if isinstance(work_units, str):
            if message is not None:
                raise TypeError("advance() got two messages")
            work_units, message = None, work_units

        if work_units is None:
            self._call("advance", message or "")
        else:
            self._call("advance", message or "", work_units)

    def _call(self, method: str, *args: object) -> None:
        try:
            getattr(self._bar, method)(*args)
        except Exception as e:
            self.logger.debug("Progress update failed", method=method, error=str(e))
