"""
User-facing output and progress indicators.

`Output` is the sink the core reports to: plain messages go through the package
logger, progress indicators are rendered with rich.progress. `NullOutput` keeps
the same contract without rendering anything.
"""

from __future__ import annotations

from typing import Optional, Protocol, Union

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from crosswalk_android.log_utils import logger


class ProgressIndicator(Protocol):
    def update(self, value: Union[float, str]) -> None: ...

    def done(self) -> None: ...


class Output(Protocol):
    def info(self, text: str) -> None: ...

    def warning(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    def highlight(self, text: str) -> None: ...

    def create_finite_progress(self, label: str) -> ProgressIndicator: ...

    def create_infinite_progress(self, label: str) -> ProgressIndicator: ...


class FiniteProgress:
    """
    Progress indicator for a task with a known end, driven by fractions in [0, 1].

    Fractions never go backwards; a decreasing update is ignored.
    """

    def __init__(self, label: str, progress: Optional[Progress] = None):
        self.label = label
        self.fraction = 0.0
        self.finished = False
        self._progress = progress
        self._task_id = None
        if self._progress is not None:
            self._progress.start()
            self._task_id = self._progress.add_task(escape(label), total=1.0)

    def update(self, value: Union[float, str]) -> None:
        fraction = min(max(float(value), 0.0), 1.0)
        if fraction < self.fraction:
            logger.debug(
                "Ignoring decreasing progress %.2f < %.2f for %s",
                fraction,
                self.fraction,
                self.label,
            )
            return
        self.fraction = fraction
        if self._progress is not None and self._task_id is not None:
            self._progress.update(self._task_id, completed=fraction)

    def done(self) -> None:
        if self.finished:
            return
        self.finished = True
        if self._progress is not None:
            self._progress.stop()


class InfiniteProgress:
    """Progress indicator for a task of unknown length, labelled with the latest tag."""

    def __init__(self, label: str, progress: Optional[Progress] = None):
        self.label = label
        self.tag: Optional[str] = None
        self.finished = False
        self._progress = progress
        self._task_id = None
        if self._progress is not None:
            self._progress.start()
            self._task_id = self._progress.add_task(escape(label), total=None)

    def update(self, value: Union[float, str]) -> None:
        self.tag = str(value)
        if self._progress is not None and self._task_id is not None:
            self._progress.update(
                self._task_id, description=escape(f"{self.label} [{self.tag}]")
            )

    def done(self) -> None:
        if self.finished:
            return
        self.finished = True
        if self._progress is not None:
            self._progress.stop()


class ConsoleOutput:
    """Output sink that logs messages and renders progress on a rich console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console(stderr=True)

    def info(self, text: str) -> None:
        logger.info(text)

    def warning(self, text: str) -> None:
        logger.warning(text)

    def error(self, text: str) -> None:
        logger.error(text)

    def highlight(self, text: str) -> None:
        self.console.print(escape(text), style="bold")

    def create_finite_progress(self, label: str) -> FiniteProgress:
        progress = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            console=self.console,
            transient=True,
        )
        return FiniteProgress(label, progress)

    def create_infinite_progress(self, label: str) -> InfiniteProgress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            console=self.console,
            transient=True,
        )
        return InfiniteProgress(label, progress)


class NullOutput:
    """Output sink that only logs at debug level; indicators track state without rendering."""

    def info(self, text: str) -> None:
        logger.debug(text)

    def warning(self, text: str) -> None:
        logger.debug(text)

    def error(self, text: str) -> None:
        logger.debug(text)

    def highlight(self, text: str) -> None:
        logger.debug(text)

    def create_finite_progress(self, label: str) -> FiniteProgress:
        return FiniteProgress(label)

    def create_infinite_progress(self, label: str) -> InfiniteProgress:
        return InfiniteProgress(label)
