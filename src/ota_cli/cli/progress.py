"""Progress bar for ``package fetch``.

The reposerver client reports each written chunk as a plain dict (see
:data:`ota_cli.infra.reposerver.ProgressCallback`); :class:`TransferProgress`
turns those events into a single Rich transfer bar on stderr.  Events that
arrive while the bar is not running are dropped.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import Any

from ota_cli.cli.console import get_rich_console
from ota_cli.exceptions import EnvironmentError

_MAX_LABEL = 40


def _label(filename: str) -> str:
    name = PurePath(filename).name or filename
    if len(name) > _MAX_LABEL:
        return name[: _MAX_LABEL - 1] + "…"
    return name


def _make_bar() -> Any:
    try:
        from rich.progress import (
            BarColumn,
            DownloadColumn,
            Progress,
            TaskProgressColumn,
            TextColumn,
            TransferSpeedColumn,
        )
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc

    return Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(bar_width=None),
        TaskProgressColumn(),
        DownloadColumn(binary_units=True),
        TransferSpeedColumn(),
        console=get_rich_console(),
    )


class TransferProgress:
    """Rich transfer bar usable as the reposerver ``progress_callback``.

    Usage::

        with TransferProgress() as progress:
            backends = build_backends(progress_callback=progress)
    """

    def __init__(self) -> None:
        self._bar: Any = _make_bar()
        self._task: int | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def task_id(self) -> int | None:
        return self._task

    def __enter__(self) -> TransferProgress:
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.stop()

    def start(self) -> None:
        if self._running:
            return
        self._bar.start()
        self._running = True

    def stop(self) -> None:
        """Stop rendering; safe to call more than once."""
        if not self._running:
            return
        self._bar.stop()
        self._running = False

    def __call__(self, event: dict[str, Any]) -> None:
        if not self._running:
            return
        status = event.get("status")
        if status == "downloading":
            self._advance(event)
        elif status == "finished":
            self._complete(event)

    def _advance(self, event: dict[str, Any]) -> None:
        done = event.get("downloaded_bytes") or 0
        total = event.get("total_bytes")
        if self._task is None:
            label = _label(str(event.get("filename") or "package"))
            self._task = self._bar.add_task(label, total=total)
        self._bar.update(self._task, completed=done, total=total)

    def _complete(self, event: dict[str, Any]) -> None:
        if self._task is None:
            return
        done = event.get("downloaded_bytes")
        if done is None:
            done = self._bar.tasks[self._task].completed
        # Unknown sizes end with total == completed so the bar fills.
        self._bar.update(self._task, completed=done, total=done)

    def completed(self) -> float:
        """Bytes recorded on the current task, ``0`` before the first event."""
        if self._task is None:
            return 0
        return self._bar.tasks[self._task].completed
