"""CLI console and logging helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``-V``) remain functional
even when Rich is not installed.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from ota_cli.exceptions import EnvironmentError


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(*, stderr: bool = True) -> Any:
	"""Create a Rich console instance, targeting stderr by default."""
	console_class = _load_rich_console_class()
	return console_class(stderr=stderr)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(*objects, file=sys.stderr)
			return
		rich_console.print(*objects)


console = _ConsoleProxy()


def escape_markup(text: str) -> str:
	"""Escape Rich markup in *text*; identity when Rich is missing."""
	try:
		from rich.markup import escape
	except ModuleNotFoundError:
		return text
	return escape(text)


def print_result(result: object) -> None:
	"""Write a backend result to stdout as JSON (strings verbatim)."""
	if result is None:
		return
	if isinstance(result, str):
		sys.stdout.write(result + "\n")
		return
	text = json.dumps(result, indent=2, default=str)
	try:
		out = get_rich_console(stderr=False)
	except EnvironmentError:
		sys.stdout.write(text + "\n")
		return
	out.print_json(text)


def configure_logging(verbosity: int = 0) -> None:
	"""Route library logging to stderr.

	``0`` shows warnings, ``1`` (``-v``) info, ``2`` or more (``-vv``)
	debug.  Uses ``rich.logging.RichHandler`` when Rich is installed.
	"""
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity >= 2:
		level = logging.DEBUG

	handler: logging.Handler
	try:
		from rich.logging import RichHandler

		handler = RichHandler(console=get_rich_console(), show_path=False)
		handler.setFormatter(logging.Formatter("%(message)s"))
	except (ModuleNotFoundError, EnvironmentError):
		handler = logging.StreamHandler(sys.stderr)
		handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

	root = logging.getLogger("ota_cli")
	for existing in list(root.handlers):
		root.removeHandler(existing)
	root.addHandler(handler)
	root.setLevel(level)
