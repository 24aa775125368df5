from __future__ import annotations
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Mapping

from rich.console import Console

RULE_WIDTH = 50


@dataclass
class ManifestSummary:
	output_path: str
	total_files: int
	total_size: int

	@property
	def total_size_human(self) -> str:
		return format_bytes(self.total_size)


def _round2(value: Decimal) -> float:
	# Halves round away from zero, not to even
	return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_bytes(num_bytes: int) -> str:
	if num_bytes < 1024:
		return f"{num_bytes} B"
	if num_bytes < 1024 * 1024:
		return f"{_round2(Decimal(num_bytes) / 1024)} KB"
	return f"{_round2(Decimal(num_bytes) / (1024 * 1024))} MB"


def summarize(manifest: Mapping[str, Any], output_path: Path) -> ManifestSummary:
	total = sum(entry.size for entry in manifest.values())
	return ManifestSummary(output_path=str(output_path), total_files=len(manifest), total_size=int(total))


class ManifestProgress:
	"""No-op hooks called by ``build_manifest`` while it walks the images."""

	def found(self, count: int) -> None:
		pass

	def start(self, index: int, total: int, filename: str) -> None:
		pass

	def done(self, index: int, total: int, filename: str) -> None:
		pass


class ConsoleProgress(ManifestProgress):
	def __init__(self, console: Console) -> None:
		self.console = console

	def found(self, count: int) -> None:
		print_scan_header(self.console, count)

	def start(self, index: int, total: int, filename: str) -> None:
		print_progress(self.console, index, total, filename)

	def done(self, index: int, total: int, filename: str) -> None:
		print_progress_done(self.console)


def _say(console: Console, text: str = "", **kwargs: Any) -> None:
	# Filenames may contain "[...]"; never treat them as rich markup
	console.print(text, markup=False, highlight=False, soft_wrap=True, **kwargs)


def print_banner(console: Console, image_dir: str, output_file: str) -> None:
	_say(console, "Visualizer Manifest Generator")
	_say(console, "=" * RULE_WIDTH)
	_say(console, f"Image directory: {image_dir}")
	_say(console, f"Output file: {output_file}")
	_say(console, "=" * RULE_WIDTH)
	_say(console)


def print_scan_header(console: Console, count: int) -> None:
	_say(console, f"Found {count} PNG files")
	_say(console, "Generating checksums...")


def print_progress(console: Console, index: int, total: int, filename: str) -> None:
	_say(console, f"  [{index}/{total}] Processing {filename}...", end="")


def print_progress_done(console: Console) -> None:
	_say(console, " ✓")


def print_summary(console: Console, summary: ManifestSummary) -> None:
	_say(console)
	_say(console, f"Manifest written to: {summary.output_path}")
	_say(console, f"Total files: {summary.total_files}")
	_say(console, f"Total size: {summary.total_size_human}")


def print_error(console: Console, message: str) -> None:
	_say(console, f"Error: {message}")


def print_done(console: Console, output_file: str) -> None:
	_say(console)
	_say(console, f"Done! Upload both {Path(output_file).name} and the images directory to GitHub.")
