from __future__ import annotations
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from vizmanifest.audit import AuditLogger, NullAuditLogger
from vizmanifest.config import ManifestConfig, load_config
from vizmanifest.manifest import ManifestError, generate_manifest
from vizmanifest.reporting import ConsoleProgress, print_banner, print_done, print_error, print_summary

console = Console()


def _audit_logger(cfg: ManifestConfig):
	if not cfg.audit_enabled:
		return NullAuditLogger()
	return AuditLogger(cfg.resolved_audit_dir())


@click.command("generate-manifest")
@click.argument("image_directory", required=False)
@click.argument("output_file", required=False)
def cli(image_directory: Optional[str], output_file: Optional[str]) -> None:
	"""Write a YAML manifest of SHA-256 checksums for the PNG images in IMAGE_DIRECTORY.

	IMAGE_DIRECTORY defaults to ./images and OUTPUT_FILE to manifest.yaml,
	unless vizmanifest.yaml in the working directory says otherwise.
	"""
	try:
		cfg = load_config()
	except ValueError as e:
		raise click.ClickException(str(e))
	image_dir = image_directory if image_directory is not None else cfg.image_dir
	out_file = output_file if output_file is not None else cfg.output_file
	audit_logger = _audit_logger(cfg)

	print_banner(console, image_dir, out_file)
	audit_logger.log_action("manifest_start", {"image_dir": image_dir, "output_file": out_file})
	try:
		summary = generate_manifest(image_dir, Path(out_file), progress=ConsoleProgress(console))
	except ManifestError as e:
		print_error(console, str(e))
		audit_logger.log_action("manifest_failed", {"error": type(e).__name__, "message": str(e)})
		sys.exit(1)

	print_summary(console, summary)
	audit_logger.log_action("manifest_written", {
		"path": summary.output_path,
		"files": summary.total_files,
		"total_size": summary.total_size,
	})
	print_done(console, out_file)


def main() -> None:
	cli()


if __name__ == "__main__":
	main()
