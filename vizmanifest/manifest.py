from __future__ import annotations
import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .reporting import ManifestProgress, ManifestSummary, summarize

IMAGE_PATTERN = "*.png"
ENTRY_FIELDS = ("checksum", "size", "description")

_ROOM_UID_RE = re.compile(r"^u(\d+)\.png$", re.ASCII)


class ManifestError(Exception):
	pass


class DirectoryNotFound(ManifestError):
	def __init__(self, image_dir: Union[str, Path]) -> None:
		super().__init__(f"Directory '{image_dir}' does not exist")
		self.image_dir = image_dir


class NoMatchingFiles(ManifestError):
	def __init__(self, image_dir: Union[str, Path]) -> None:
		super().__init__(f"No PNG files found in '{image_dir}'")
		self.image_dir = image_dir


@dataclass(frozen=True)
class ManifestEntry:
	checksum: str
	size: int
	description: str

	def as_dict(self) -> Dict[str, Any]:
		return {"checksum": self.checksum, "size": self.size, "description": self.description}


def list_images(image_dir: Union[str, Path]) -> List[Path]:
	# Path("") would silently mean the working directory
	if isinstance(image_dir, str) and not image_dir:
		raise DirectoryNotFound(image_dir)
	path = Path(image_dir)
	if not path.is_dir():
		raise DirectoryNotFound(image_dir)
	# Hidden files are skipped, as a shell glob would
	candidates = (p for p in path.glob(IMAGE_PATTERN) if p.is_file() and not p.name.startswith("."))
	images = sorted(candidates, key=lambda p: p.name)
	if not images:
		raise NoMatchingFiles(image_dir)
	return images


def calculate_checksum(path: Path) -> str:
	return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def get_file_size(path: Path) -> int:
	return Path(path).stat().st_size


def generate_description(filename: str) -> str:
	m = _ROOM_UID_RE.match(filename)
	if m:
		return f"Room UID {m.group(1)} image"
	if filename == "null.png":
		return "Fallback image when room image not found"
	# Every ".png" occurrence is dropped, not only the suffix
	return f"Location image: {filename.replace('.png', '')}"


def build_entry(path: Path) -> ManifestEntry:
	path = Path(path)
	return ManifestEntry(
		checksum=calculate_checksum(path),
		size=get_file_size(path),
		description=generate_description(path.name),
	)


def build_manifest(image_dir: Union[str, Path], progress: Optional[ManifestProgress] = None) -> Dict[str, ManifestEntry]:
	"""Hash every PNG in ``image_dir`` (non-recursive) in sorted filename order.

	Files are handled one at a time; ``progress`` hooks get a 1-based index.
	"""
	progress = progress or ManifestProgress()
	images = list_images(image_dir)
	total = len(images)
	progress.found(total)
	manifest: Dict[str, ManifestEntry] = {}
	for i, p in enumerate(images, start=1):
		progress.start(i, total, p.name)
		manifest[p.name] = build_entry(p)
		progress.done(i, total, p.name)
	return manifest


def manifest_to_dict(manifest: Dict[str, ManifestEntry]) -> Dict[str, Dict[str, Any]]:
	return {name: entry.as_dict() for name, entry in manifest.items()}


def write_manifest(manifest: Dict[str, ManifestEntry], output_file: Path) -> Path:
	path = Path(output_file)
	path.parent.mkdir(parents=True, exist_ok=True)
	text = yaml.safe_dump(manifest_to_dict(manifest), explicit_start=True, sort_keys=False, allow_unicode=True)
	path.write_text(text, encoding="utf-8")
	return path


def load_manifest(path: Path) -> Dict[str, ManifestEntry]:
	path = Path(path)
	data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
	if not isinstance(data, dict):
		raise ManifestError(f"{path} is not a manifest mapping")
	items: Dict[str, ManifestEntry] = {}
	for name, fields in data.items():
		if not isinstance(fields, dict):
			raise ManifestError(f"{path}: entry '{name}' is not a mapping")
		missing = [k for k in ENTRY_FIELDS if k not in fields]
		if missing:
			raise ManifestError(f"{path}: entry '{name}' is missing {', '.join(missing)}")
		items[str(name)] = ManifestEntry(
			checksum=str(fields["checksum"]),
			size=int(fields["size"]),
			description=str(fields["description"]),
		)
	return items


def generate_manifest(image_dir: Union[str, Path], output_file: Path, progress: Optional[ManifestProgress] = None) -> ManifestSummary:
	manifest = build_manifest(image_dir, progress=progress)
	path = write_manifest(manifest, output_file)
	return summarize(manifest, path)
