from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

CONFIG_FILENAME = "vizmanifest.yaml"
AUDIT_SUBDIR = Path(".vizmanifest") / "audit"


@dataclass
class ManifestConfig:
	image_dir: str = "./images"
	output_file: str = "manifest.yaml"
	audit_enabled: bool = False
	audit_dir: Optional[str] = None

	def resolved_audit_dir(self) -> Path:
		if self.audit_dir:
			return Path(self.audit_dir).expanduser()
		return Path.home() / AUDIT_SUBDIR


def load_config(path: Optional[Path] = None) -> ManifestConfig:
	path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
	if not path.exists():
		return ManifestConfig()
	data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
	if not isinstance(data, dict):
		raise ValueError(f"{path}: expected a mapping at top level")
	known = {f.name for f in fields(ManifestConfig)}
	cfg = ManifestConfig(**{k: v for k, v in data.items() if k in known})
	cfg.image_dir = str(cfg.image_dir)
	cfg.output_file = str(cfg.output_file)
	cfg.audit_enabled = bool(cfg.audit_enabled)
	if cfg.audit_dir is not None:
		cfg.audit_dir = str(cfg.audit_dir)
	return cfg
