"""
Tests for the generate-manifest command.
"""

import pytest
import yaml
from click.testing import CliRunner

from vizmanifest.audit import AuditLogger
from vizmanifest.cli import cli

from conftest import IMAGES


@pytest.fixture
def workdir(tmp_path, monkeypatch):
	"""Working directory with a config that keeps the audit log inside tmp_path."""
	monkeypatch.chdir(tmp_path)
	(tmp_path / "vizmanifest.yaml").write_text(f"audit_enabled: true\naudit_dir: {tmp_path / 'audit'}\n")
	return tmp_path


class TestGenerateManifestCommand:

	def test_success(self, workdir, image_dir):
		out = workdir / "manifest.yaml"
		result = CliRunner().invoke(cli, [str(image_dir), str(out)])
		assert result.exit_code == 0, result.output
		assert "Visualizer Manifest Generator" in result.output
		assert f"Image directory: {image_dir}" in result.output
		assert "Found 4 PNG files" in result.output
		assert "  [1/4] Processing lobby.png... ✓" in result.output
		assert "  [4/4] Processing u3.png... ✓" in result.output
		assert f"Manifest written to: {out}" in result.output
		assert "Total files: 4" in result.output
		assert sum(len(v) for v in IMAGES.values()) == 2101
		assert "Total size: 2.05 KB" in result.output
		assert "Done! Upload both manifest.yaml and the images directory to GitHub." in result.output

		data = yaml.safe_load(out.read_text(encoding="utf-8"))
		assert list(data) == sorted(IMAGES)
		assert data["null.png"]["description"] == "Fallback image when room image not found"

	def test_default_arguments(self, workdir):
		images = workdir / "images"
		images.mkdir()
		(images / "u1.png").write_bytes(b"one")
		result = CliRunner().invoke(cli, [])
		assert result.exit_code == 0, result.output
		assert "Image directory: ./images" in result.output
		assert "Output file: manifest.yaml" in result.output
		assert "Total size: 3 B" in result.output
		data = yaml.safe_load((workdir / "manifest.yaml").read_text(encoding="utf-8"))
		assert data == {"u1.png": {
			"checksum": "7692c3ad3540bb803c020b3aee66cd8887123234ea0c6e7143c0add73ff431ed",
			"size": 3,
			"description": "Room UID 1 image",
		}}

	def test_config_defaults_and_positional_override(self, workdir, image_dir):
		(workdir / "vizmanifest.yaml").write_text(
			f"image_dir: {image_dir}\noutput_file: from_config.yaml\naudit_enabled: false\n"
		)
		result = CliRunner().invoke(cli, [])
		assert result.exit_code == 0, result.output
		assert (workdir / "from_config.yaml").exists()

		result = CliRunner().invoke(cli, [str(image_dir), "explicit.yaml"])
		assert result.exit_code == 0, result.output
		assert (workdir / "explicit.yaml").exists()
		assert not (workdir / "audit").exists()

	def test_missing_directory(self, workdir):
		result = CliRunner().invoke(cli, [str(workdir / "missing"), "manifest.yaml"])
		assert result.exit_code == 1
		assert "Error: Directory" in result.output
		assert "does not exist" in result.output
		assert not (workdir / "manifest.yaml").exists()

	def test_no_png_files(self, workdir):
		empty = workdir / "empty"
		empty.mkdir()
		(empty / "notes.txt").write_text("x")
		result = CliRunner().invoke(cli, [str(empty)])
		assert result.exit_code == 1
		assert "Error: No PNG files found in" in result.output
		assert not (workdir / "manifest.yaml").exists()

	def test_empty_image_directory_argument_is_kept(self, workdir):
		images = workdir / "images"
		images.mkdir()
		(images / "u1.png").write_bytes(b"one")
		result = CliRunner().invoke(cli, ["", "out.yaml"])
		assert result.exit_code == 1
		assert "Error: Directory '' does not exist" in result.output
		assert not (workdir / "out.yaml").exists()

	def test_bad_config(self, workdir, image_dir):
		(workdir / "vizmanifest.yaml").write_text("- not\n- a mapping\n")
		result = CliRunner().invoke(cli, [str(image_dir)])
		assert result.exit_code == 1
		assert "expected a mapping" in result.output


class TestAuditTrail:

	def test_default_run_writes_only_the_manifest(self, tmp_path, monkeypatch, image_dir):
		run_dir = tmp_path / "run"
		run_dir.mkdir()
		monkeypatch.chdir(run_dir)
		# An unusable home must not matter when auditing is off
		home_file = tmp_path / "home_is_a_file"
		home_file.write_text("")
		monkeypatch.setenv("HOME", str(home_file))
		monkeypatch.setenv("USERPROFILE", str(home_file))
		before = sorted(p.name for p in tmp_path.iterdir())
		images_before = sorted(p.name for p in image_dir.iterdir())

		out = run_dir / "manifest.yaml"
		result = CliRunner().invoke(cli, [str(image_dir), str(out)])
		assert result.exit_code == 0, result.output
		assert out.exists()
		assert sorted(p.name for p in run_dir.iterdir()) == ["manifest.yaml"]
		assert sorted(p.name for p in tmp_path.iterdir()) == before
		assert sorted(p.name for p in image_dir.iterdir()) == images_before
		assert home_file.read_text() == ""

	def test_success_is_audited(self, workdir, image_dir):
		result = CliRunner().invoke(cli, [str(image_dir), "manifest.yaml"])
		assert result.exit_code == 0, result.output
		logger = AuditLogger(workdir / "audit")
		records = list(logger.records())
		assert [r["action"] for r in records] == ["manifest_start", "manifest_written"]
		assert records[1]["details"]["files"] == 4
		assert records[1]["details"]["total_size"] == sum(len(v) for v in IMAGES.values())
		assert logger.verify_chain()

	def test_failure_is_audited(self, workdir):
		result = CliRunner().invoke(cli, [str(workdir / "missing")])
		assert result.exit_code == 1
		records = list(AuditLogger(workdir / "audit").records())
		assert records[-1]["action"] == "manifest_failed"
		assert records[-1]["details"]["error"] == "DirectoryNotFound"
