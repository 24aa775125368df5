from pathlib import Path

import pytest

IMAGES = {
	"u12.png": b"\x89PNG\r\n\x1a\nroom-12",
	"null.png": b"\x89PNG\r\n\x1a\nfallback",
	"lobby.png": b"\x89PNG\r\n\x1a\n" + b"x" * 2048,
	"u3.png": b"\x89PNG\r\n\x1a\nroom-3",
}


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
	"""Keep the default audit dir out of the real home directory."""
	home = tmp_path / "home"
	home.mkdir()
	monkeypatch.setenv("HOME", str(home))
	monkeypatch.setenv("USERPROFILE", str(home))
	return home


@pytest.fixture
def image_dir(tmp_path) -> Path:
	d = tmp_path / "images"
	d.mkdir()
	for name, data in IMAGES.items():
		(d / name).write_bytes(data)
	return d
