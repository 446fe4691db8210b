import os
import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(repo_root))

from jsbundle.config import BundleOptions


@pytest.fixture(autouse=True)
def clean_bundle_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("BUNDLE__") or key == "JSBUNDLE_NO_MERGE":
            monkeypatch.delenv(key)


@pytest.fixture()
def source_dir(tmp_path):
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture()
def build_dir(tmp_path):
    return tmp_path / "build"


@pytest.fixture()
def options(source_dir, build_dir):
    return BundleOptions(
        version="3",
        source_root=source_dir,
        build_output_dir=build_dir,
        codec="hashed",
    )


@pytest.fixture()
def write_script(source_dir):
    def _write(name: str, content: str, mtime: int | None = None) -> Path:
        path = source_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write
