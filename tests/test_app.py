import importlib

import pytest

from jsbundle import static_build


@pytest.fixture()
def app_module(monkeypatch, source_dir, build_dir):
    monkeypatch.setenv("BUNDLE__SOURCE_ROOT", str(source_dir))
    monkeypatch.setenv("BUNDLE__BUILD_OUTPUT_DIR", str(build_dir))
    monkeypatch.setenv("BUNDLE__VERSION", "9")
    monkeypatch.setenv("BUNDLE__SECRET_KEY", "test-secret")
    return importlib.reload(importlib.import_module("jsbundle.app"))


def test_app_serves_bundles_from_environment(app_module, write_script):
    write_script("js/a.js", "var a = 1;")
    state = app_module.bundle
    src = state.controller.script_url(state.codec.encode(["js/a.js"]))
    client = app_module.app.test_client()

    resp = client.get(src)

    assert src.startswith("/build/") and src.endswith("-9.js")
    assert resp.status_code == 200
    assert "a=1" in resp.get_data(as_text=True)
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["Strict-Transport-Security"].startswith("max-age=31536000")
    resp.close()


def test_app_serves_unbundled_scripts(app_module, write_script):
    write_script("js/a.js", "var a = 1;")
    resp = app_module.app.test_client().get("/js/a.js")
    assert resp.status_code == 200
    resp.close()


def test_prebuild_command(monkeypatch, source_dir, build_dir, write_script, capsys):
    monkeypatch.setenv("BUNDLE__SOURCE_ROOT", str(source_dir))
    monkeypatch.setenv("BUNDLE__BUILD_OUTPUT_DIR", str(build_dir))
    monkeypatch.setenv("BUNDLE__VERSION", "5")
    write_script("js/a.js", "var a = 1;")

    assert static_build.main(["js/a.js"]) == 0

    url = capsys.readouterr().out.strip()
    assert url.startswith("/build/") and url.endswith("-5.js")
    assert [p.name for p in build_dir.iterdir()][0].startswith("5.")


def test_prebuild_command_fails_without_sources(monkeypatch, source_dir, build_dir):
    monkeypatch.setenv("BUNDLE__SOURCE_ROOT", str(source_dir))
    monkeypatch.setenv("BUNDLE__BUILD_OUTPUT_DIR", str(build_dir))
    assert static_build.main(["js/missing.js"]) == 1


def test_prebuild_command_requires_names(capsys):
    assert static_build.main([]) == 2
