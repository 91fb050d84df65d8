import os
from pathlib import Path
from types import SimpleNamespace

import pytest

from stylepress import api as api_module
import stylepress.cache as cache
from stylepress.config import Config
from stylepress.dialects import CompilerBackends
from stylepress.errors import RequestError, StylepressError

PAST_NS = 1_000_000_000


class FakeLessBackend:
    def __init__(self):
        self.calls = 0

    def compile(self, path):
        self.calls += 1
        return SimpleNamespace(
            compiled_text=f".less-{Path(path).stem}{{}}",
            dependency_paths=(Path(path),),
        )


@pytest.fixture(autouse=True)
def temp_dirs(tmp_path, monkeypatch):
    monkeypatch.setattr("stylepress.config.CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(
        "stylepress.config.CONFIG_FILE", tmp_path / "config" / "config.json"
    )
    monkeypatch.setattr(cache, "CACHE_DIR", tmp_path / "cache")
    monkeypatch.delenv("STYLEPRESS_WEBROOT", raising=False)
    monkeypatch.delenv("STYLEPRESS_SUB_FOLDER", raising=False)


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "www"
    (root / "css").mkdir(parents=True)
    for name, text in {
        "css/site.css": "a{background:url(../img/a.png)}",
        "css/theme.less": "@c: red;",
    }.items():
        path = root / name
        path.write_text(text, encoding="utf-8")
        os.utime(path, ns=(PAST_NS, PAST_NS))
    return root


def test_compile_uses_config_defaults(site, monkeypatch):
    cfg = Config(webroot=str(site), sub_folder="blog", lessify_all_css=True)
    monkeypatch.setattr(api_module, "load_config", lambda: cfg)
    backend = FakeLessBackend()

    response = api_module.compile_stylesheets(
        [site / "css" / "site.css"],
        backends=CompilerBackends(less=lambda: backend),
    )

    assert response.body == ".less-site{}"
    assert response.entries[0].dialect == "less"
    assert backend.calls == 1


def test_compile_arguments_override_config(site, monkeypatch):
    cfg = Config(webroot="/nowhere", lessify_all_css=True)
    monkeypatch.setattr(api_module, "load_config", lambda: cfg)

    response = api_module.compile_stylesheets(
        [site / "css" / "site.css"],
        webroot=site,
        sub_folder="/blog",
        lessify_all_css=False,
    )

    assert response.body == "a{background:url(/blog/img/a.png)}"


def test_use_config_false_ignores_saved_config(site, monkeypatch):
    def fail_load():
        raise AssertionError("config should not be loaded")

    monkeypatch.setattr(api_module, "load_config", fail_load)

    response = api_module.compile_stylesheets(
        [site / "css" / "site.css"],
        webroot=site,
        use_config=False,
    )

    assert response.body == "a{background:url(/img/a.png)}"


def test_client_serve_parses_request(site):
    backend = FakeLessBackend()
    client = api_module.StylepressClient(
        use_config=False,
        backends=CompilerBackends(less=lambda: backend),
    )

    response = client.serve(
        "/css/theme.less,/css/site.css",
        {"lessifyAllCss": "false"},
        webroot=site,
    )

    assert response.body == ".less-theme{}\na{background:url(/img/a.png)}"
    assert response.headers["Content-Type"] == "text/css"
    assert [entry.dialect for entry in response.entries] == ["less", "css"]


def test_client_serve_rejects_bad_request(site):
    client = api_module.StylepressClient(use_config=False)

    with pytest.raises(RequestError):
        client.serve("/css/missing.css", webroot=site)


def test_client_cache_dir_override(site, tmp_path):
    client = api_module.StylepressClient(use_config=False, cache_dir=tmp_path / "own")

    client.compile([site / "css" / "site.css"], webroot=site)

    assert list((tmp_path / "own").glob(f"*{cache.CACHE_SUFFIX}"))
    assert not (tmp_path / "cache").exists()
    assert client.is_cache_fresh(site / "css" / "site.css", webroot=site)
    assert client.clear_cache() == 1
    assert not client.is_cache_fresh(site / "css" / "site.css", webroot=site)


def test_check_stylesheet_cache_and_clear(site):
    source = site / "css" / "site.css"

    assert api_module.check_stylesheet_cache(source, webroot=site) is False
    api_module.compile_stylesheets([source], webroot=site)
    assert api_module.check_stylesheet_cache(source, webroot=site) is True
    assert api_module.clear_cache() == 1
    assert api_module.check_stylesheet_cache(source, webroot=site) is False


def test_config_context_applies_json_payload(site):
    with api_module.config_context(
        {"webroot": str(site), "sub_folder": "/app"}, use_config=False
    ) as client:
        response = client.compile([site / "css" / "site.css"])

    assert response.body == "a{background:url(/app/img/a.png)}"


def test_client_config_context_restores_previous(site):
    client = api_module.StylepressClient(use_config=False)
    client.set_config_json({"webroot": str(site)})

    with client.config_context('{"sub_folder": "/tmp-prefix"}'):
        inner = client.compile([site / "css" / "site.css"])
    outer = client.compile([site / "css" / "site.css"])

    assert inner.body == "a{background:url(/tmp-prefix/img/a.png)}"
    assert outer.body == "a{background:url(/img/a.png)}"


def test_set_config_json_rejects_invalid_payload():
    client = api_module.StylepressClient(use_config=False)

    with pytest.raises(StylepressError):
        client.set_config_json("[]")
