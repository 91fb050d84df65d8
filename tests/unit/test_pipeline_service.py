import os
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

import stylepress.cache as cache
from stylepress.config import CompileOptions
from stylepress.dialects import CompilerBackends
from stylepress.errors import RequestError
from stylepress.services.compile_service import CompileSettings
from stylepress.services.pipeline_service import CSS_CONTENT_TYPE, CachePipeline

PAST_NS = 1_000_000_000


class CountingLessBackend:
    def __init__(self, dependencies=()):
        self.dependencies = tuple(dependencies)
        self.calls = 0

    def compile(self, path):
        self.calls += 1
        return SimpleNamespace(
            compiled_text=f"/* build {self.calls} */",
            dependency_paths=(Path(path), *self.dependencies),
        )


@pytest.fixture(autouse=True)
def temp_cache_dir(tmp_path, monkeypatch):
    cache_dir = tmp_path / "cache"
    monkeypatch.setattr(cache, "CACHE_DIR", cache_dir)
    return cache_dir


def _write_past(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    os.utime(path, ns=(PAST_NS, PAST_NS))
    return path


def _touch_future(path: Path) -> None:
    future = time.time_ns() + 3600 * 1_000_000_000
    os.utime(path, ns=(future, future))


def _pipeline(webroot, backend, options=None):
    return CachePipeline(
        CompileSettings(webroot=webroot),
        options,
        backends=CompilerBackends(less=lambda: backend),
    )


def test_second_request_is_served_from_cache(tmp_path):
    source = _write_past(tmp_path / "main.less", "@c: red;")
    backend = CountingLessBackend()
    pipeline = _pipeline(tmp_path, backend)

    first = pipeline.process([source])
    second = pipeline.process([source])

    assert first.body == second.body == "/* build 1 */"
    assert backend.calls == 1
    assert [entry.cache_hit for entry in first.entries] == [False]
    assert [entry.cache_hit for entry in second.entries] == [True]


def test_dependency_change_triggers_rebuild(tmp_path):
    source = _write_past(tmp_path / "main.less", "@import 'vars';")
    variables = _write_past(tmp_path / "vars.less", "@c: red;")
    backend = CountingLessBackend(dependencies=[variables])
    pipeline = _pipeline(tmp_path, backend)

    pipeline.process([source])
    assert pipeline.is_fresh(source)

    _touch_future(variables)

    assert not pipeline.is_fresh(source)
    response = pipeline.process([source])
    assert response.body == "/* build 2 */"
    assert backend.calls == 2


def test_source_change_triggers_rebuild(tmp_path):
    source = _write_past(tmp_path / "site.css", "a{}")
    pipeline = _pipeline(tmp_path, CountingLessBackend())

    assert pipeline.process([source]).body == "a{}"

    source.write_text("b{}", encoding="utf-8")
    _touch_future(source)

    assert pipeline.process([source]).body == "b{}"


def test_plain_css_ignores_imported_file_changes(tmp_path):
    base = _write_past(tmp_path / "base.css", "a{}")
    source = _write_past(tmp_path / "site.css", '@import "base.css";')
    pipeline = _pipeline(tmp_path, CountingLessBackend())

    assert pipeline.process([source]).body == "a{}"

    base.write_text("b{}", encoding="utf-8")
    _touch_future(base)

    assert pipeline.process([source]).body == "a{}"


def test_multiple_files_are_joined_in_request_order(tmp_path):
    first = _write_past(tmp_path / "one.css", ".one{}")
    second = _write_past(tmp_path / "two.css", ".two{}")
    pipeline = _pipeline(tmp_path, CountingLessBackend())

    response = pipeline.process([second, first])

    assert response.body == ".two{}\n.one{}"
    assert [entry.path for entry in response.entries] == [second, first]
    assert response.content_type == CSS_CONTENT_TYPE
    assert response.headers == {"Content-Type": "text/css"}


def test_options_select_separate_cache_entries(tmp_path):
    source = _write_past(tmp_path / "site.css", "a{}")
    backend = CountingLessBackend()

    plain = _pipeline(tmp_path, backend).process([source])
    forced = _pipeline(tmp_path, backend, CompileOptions(lessify_all_css=True)).process(
        [source]
    )

    assert plain.body == "a{}"
    assert forced.body == "/* build 1 */"
    assert forced.entries[0].dialect == "less"
    assert plain.entries[0].cache_path != forced.entries[0].cache_path


def test_legacy_raw_cache_is_served(tmp_path, temp_cache_dir):
    source = _write_past(tmp_path / "site.css", "a{}")
    pipeline = _pipeline(tmp_path, CountingLessBackend())
    cache_path = pipeline.cache_path(source.resolve())
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    cache_path.write_text("legacy{}", encoding="utf-8")

    response = pipeline.process([source])

    assert response.body == "legacy{}"
    assert response.entries[0].cache_hit


def test_empty_request_is_rejected(tmp_path):
    pipeline = _pipeline(tmp_path, CountingLessBackend())

    with pytest.raises(RequestError):
        pipeline.process([])


def test_process_logs_cache_summary(tmp_path, caplog):
    source = _write_past(tmp_path / "site.css", "a{}")
    pipeline = _pipeline(tmp_path, CountingLessBackend())

    with caplog.at_level("INFO", logger="stylepress.services.pipeline_service"):
        pipeline.process([source])
        pipeline.process([source])

    messages = [record.getMessage() for record in caplog.records]
    assert "Served 1 stylesheet(s), 0 from cache" in messages
    assert "Served 1 stylesheet(s), 1 from cache" in messages
