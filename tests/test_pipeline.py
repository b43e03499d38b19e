
import pytest

from gfontapi.download import DownloadManager
from gfontapi.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    PipelineError,
    ToolMissingError,
)
from gfontapi.pipeline import Pipeline, Stage
from gfontapi.resolver import FontResolver

from conftest import (
    LORA,
    OPEN_SANS,
    CopyConverter,
    FakeResponse,
    FakeSession,
    api_routes,
    font_routes,
)


def make_pipeline(target_dir, routes, converter=None, key="secret", **kwargs):
    session = FakeSession(routes)
    stages = []
    pipeline = Pipeline(
        FontResolver(key, session=session),
        DownloadManager(target_dir, session=session, sleep=lambda s: None),
        converter or CopyConverter(),
        on_stage=stages.append,
        **kwargs,
    )
    return pipeline, session, stages


def all_routes(*families):
    routes = api_routes()
    for family in families or (LORA, OPEN_SANS):
        routes.update(font_routes(family))
    return routes


def test_open_sans_scenario(tmp_path):
    out = tmp_path / "out"
    pipeline, session, stages = make_pipeline(out, all_routes())
    report = pipeline.run("Open Sans")

    assert report.ok
    assert report.stylesheet == out / "fonts.css"
    css = (out / "fonts.css").read_text()
    assert css.count("@font-face") == 2
    assert 'url("open-sans-regular.woff2")' in css
    assert 'url("open-sans-bold.woff2")' in css
    assert sorted(p.name for p in out.iterdir()) == [
        "fonts.css",
        "open-sans-bold.woff2",
        "open-sans-regular.woff2",
    ]
    assert stages == [
        Stage.RESOLVING,
        Stage.DOWNLOADING,
        Stage.CONVERTING,
        Stage.WRITING,
        Stage.DONE,
    ]
    assert report.failures == []


def test_entry_per_variant(tmp_path):
    pipeline, _, _ = make_pipeline(tmp_path, all_routes())
    report = pipeline.run("lora")
    assert len(report.entries) == len(LORA["files"])
    assert (tmp_path / "fonts.css").read_text().count("@font-face") == 4


def test_rerun_is_byte_identical(tmp_path):
    pipeline, _, _ = make_pipeline(tmp_path, all_routes())
    pipeline.run("Lora")
    first = (tmp_path / "fonts.css").read_bytes()
    pipeline, _, _ = make_pipeline(tmp_path, all_routes())
    pipeline.run("Lora")
    assert (tmp_path / "fonts.css").read_bytes() == first


def test_one_conversion_failure(tmp_path):
    converter = CopyConverter(fail_on={"lora-bold.ttf"})
    pipeline, _, stages = make_pipeline(tmp_path, all_routes(), converter)
    report = pipeline.run("Lora")

    assert report.ok
    assert stages[-1] is Stage.DONE
    assert len(report.entries) == 3
    assert [(f.variant.key, f.stage) for f in report.failures] == [("700", "convert")]
    css = (tmp_path / "fonts.css").read_text()
    assert css.count("@font-face") == 3
    assert "lora-bold.woff2" not in css


def test_one_download_failure(tmp_path):
    routes = all_routes()
    routes[LORA["files"]["italic"]] = FakeResponse(404)
    pipeline, _, _ = make_pipeline(tmp_path, routes)
    report = pipeline.run("Lora")
    assert len(report.entries) == 3
    assert [(f.variant.key, f.stage) for f in report.failures] == [("italic", "download")]
    assert isinstance(report.failures[0].error, NetworkError)


def test_missing_key_makes_no_requests(tmp_path):
    pipeline, session, stages = make_pipeline(tmp_path, all_routes(), key=None)
    with pytest.raises(AuthError):
        pipeline.run("Lora")
    assert session.calls == []
    assert stages[-1] is Stage.FAILED
    assert pipeline.failed_stage is Stage.RESOLVING


def test_tool_missing_before_any_download(tmp_path):
    class Missing(CopyConverter):
        def check(self):
            raise ToolMissingError("woff2_compress not found")

    pipeline, session, stages = make_pipeline(tmp_path, all_routes(), Missing())
    with pytest.raises(ToolMissingError):
        pipeline.run("Lora")
    assert session.calls == []
    assert stages == [Stage.RESOLVING, Stage.FAILED]


def test_unknown_family(tmp_path):
    pipeline, session, _ = make_pipeline(tmp_path, all_routes())
    with pytest.raises(NotFoundError):
        pipeline.run("Roboto Serif")
    assert session.font_calls() == []


def test_nothing_downloaded(tmp_path):
    routes = api_routes()
    pipeline, _, stages = make_pipeline(tmp_path, routes)
    with pytest.raises(PipelineError) as e:
        pipeline.run("Open Sans")
    assert len(e.value.failures) == 2
    assert not (tmp_path / "fonts.css").exists()
    assert pipeline.failed_stage is Stage.DOWNLOADING


def test_nothing_converted_keeps_old_stylesheet(tmp_path):
    (tmp_path / "fonts.css").write_text("old")
    converter = CopyConverter(fail_on={"open-sans-regular.ttf", "open-sans-bold.ttf"})
    pipeline, _, _ = make_pipeline(tmp_path, all_routes(), converter)
    with pytest.raises(PipelineError):
        pipeline.run("Open Sans")
    assert (tmp_path / "fonts.css").read_text() == "old"
    assert pipeline.failed_stage is Stage.CONVERTING


def test_variant_selection(tmp_path):
    pipeline, session, _ = make_pipeline(
        tmp_path, all_routes(), variants=["700italic", "regular"]
    )
    report = pipeline.run("Lora")
    assert [(e.weight, e.style.value) for e in report.entries] == [
        (400, "normal"),
        (700, "italic"),
    ]
    assert len(session.font_calls()) == 2


def test_unknown_variant_selection(tmp_path):
    pipeline, session, _ = make_pipeline(tmp_path, all_routes(), variants=["300"])
    with pytest.raises(ValueError):
        pipeline.run("Lora")
    assert session.font_calls() == []


def test_cancel_stops_new_work(tmp_path):
    pipeline, session, _ = make_pipeline(tmp_path, all_routes())
    pipeline.cancel()
    with pytest.raises(PipelineError):
        pipeline.run("Lora")
    assert session.font_calls() == []
    assert not (tmp_path / "fonts.css").exists()
