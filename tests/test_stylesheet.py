import pytest

from gfontapi.exceptions import ConversionError
from gfontapi.items import ConversionResult, FontFamily, FontStyle, StylesheetEntry
from gfontapi.stylesheet import (
    build_entries,
    render_font_face,
    render_stylesheet,
    write_stylesheet,
)

from conftest import LORA


def converted(family, out_dir, skip=()):
    results = []
    for v in family.variants:
        src = out_dir / v.filename(family.name)
        if v.key in skip:
            results.append(ConversionResult(v, src, error=ConversionError("nope")))
        else:
            results.append(ConversionResult(v, src, src.with_suffix(".woff2")))
    return results


def test_build_entries_sorted_and_relative(tmp_path):
    family = FontFamily.from_gf_json(LORA)
    results = list(reversed(converted(family, tmp_path / "files")))
    entries = build_entries(family, results, tmp_path)
    assert [(e.weight, e.style) for e in entries] == [
        (400, FontStyle.NORMAL),
        (400, FontStyle.ITALIC),
        (700, FontStyle.NORMAL),
        (700, FontStyle.ITALIC),
    ]
    assert entries[0].src == "files/lora-regular.woff2"


def test_build_entries_skips_failures(tmp_path):
    family = FontFamily.from_gf_json(LORA)
    entries = build_entries(family, converted(family, tmp_path, skip={"italic"}), tmp_path)
    assert len(entries) == 3
    assert "lora-regular-italic.woff2" not in [e.src for e in entries]


def test_render_font_face():
    entry = StylesheetEntry("Open Sans", 700, FontStyle.ITALIC, "open-sans-bold-italic.woff2")
    assert render_font_face(entry) == (
        "@font-face {\n"
        '  font-family: "Open Sans";\n'
        "  font-style: italic;\n"
        "  font-weight: 700;\n"
        "  font-display: swap;\n"
        '  src: url("open-sans-bold-italic.woff2") format("woff2");\n'
        "}\n"
    )


def test_render_truetype_and_escaping():
    entry = StylesheetEntry('My "Font"', 400, FontStyle.NORMAL, "my-font-regular.ttf")
    css = render_font_face(entry)
    assert 'font-family: "My \\"Font\\"";' in css
    assert 'format("truetype")' in css


def test_render_stylesheet_order_is_stable():
    a = StylesheetEntry("Lora", 700, FontStyle.NORMAL, "b.woff2")
    b = StylesheetEntry("Lora", 400, FontStyle.ITALIC, "i.woff2")
    c = StylesheetEntry("Lora", 400, FontStyle.NORMAL, "r.woff2")
    assert render_stylesheet([a, b, c]) == render_stylesheet([c, a, b])
    css = render_stylesheet([a, b, c])
    assert css.index("r.woff2") < css.index("i.woff2") < css.index("b.woff2")
    assert css.count("@font-face") == 3


def test_write_stylesheet_overwrites(tmp_path):
    path = tmp_path / "fonts.css"
    path.write_text("old")
    entries = [StylesheetEntry("Lora", 400, FontStyle.NORMAL, "lora-regular.woff2")]
    assert write_stylesheet(entries, path) == path
    assert path.read_text().startswith("@font-face {")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["fonts.css"]


def test_write_stylesheet_is_byte_identical(tmp_path):
    entries = [
        StylesheetEntry("Lora", 700, FontStyle.NORMAL, "lora-bold.woff2"),
        StylesheetEntry("Lora", 400, FontStyle.NORMAL, "lora-regular.woff2"),
    ]
    first = write_stylesheet(entries, tmp_path / "fonts.css").read_bytes()
    second = write_stylesheet(list(reversed(entries)), tmp_path / "fonts.css").read_bytes()
    assert first == second


def test_write_stylesheet_without_entries(tmp_path):
    with pytest.raises(ValueError):
        write_stylesheet([], tmp_path / "fonts.css")
    assert not (tmp_path / "fonts.css").exists()


def test_failed_write_keeps_previous_file(tmp_path, monkeypatch):
    from gfontapi import stylesheet

    path = tmp_path / "fonts.css"
    path.write_text("old")

    def explode(entries):
        raise RuntimeError("boom")

    monkeypatch.setattr(stylesheet, "render_stylesheet", explode)
    entries = [StylesheetEntry("Lora", 400, FontStyle.NORMAL, "lora-regular.woff2")]
    with pytest.raises(RuntimeError):
        write_stylesheet(entries, path)
    assert path.read_text() == "old"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["fonts.css"]
