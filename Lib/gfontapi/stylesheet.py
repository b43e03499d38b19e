# Copyright 2026 The gfontapi Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Write the @font-face stylesheet for a family."""
from __future__ import annotations
import logging
from pathlib import Path

from gfontapi.constants import CSS_FORMATS
from gfontapi.items import ConversionResult, FontFamily, StylesheetEntry
from gfontapi.utils import atomic_write, relative_url


log = logging.getLogger("gfontapi.stylesheet")


FONT_FACE_TEMPLATE = """@font-face {{
  font-family: "{family}";
  font-style: {style};
  font-weight: {weight};
  font-display: swap;
  src: url("{src}") format("{format}");
}}
"""


def build_entries(
    family: FontFamily, results: list[ConversionResult], stylesheet_dir: Path
) -> list[StylesheetEntry]:
    """One entry per successfully converted variant, sorted by weight and
    then style so reruns produce the same file."""
    entries = [
        StylesheetEntry(
            family=family.name,
            weight=r.variant.weight,
            style=r.variant.style,
            src=relative_url(r.output_path, stylesheet_dir),
        )
        for r in results
        if r.ok
    ]
    return sorted(entries, key=lambda e: e.sort_key)


def css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def render_font_face(entry: StylesheetEntry) -> str:
    fmt = CSS_FORMATS.get(Path(entry.src).suffix.lower(), "woff2")
    return FONT_FACE_TEMPLATE.format(
        family=css_string(entry.family),
        style=entry.style.value,
        weight=entry.weight,
        src=css_string(entry.src),
        format=fmt,
    )


def render_stylesheet(entries: list[StylesheetEntry]) -> str:
    entries = sorted(entries, key=lambda e: e.sort_key)
    return "\n".join(render_font_face(e) for e in entries)


def write_stylesheet(entries: list[StylesheetEntry], path: "str | Path") -> Path:
    """Replace the stylesheet at path. The old file stays in place if
    anything goes wrong."""
    if not entries:
        raise ValueError("Refusing to write a stylesheet without any font-face rules")
    path = Path(path)
    with atomic_write(path, "w", encoding="utf-8", newline="\n") as doc:
        doc.write(render_stylesheet(entries))
    log.info(f"Wrote {len(entries)} font-face rules to {path}")
    return path
