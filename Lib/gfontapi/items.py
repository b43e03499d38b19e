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
from __future__ import annotations
import logging
import re
from abc import ABC
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from gfontapi.constants import WEIGHT_NAMES


log = logging.getLogger("gfontapi.items")


VARIANT_KEY_RE = re.compile(r"^(?P<weight>[1-9]00)?(?P<italic>italic)?$")


def jsonify(item):
    if item is None:
        return item
    if isinstance(item, (bool, int, float, str)):
        return item
    elif isinstance(item, Enum):
        return item.value
    elif isinstance(item, Path):
        return str(item)
    elif isinstance(item, BaseException):
        return str(item)
    elif isinstance(item, dict):
        return {k: jsonify(v) for k, v in item.items()}
    elif isinstance(item, (tuple, list)):
        return [jsonify(i) for i in item]
    if hasattr(item, "to_json"):
        return item.to_json()
    return item


class Itemer(ABC):
    def to_json(self):
        return jsonify(self.__dict__)


class FontStyle(Enum):
    NORMAL = "normal"
    ITALIC = "italic"

    @property
    def sort_key(self):
        return 0 if self is FontStyle.NORMAL else 1


def parse_variant_key(key: str):
    """Turn a Google Fonts variant key into a (weight, style) tuple.

    "regular" -> (400, normal), "italic" -> (400, italic),
    "700" -> (700, normal), "700italic" -> (700, italic).
    """
    if key == "regular":
        return 400, FontStyle.NORMAL
    m = VARIANT_KEY_RE.match(key)
    if not key or not m:
        raise ValueError(f"Unknown variant '{key}'")
    weight = int(m["weight"]) if m["weight"] else 400
    style = FontStyle.ITALIC if m["italic"] else FontStyle.NORMAL
    return weight, style


def variant_key(weight: int, style: FontStyle) -> str:
    if weight == 400:
        return "italic" if style is FontStyle.ITALIC else "regular"
    return f"{weight}italic" if style is FontStyle.ITALIC else str(weight)


def kebab_case(name: str) -> str:
    """e.g ExtraBold -> extra-bold"""
    return re.sub(r"(?<!^)(?=[A-Z])", "-", name).lower()


def family_slug(name: str) -> str:
    """File system friendly family name e.g "Open Sans" -> "open-sans"."""
    return "-".join(name.lower().split())


def normalize_family_name(name: str) -> str:
    """Key used to compare family names. Case and whitespace insensitive."""
    return " ".join(name.split()).casefold()


@dataclass(frozen=True)
class Variant(Itemer):
    weight: int
    style: FontStyle
    url: str
    path: Optional[Path] = None

    def __post_init__(self):
        if self.weight not in WEIGHT_NAMES:
            raise ValueError(f"Unsupported weight {self.weight}")

    @classmethod
    def from_gf_json(cls, key: str, url: str):
        weight, style = parse_variant_key(key)
        return cls(weight, style, url)

    @property
    def key(self):
        return variant_key(self.weight, self.style)

    @property
    def style_name(self):
        """Kebab cased style name used for file names, e.g "bold-italic"."""
        name = kebab_case(WEIGHT_NAMES[self.weight])
        if self.style is FontStyle.ITALIC:
            name += "-italic"
        return name

    @property
    def sort_key(self):
        return (self.weight, self.style.sort_key)

    def with_path(self, path: Path) -> "Variant":
        return replace(self, path=Path(path))

    def filename(self, family_name: str, suffix: str = ".ttf") -> str:
        return f"{family_slug(family_name)}-{self.style_name}{suffix}"


@dataclass(frozen=True)
class FontFamily(Itemer):
    name: str
    variants: tuple[Variant, ...]
    category: Optional[str] = None
    subsets: tuple[str, ...] = ()

    def __post_init__(self):
        seen = set()
        for variant in self.variants:
            pair = (variant.weight, variant.style)
            if pair in seen:
                raise ValueError(
                    f"{self.name} lists {variant.key} more than once"
                )
            seen.add(pair)

    @classmethod
    def from_gf_json(cls, data: dict):
        """Build a family from an item of the webfonts API response. Variant
        keys we can't map to a weight and style are skipped."""
        variants = []
        for key, url in data.get("files", {}).items():
            try:
                variants.append(Variant.from_gf_json(key, url))
            except ValueError:
                log.warning(f"{data['family']}: skipping unsupported variant '{key}'")
        variants.sort(key=lambda v: v.sort_key)
        return cls(
            name=data["family"],
            variants=tuple(variants),
            category=data.get("category"),
            subsets=tuple(data.get("subsets", [])),
        )

    @property
    def slug(self):
        return family_slug(self.name)

    def select(self, keys) -> "FontFamily":
        """Return a copy of the family only containing the given variant keys
        e.g ["regular", "700italic"]."""
        wanted = set()
        for key in keys:
            wanted.add(parse_variant_key(key.strip()))
        available = {(v.weight, v.style) for v in self.variants}
        missing = wanted - available
        if missing:
            missing_keys = ", ".join(sorted(variant_key(*m) for m in missing))
            raise ValueError(f"{self.name} has no variant(s) {missing_keys}")
        return replace(
            self,
            variants=tuple(v for v in self.variants if (v.weight, v.style) in wanted),
        )


@dataclass
class DownloadResult(Itemer):
    variant: Variant
    path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self):
        return self.error is None and self.path is not None


@dataclass
class ConversionResult(Itemer):
    variant: Variant
    input_path: Path
    output_path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def ok(self):
        return self.error is None and self.output_path is not None


@dataclass(frozen=True)
class StylesheetEntry(Itemer):
    family: str
    weight: int
    style: FontStyle
    src: str

    @property
    def sort_key(self):
        return (self.weight, self.style.sort_key)


@dataclass
class VariantFailure(Itemer):
    variant: Variant
    stage: str
    error: Exception

    def __str__(self):
        return f"{self.variant.key} ({self.stage}): {self.error}"


@dataclass
class PipelineReport(Itemer):
    family: Optional[FontFamily] = None
    stage: Optional[Enum] = None
    entries: list[StylesheetEntry] = field(default_factory=list)
    failures: list[VariantFailure] = field(default_factory=list)
    stylesheet: Optional[Path] = None

    @property
    def ok(self):
        return bool(self.entries) and self.stylesheet is not None
