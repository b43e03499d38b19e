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
"""Convert downloaded fonts to WOFF2.

Every converter exposes the same narrow interface, convert(input_path)
returns the output path or raises ConversionError. check() raises
ToolMissingError if the converter can't run at all and is called once
before any download starts.
"""
from __future__ import annotations
import logging
import os
import shutil
import subprocess
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional

from fontTools.ttLib import TTFont

from gfontapi.constants import (
    DEFAULT_JOBS,
    DEFAULT_TIMEOUT,
    WOFF2_COMPRESS,
    WOFF2_COMPRESS_LOCATIONS,
)
from gfontapi.exceptions import (
    CancelledError,
    ConversionError,
    StorageError,
    ToolMissingError,
)
from gfontapi.items import ConversionResult, DownloadResult
from gfontapi.utils import atomic_write


log = logging.getLogger("gfontapi.convert")


class Converter(ABC):
    name: str = ""
    suffix: str = ".woff2"

    def check(self):
        """Raise ToolMissingError if the converter cannot run."""

    @abstractmethod
    def convert(self, input_path: Path) -> Path:
        ...

    def output_path(self, input_path: Path) -> Path:
        return Path(input_path).with_suffix(self.suffix)


def find_woff2_compress(explicit: Optional[str] = None) -> Path:
    """Locate the woff2_compress binary. An explicit path wins, then PATH,
    then the locations the installer uses."""
    if explicit:
        path = Path(explicit).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            return path
        raise ToolMissingError(f"{explicit} is not an executable file")
    on_path = shutil.which(WOFF2_COMPRESS)
    if on_path:
        return Path(on_path)
    for location in WOFF2_COMPRESS_LOCATIONS:
        path = Path(location).expanduser()
        if path.is_file() and os.access(path, os.X_OK):
            return path
    raise ToolMissingError(
        f"Could not locate the {WOFF2_COMPRESS} binary. Install it from "
        "https://github.com/google/woff2 or use --converter fonttools"
    )


class Woff2CompressConverter(Converter):
    """Runs google/woff2's woff2_compress, which writes font.woff2 next to
    font.ttf."""

    name = "woff2_compress"

    def __init__(self, binary: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self._explicit = binary
        self._binary: Optional[Path] = None
        self.timeout = timeout

    @property
    def binary(self) -> Path:
        if self._binary is None:
            self._binary = find_woff2_compress(self._explicit)
        return self._binary

    def check(self):
        log.debug(f"Using {self.binary}")

    def convert(self, input_path: Path) -> Path:
        input_path = Path(input_path)
        output_path = self.output_path(input_path)
        try:
            # a file left by an earlier run must not pass for fresh output
            output_path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot remove stale {output_path}: {e}") from e
        cmd = [str(self.binary), str(input_path)]
        try:
            result = subprocess.run(cmd, capture_output=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise ToolMissingError(f"{self.binary} disappeared: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ConversionError(
                f"{self.name} timed out after {self.timeout}s on {input_path.name}"
            ) from e
        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            raise ConversionError(
                f"{self.name} failed on {input_path.name} "
                f"(exit code {result.returncode}): {stderr}"
            )
        if not output_path.is_file():
            raise ConversionError(f"{self.name} did not produce {output_path.name}")
        return output_path


class FontToolsConverter(Converter):
    """Library based encoder, needs fontTools and brotli."""

    name = "fonttools"

    def check(self):
        from fontTools.ttLib import woff2

        if not woff2.haveBrotli:
            raise ToolMissingError(
                "fontTools needs the brotli module to write WOFF2 files. "
                "Run pip install brotli"
            )

    def convert(self, input_path: Path) -> Path:
        input_path = Path(input_path)
        output_path = self.output_path(input_path)
        try:
            with TTFont(
                input_path, recalcBBoxes=False, recalcTimestamp=False
            ) as font:
                font.flavor = "woff2"
                with atomic_write(output_path) as doc:
                    font.save(doc, reorderTables=False)
        except StorageError:
            raise
        except Exception as e:
            raise ConversionError(f"Could not compress {input_path.name}: {e}") from e
        return output_path


class NullConverter(Converter):
    """Used when conversion is skipped, fonts are referenced as downloaded."""

    name = "none"

    def convert(self, input_path: Path) -> Path:
        return Path(input_path)

    def output_path(self, input_path: Path) -> Path:
        return Path(input_path)


CONVERTERS = {
    Woff2CompressConverter.name: Woff2CompressConverter,
    FontToolsConverter.name: FontToolsConverter,
    NullConverter.name: NullConverter,
}


def get_converter(name: str, **kwargs) -> Converter:
    try:
        cls = CONVERTERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown converter '{name}', choose from {', '.join(sorted(CONVERTERS))}"
        )
    if cls is Woff2CompressConverter:
        return cls(**kwargs)
    return cls()


def convert_many(
    converter: Converter,
    downloads: list[DownloadResult],
    jobs: int = DEFAULT_JOBS,
    keep_source: bool = False,
    cancel_event: Optional[threading.Event] = None,
) -> list[ConversionResult]:
    """Convert every successful download. ToolMissingError is raised as soon
    as any worker hits it, other failures end up in the results."""
    cancel_event = cancel_event or threading.Event()

    def _convert(download: DownloadResult):
        if cancel_event.is_set():
            raise CancelledError(f"{download.variant.key} was not converted")
        output_path = converter.convert(download.path)
        if not keep_source and output_path != download.path:
            try:
                os.remove(download.path)
            except OSError as e:
                log.warning(f"Could not delete {download.path}: {e}")
        return output_path

    todo = [d for d in downloads if d.ok]
    results = {}
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = {executor.submit(_convert, d): d for d in todo}
        try:
            for future in as_completed(futures):
                download = futures[future]
                try:
                    output_path = future.result()
                except (ConversionError, StorageError, CancelledError) as e:
                    log.error(f"{download.variant.key}: {e}")
                    results[download.variant] = ConversionResult(
                        download.variant, download.path, error=e
                    )
                else:
                    log.debug(f"Converted {download.path.name} to {output_path.name}")
                    results[download.variant] = ConversionResult(
                        download.variant, download.path, output_path
                    )
        except (ToolMissingError, KeyboardInterrupt):
            cancel_event.set()
            raise
    return [results[d.variant] for d in todo]
