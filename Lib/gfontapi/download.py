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
"""Download the font files of a family into a target directory.

Variants are fetched concurrently by a bounded pool of worker threads. A
variant which fails is reported in its DownloadResult and never stops the
others. Files are streamed to a temporary file first, so the target
directory never contains a truncated font.
"""
from __future__ import annotations
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

import requests  # type: ignore
from rich.progress import Progress

from gfontapi.constants import (
    DEFAULT_ATTEMPTS,
    DEFAULT_BACKOFF,
    DEFAULT_JOBS,
    DEFAULT_TIMEOUT,
    DOWNLOAD_CHUNK_SIZE,
    RETRYABLE_STATUS_CODES,
)
from gfontapi.exceptions import CancelledError, NetworkError, StorageError
from gfontapi.items import DownloadResult, FontFamily, Variant
from gfontapi.utils import atomic_write, mkdir


log = logging.getLogger("gfontapi.download")


def download_file(session, url: str, dst_path: Path, timeout=DEFAULT_TIMEOUT, on_chunk=None):
    """Stream url to dst_path. Raises NetworkError or StorageError."""
    try:
        request = session.get(url, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(f"Failed to GET {url}: {e}") from e

    with request:
        if request.status_code != 200:
            raise NetworkError(
                f"Failed to GET {url}: status {request.status_code}",
                retryable=request.status_code in RETRYABLE_STATUS_CODES,
                status=request.status_code,
            )
        total = int(request.headers.get("content-length", 0) or 0)
        with atomic_write(dst_path) as downloaded_file:
            try:
                for chunk in request.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    downloaded_file.write(chunk)
                    if on_chunk:
                        on_chunk(len(chunk), total)
            except requests.RequestException as e:
                # requests exceptions are OSErrors, keep them apart from
                # failures writing to disk.
                raise NetworkError(f"Error while downloading {url}: {e}") from e
    return dst_path


class DownloadManager:
    def __init__(
        self,
        target_dir: "str | Path",
        session: Optional[requests.Session] = None,
        jobs: int = DEFAULT_JOBS,
        attempts: int = DEFAULT_ATTEMPTS,
        backoff: float = DEFAULT_BACKOFF,
        timeout: float = DEFAULT_TIMEOUT,
        cancel_event: Optional[threading.Event] = None,
        progress: Optional[Progress] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.target_dir = Path(target_dir)
        self.session = session or requests.Session()
        self.jobs = jobs
        self.attempts = attempts
        self.backoff = backoff
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        self.progress = progress
        self.sleep = sleep

    def destination(self, family: FontFamily, variant: Variant) -> Path:
        return self.target_dir / variant.filename(family.name)

    def fetch(self, family: FontFamily, variant: Variant) -> Path:
        """Download a single variant, retrying transient failures with an
        exponential backoff."""
        dst = self.destination(family, variant)
        task = None
        if self.progress is not None:
            task = self.progress.add_task(f"{family.slug}=={variant.style_name}", total=None)

        def on_chunk(size, total):
            if task is not None:
                self.progress.update(task, advance=size, total=total or None)

        try:
            for attempt in range(1, self.attempts + 1):
                if self.cancel_event.is_set():
                    raise CancelledError(f"{variant.key} was not downloaded")
                try:
                    return download_file(
                        self.session, variant.url, dst, self.timeout, on_chunk
                    )
                except NetworkError as e:
                    if not e.retryable or attempt == self.attempts:
                        raise
                    delay = self.backoff * 2 ** (attempt - 1)
                    log.warning(
                        f"{variant.key}: attempt {attempt}/{self.attempts} failed "
                        f"({e}), retrying in {delay:.1f}s"
                    )
                    if task is not None:
                        self.progress.reset(task)
                    self.sleep(delay)
        finally:
            if task is not None:
                self.progress.remove_task(task)

    def download(self, family: FontFamily) -> list[DownloadResult]:
        mkdir(self.target_dir)
        results = {}
        with ThreadPoolExecutor(max_workers=self.jobs) as executor:
            futures = {
                executor.submit(self.fetch, family, variant): variant
                for variant in family.variants
            }
            try:
                for future in as_completed(futures):
                    variant = futures[future]
                    try:
                        path = future.result()
                    except (NetworkError, StorageError, CancelledError) as e:
                        log.error(f"{family.name} {variant.key}: {e}")
                        results[variant] = DownloadResult(variant, error=e)
                    else:
                        log.debug(f"Downloaded {variant.url} to {path}")
                        results[variant] = DownloadResult(variant.with_path(path), path)
            except KeyboardInterrupt:
                # Queued variants bail out once they see the event, the
                # executor then only waits for the ones already running.
                self.cancel_event.set()
                raise
        return [results[v] for v in family.variants]
