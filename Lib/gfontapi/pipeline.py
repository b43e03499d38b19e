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
"""Resolve, download, convert and write the stylesheet for one family.

Stages run in order: resolving, downloading, converting, writing and done.
Errors that hit every variant (auth, unknown family, missing converter)
move the run to the failed stage straight away. Errors that hit a single
variant are collected in the report and the run carries on with the
variants that are left.
"""
from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from gfontapi.constants import DEFAULT_JOBS, STYLESHEET_NAME
from gfontapi.convert import Converter, convert_many
from gfontapi.download import DownloadManager
from gfontapi.exceptions import PipelineError
from gfontapi.items import PipelineReport, VariantFailure
from gfontapi.resolver import FontResolver
from gfontapi.stylesheet import build_entries, write_stylesheet
from gfontapi.utils import mkdir


log = logging.getLogger("gfontapi.pipeline")


class Stage(Enum):
    RESOLVING = "resolving"
    DOWNLOADING = "downloading"
    CONVERTING = "converting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


class Pipeline:
    def __init__(
        self,
        resolver: FontResolver,
        downloader: DownloadManager,
        converter: Converter,
        stylesheet_name: str = STYLESHEET_NAME,
        variants: Optional[Iterable[str]] = None,
        jobs: int = DEFAULT_JOBS,
        keep_source: bool = False,
        on_stage: Optional[Callable[[Stage], None]] = None,
    ):
        self.resolver = resolver
        self.downloader = downloader
        self.converter = converter
        self.stylesheet_name = stylesheet_name
        self.variants = list(variants) if variants else None
        self.jobs = jobs
        self.keep_source = keep_source
        self.on_stage = on_stage
        # Shared with the downloader so a single cancel() stops both pools
        self.cancel_event = downloader.cancel_event
        self.stage = None
        self.failed_stage = None

    @property
    def target_dir(self) -> Path:
        return self.downloader.target_dir

    @property
    def stylesheet_path(self) -> Path:
        return self.target_dir / self.stylesheet_name

    def cancel(self):
        """Stop handing out new per variant work. Work already in flight is
        allowed to finish."""
        log.warning("Cancelling, waiting for running jobs to finish")
        self.cancel_event.set()

    def _enter(self, stage: Stage, report: PipelineReport):
        self.stage = report.stage = stage
        log.debug(f"Stage: {stage.value}")
        if self.on_stage:
            self.on_stage(stage)

    def run(self, family_name: str) -> PipelineReport:
        report = PipelineReport()
        try:
            self._run(family_name, report)
        except BaseException:
            self.failed_stage = self.stage
            self._enter(Stage.FAILED, report)
            raise
        return report

    def _run(self, family_name: str, report: PipelineReport):
        self._enter(Stage.RESOLVING, report)
        # Fail before touching the network for fonts if the converter is
        # unusable.
        self.converter.check()
        family = self.resolver.resolve(family_name)
        if self.variants:
            family = family.select(self.variants)
        report.family = family

        self._enter(Stage.DOWNLOADING, report)
        mkdir(self.target_dir)
        downloads = self.downloader.download(family)
        for d in downloads:
            if not d.ok:
                report.failures.append(VariantFailure(d.variant, "download", d.error))
        if not any(d.ok for d in downloads):
            raise PipelineError(
                f"No {family.name} variant could be downloaded", report.failures
            )

        self._enter(Stage.CONVERTING, report)
        conversions = convert_many(
            self.converter,
            downloads,
            jobs=self.jobs,
            keep_source=self.keep_source,
            cancel_event=self.cancel_event,
        )
        for c in conversions:
            if not c.ok:
                report.failures.append(VariantFailure(c.variant, "convert", c.error))
        if not any(c.ok for c in conversions):
            raise PipelineError(
                f"No {family.name} variant could be converted", report.failures
            )

        self._enter(Stage.WRITING, report)
        entries = build_entries(family, conversions, self.target_dir)
        report.stylesheet = write_stylesheet(entries, self.stylesheet_path)
        report.entries = entries
        report.failures.sort(key=lambda f: f.variant.sort_key)

        self._enter(Stage.DONE, report)
        return report
