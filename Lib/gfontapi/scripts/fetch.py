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
"""
gfontapi:

Download a Google Fonts family, compress it to WOFF2 and write a fonts.css
file declaring a @font-face rule for each style.

Usage:

$ export GFONT_API_KEY=<YOUR_API_KEY>
$ gfontapi Open Sans
$ gfontapi "Open Sans" --target-dir static/fonts --variants regular,700

The family name may be quoted or not, every positional argument is joined
into a single name. Get an api key from the Google developer console:
https://developers.google.com/fonts/docs/developer_api
"""
import json
import logging
import sys

import requests  # type: ignore
from rich.console import Console
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn

from gfontapi import __version__
from gfontapi.argparse import GFontArgumentParser
from gfontapi.constants import (
    API_KEY_CONFIG_PATH,
    API_KEY_ENV_VAR,
    DEFAULT_ATTEMPTS,
    DEFAULT_JOBS,
    DEFAULT_TARGET_DIR,
    DEFAULT_TIMEOUT,
    STYLESHEET_NAME,
)
from gfontapi.convert import CONVERTERS, NullConverter, get_converter
from gfontapi.download import DownloadManager
from gfontapi.exceptions import (
    AuthError,
    Error,
    NotFoundError,
    PipelineError,
    ToolMissingError,
)
from gfontapi.logging import setup_logging
from gfontapi.pipeline import Pipeline
from gfontapi.resolver import FontResolver
from gfontapi.utils import atomic_write, get_api_key


log = logging.getLogger("gfontapi")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_AUTH = 3
EXIT_NOT_FOUND = 4
EXIT_TOOL_MISSING = 5
EXIT_INTERRUPTED = 130

AUTH_HELP = (
    "Using gfontapi requires an API key. Pass it to the program in one of the "
    "following ways:\n"
    f"    - export {API_KEY_ENV_VAR}=<YOUR_API_KEY>\n"
    "    - gfontapi --api-key=<YOUR_API_KEY> ...\n"
    f"    - a [Credentials] section in {API_KEY_CONFIG_PATH}"
)


def positive_int(value):
    value = int(value)
    if value < 1:
        raise ValueError(value)
    return value


def positive_float(value):
    value = float(value)
    if not value > 0:
        raise ValueError(value)
    return value


def build_parser():
    parser = GFontArgumentParser(
        prog="gfontapi",
        description="Manage all your google fonts from the terminal.",
    )
    parser.add_argument(
        "fontname",
        nargs="+",
        help="Name of the family to download, e.g Open Sans. Quoting is optional",
    )
    parser.add_argument(
        "-t",
        "--target-dir",
        default=DEFAULT_TARGET_DIR,
        help=f"Directory to place the converted fonts. Default is ./{DEFAULT_TARGET_DIR}",
    )
    parser.add_argument(
        "-k",
        "--api-key",
        help=(
            "Google api key generated from the developer console. Can also be "
            f"set with {API_KEY_ENV_VAR}=<API_KEY>"
        ),
    )
    parser.add_argument(
        "--variants",
        type=lambda s: [v for v in s.split(",") if v.strip()],
        help="Comma separated variants to fetch, e.g regular,italic,700. "
        "Defaults to every variant of the family",
    )
    conversion = parser.add_mutually_exclusive_group()
    conversion.add_argument(
        "--converter",
        choices=sorted(c for c in CONVERTERS if c != NullConverter.name),
        default="woff2_compress",
        help="Tool used to compress fonts to WOFF2. Default is woff2_compress",
    )
    conversion.add_argument(
        "--skip-conversion",
        action="store_true",
        help="Keep the downloaded TTF files and reference them in the stylesheet",
    )
    parser.add_argument(
        "--woff2-compress",
        metavar="PATH",
        help="Path to the woff2_compress binary",
    )
    parser.add_argument(
        "--keep-ttf",
        action="store_true",
        help="Don't delete the TTF files once they are converted",
    )
    parser.add_argument(
        "-j", "--jobs", type=positive_int, default=DEFAULT_JOBS,
        help=f"Number of concurrent downloads and conversions. Default is {DEFAULT_JOBS}",
    )
    parser.add_argument(
        "--timeout", type=positive_float, default=DEFAULT_TIMEOUT,
        help=f"Seconds before a request or conversion is abandoned. Default is {DEFAULT_TIMEOUT}",
    )
    parser.add_argument(
        "--retries", type=positive_int, default=DEFAULT_ATTEMPTS,
        help=f"Download attempts per file. Default is {DEFAULT_ATTEMPTS}",
    )
    parser.add_argument(
        "--report",
        metavar="PATH",
        help="Write a JSON summary of the downloaded variants and failures to PATH",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )
    return parser


def write_report(report, path):
    with atomic_write(path, "w", encoding="utf-8") as doc:
        json.dump(report.to_json(), doc, indent=4)


def make_session():
    session = requests.Session()
    session.headers["User-Agent"] = f"gfontapi/{__version__}"
    return session


def main(args=None):
    parser = build_parser()
    args = parser.parse_args(args)
    setup_logging("gfontapi", args, __name__)

    family_name = " ".join(args.fontname)
    if args.skip_conversion:
        converter = NullConverter()
    else:
        converter = get_converter(
            args.converter, binary=args.woff2_compress, timeout=args.timeout
        )

    console = Console(stderr=True)
    session = make_session()
    resolver = FontResolver(get_api_key(args.api_key), session, timeout=args.timeout)

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        DownloadColumn(),
        console=console,
        transient=True,
    ) as progress:
        downloader = DownloadManager(
            args.target_dir,
            session=session,
            jobs=args.jobs,
            attempts=args.retries,
            timeout=args.timeout,
            progress=progress,
        )
        pipeline = Pipeline(
            resolver,
            downloader,
            converter,
            stylesheet_name=STYLESHEET_NAME,
            variants=args.variants,
            jobs=args.jobs,
            keep_source=args.keep_ttf or args.skip_conversion,
            on_stage=lambda stage: log.debug(f"{family_name}: {stage.value}"),
        )
        try:
            report = pipeline.run(family_name)
        except AuthError as e:
            log.error(f"{e}\n{AUTH_HELP}")
            return EXIT_AUTH
        except NotFoundError as e:
            log.error(str(e))
            return EXIT_NOT_FOUND
        except ToolMissingError as e:
            log.error(str(e))
            return EXIT_TOOL_MISSING
        except PipelineError as e:
            for failure in e.failures:
                log.error(f"  {failure}")
            log.error(f"{e}. No stylesheet was written")
            return EXIT_FAILED
        except (Error, ValueError) as e:
            log.error(str(e))
            return EXIT_FAILED
        except KeyboardInterrupt:
            pipeline.cancel()
            stage = pipeline.failed_stage
            log.error(f"Interrupted while {stage.value if stage else 'starting'}")
            return EXIT_INTERRUPTED

    slug = report.family.slug
    for entry in report.entries:
        variant = next(
            v for v in report.family.variants
            if (v.weight, v.style) == (entry.weight, entry.style)
        )
        console.print(f" [green]+[/green] {slug}[dim]=={variant.style_name}[/dim]")
    if report.failures:
        log.warning(
            f"{len(report.failures)} of {len(report.family.variants)} variants failed:\n"
            + "\n".join(f"  - {f}" for f in report.failures)
        )
    log.info(f"Finished writing {report.stylesheet}")
    if args.report:
        try:
            write_report(report, args.report)
        except Error as e:
            log.error(str(e))
            return EXIT_FAILED
        log.info(f"Wrote report to {args.report}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
