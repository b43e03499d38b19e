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
import os
import tempfile
from configparser import ConfigParser
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from gfontapi.constants import API_KEY_CONFIG_PATH, API_KEY_ENV_VAR
from gfontapi.exceptions import StorageError


log = logging.getLogger("gfontapi.utils")


# =====================================
# HELPER FUNCTIONS


def load_Google_Fonts_api_key(config_path: str = API_KEY_CONFIG_PATH):
    """Read the api key from an ini file with a [Credentials] section e.g

    [Credentials]
    key = <YOUR_API_KEY>
    """
    config = ConfigParser()
    config_filepath = os.path.expanduser(config_path)

    if os.path.isfile(config_filepath):
        config.read(config_filepath)
        if config.has_section("Credentials"):
            credentials = config.items("Credentials")
            if credentials:
                return credentials[0][1].strip() or None
    return None


def get_api_key(cli_api_key: Optional[str] = None, config_path=API_KEY_CONFIG_PATH):
    """Pick the api key. The command line wins over the environment, which
    wins over the config file. Empty values are ignored."""
    if cli_api_key:
        return cli_api_key
    env_key = os.environ.get(API_KEY_ENV_VAR, "").strip()
    if env_key:
        return env_key
    return load_Google_Fonts_api_key(config_path)


def mkdir(path: Union[str, Path]) -> Path:
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Cannot create directory {path}: {e}") from e
    return path


@contextmanager
def atomic_write(dst: Union[str, Path], mode: str = "wb", **kwargs):
    """Write to a temporary file next to dst and move it into place once
    the block exits cleanly. dst is left untouched on failure."""
    dst = Path(dst)
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=dst.parent, prefix=f".{dst.name}.", suffix=".part"
        )
    except OSError as e:
        raise StorageError(f"Cannot write {dst}: {e}") from e
    try:
        with os.fdopen(fd, mode, **kwargs) as doc:
            yield doc
        # mkstemp creates files readable by the owner only
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, dst)
    except StorageError:
        _remove_quietly(tmp_path)
        raise
    except OSError as e:
        _remove_quietly(tmp_path)
        raise StorageError(f"Cannot write {dst}: {e}") from e
    except BaseException:
        _remove_quietly(tmp_path)
        raise


def _remove_quietly(path):
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def relative_url(path: Path, start: Path) -> str:
    """Posix style path of path relative to the directory start."""
    return Path(os.path.relpath(path, start)).as_posix()
