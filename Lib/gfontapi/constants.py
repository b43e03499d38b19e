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

# =====================================
# GLOBAL CONSTANTS DEFINITIONS

WEBFONTS_API_URL = "https://www.googleapis.com/webfonts/v1/webfonts"

API_KEY_ENV_VAR = "GFONT_API_KEY"
API_KEY_CONFIG_PATH = "~/.gf-api-key"

DEFAULT_TARGET_DIR = "fonts"
STYLESHEET_NAME = "fonts.css"

DEFAULT_JOBS = 4
DEFAULT_TIMEOUT = 30
DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF = 0.5
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Status codes worth retrying. Anything else in the 4xx range is final.
RETRYABLE_STATUS_CODES = frozenset([408, 429, 500, 502, 503, 504])

WOFF2_COMPRESS = "woff2_compress"
WOFF2_COMPRESS_LOCATIONS = [
    "~/.gfontapi/bin/woff2_compress",
    "/usr/local/bin/woff2_compress",
]

# weight -> style name, in the order Google Fonts lists them
WEIGHT_NAMES = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}

CSS_FORMATS = {
    ".woff2": "woff2",
    ".woff": "woff",
    ".ttf": "truetype",
    ".otf": "opentype",
}
