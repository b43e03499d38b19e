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
"""Look up a family on the Google Fonts Developer API.

The API is queried with the requested family first. Since the family
parameter is matched exactly by the API, we fall back to the full family
list and compare names case and whitespace insensitively, e.g
"open   SANS" resolves to "Open Sans".
"""
from __future__ import annotations
import logging
from typing import Optional

import requests  # type: ignore

from gfontapi.constants import DEFAULT_TIMEOUT, WEBFONTS_API_URL
from gfontapi.exceptions import AuthError, NetworkError, NotFoundError
from gfontapi.items import FontFamily, normalize_family_name


log = logging.getLogger("gfontapi.resolver")


AUTH_ERROR_REASONS = {"keyInvalid", "keyExpired", "API_KEY_INVALID", "forbidden"}


def is_auth_error(response) -> bool:
    if response.status_code in (401, 403):
        return True
    if response.status_code != 400:
        return False
    try:
        error = response.json().get("error", {})
    except (ValueError, AttributeError):
        return False
    if not isinstance(error, dict):
        return False
    if "api key" in str(error.get("message", "")).lower():
        return True
    reasons = {e.get("reason") for e in error.get("errors", [])}
    reasons |= {d.get("reason") for d in error.get("details", [])}
    return bool(reasons & AUTH_ERROR_REASONS)


class FontResolver:
    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        url: str = WEBFONTS_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.url = url
        self.timeout = timeout

    def _get(self, **params):
        params["key"] = self.api_key
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise NetworkError(f"Timed out querying {self.url}") from e
        except requests.RequestException as e:
            # The exception text holds the full request url, key included.
            raise NetworkError(
                f"Failed to fetch {self.url}: {type(e).__name__}"
            ) from e

        if is_auth_error(response):
            raise AuthError(
                f"The Google Fonts API rejected the api key "
                f"(status {response.status_code})"
            )
        if response.status_code == 404:
            raise NotFoundError(f"{self.url} returned 404")
        if response.status_code != 200:
            raise NetworkError(
                f"Failed to fetch {self.url}: status {response.status_code}",
                retryable=response.status_code >= 500 or response.status_code == 429,
                status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(
                f"Could not parse response from {self.url}", status=response.status_code
            ) from e
        if not isinstance(data, dict):
            raise NetworkError(
                f"Unexpected response from {self.url}", status=response.status_code
            )
        return data.get("items", [])

    def families(self, family: Optional[str] = None) -> list[dict]:
        """Raw family items from the API. All families if family is None."""
        if family:
            return self._get(family=family)
        return self._get()

    @staticmethod
    def find(items: list[dict], family_name: str) -> Optional[dict]:
        wanted = normalize_family_name(family_name)
        for item in items:
            if normalize_family_name(item.get("family", "")) == wanted:
                return item
        return None

    def resolve(self, family_name: str) -> FontFamily:
        if not self.api_key:
            raise AuthError("An api key is required to query the Google Fonts API")
        query = " ".join(family_name.split())
        if not query:
            raise NotFoundError("No family name given")

        log.debug(f"Querying {self.url} for '{query}'")
        try:
            item = self.find(self.families(query), query)
        except (NotFoundError, NetworkError) as e:
            if isinstance(e, NetworkError) and e.status is None:
                # The server never answered, the full list won't fare better
                raise
            log.debug(f"Family query for '{query}' failed: {e}")
            item = None

        if item is None:
            log.debug(f"'{query}' not matched exactly, searching the full family list")
            item = self.find(self.families(), query)
        if item is None:
            raise NotFoundError(f"Google Fonts has no family named '{query}'")

        family = FontFamily.from_gf_json(item)
        if not family.variants:
            raise NotFoundError(f"{family.name} has no downloadable variants")
        log.info(f"Found {family.name} with {len(family.variants)} variants")
        return family
