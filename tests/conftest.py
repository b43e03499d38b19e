import json
import threading

import pytest
import requests

from gfontapi.convert import Converter
from gfontapi.exceptions import ConversionError


API_URL = "https://www.googleapis.com/webfonts/v1/webfonts"

OPEN_SANS = {
    "family": "Open Sans",
    "category": "sans-serif",
    "subsets": ["latin", "latin-ext"],
    "variants": ["regular", "700"],
    "files": {
        "regular": "https://fonts.gstatic.com/s/opensans/OpenSans-Regular.ttf",
        "700": "https://fonts.gstatic.com/s/opensans/OpenSans-Bold.ttf",
    },
}

LORA = {
    "family": "Lora",
    "category": "serif",
    "subsets": ["latin"],
    "variants": ["regular", "italic", "700", "700italic"],
    "files": {
        "700italic": "https://fonts.gstatic.com/s/lora/Lora-BoldItalic.ttf",
        "regular": "https://fonts.gstatic.com/s/lora/Lora-Regular.ttf",
        "700": "https://fonts.gstatic.com/s/lora/Lora-Bold.ttf",
        "italic": "https://fonts.gstatic.com/s/lora/Lora-Italic.ttf",
    },
}

ALL_FAMILIES = [LORA, OPEN_SANS]


class FakeResponse:
    def __init__(self, status_code=200, body=b"", chunks=None):
        self.status_code = status_code
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf8")
        self.content = body
        self.headers = {"content-length": str(len(body))}
        self._chunks = chunks

    def json(self):
        return json.loads(self.content.decode("utf8"))

    def iter_content(self, chunk_size=1):
        if self._chunks is not None:
            for chunk in self._chunks:
                if isinstance(chunk, Exception):
                    raise chunk
                yield chunk
            return
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Answers GET requests with handler(url, params). A handler may return a
    FakeResponse, raise, or return a list which is consumed one item per
    call."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.lock = threading.Lock()

    def get(self, url, params=None, stream=False, timeout=None):
        with self.lock:
            self.calls.append((url, dict(params or {})))
            key = url
            if params and params.get("family"):
                key = (url, params["family"])
            answer = self.routes.get(key, FakeResponse(404))
            if isinstance(answer, list):
                answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def font_calls(self):
        return [c for c in self.calls if c[0] != API_URL]


def api_routes(*families, family_answers=None):
    """Routes for the webfonts api. The family query only knows the exact
    names, like the real api."""
    routes = {API_URL: FakeResponse(200, {"items": list(families) or ALL_FAMILIES})}
    for family in families or ALL_FAMILIES:
        routes[(API_URL, family["family"])] = FakeResponse(200, {"items": [family]})
    routes.update(family_answers or {})
    return routes


def font_routes(family, payload=b"\x00\x01\x00\x00font"):
    return {
        url: FakeResponse(200, payload + key.encode("utf8"))
        for key, url in family["files"].items()
    }


class CopyConverter(Converter):
    """Writes input bytes to a .woff2 file, failing for names in fail_on."""

    name = "copy"

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.converted = []
        self.checked = False

    def check(self):
        self.checked = True

    def convert(self, input_path):
        if input_path.name in self.fail_on:
            raise ConversionError(f"cannot convert {input_path.name}")
        output_path = self.output_path(input_path)
        output_path.write_bytes(input_path.read_bytes())
        self.converted.append(input_path.name)
        return output_path


@pytest.fixture
def no_sleep():
    delays = []
    return delays, delays.append


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection reset")
