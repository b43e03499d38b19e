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
"""Errors raised by the gfontapi pipeline.

Errors which affect every variant of a family (AuthError, NotFoundError,
ToolMissingError) abort a run. Errors tied to a single variant
(NetworkError, StorageError, ConversionError) are collected and reported
once the run finishes.
"""


class Error(Exception):
    """Base for gfontapi errors."""


class AuthError(Error):
    """The API key is missing or was rejected by the Google Fonts API."""


class NotFoundError(Error):
    """The requested family does not exist on Google Fonts."""


class NetworkError(Error):
    """A request failed. `status` is the HTTP status code if the server
    answered. `retryable` is False for definitive HTTP errors."""

    def __init__(self, message, retryable=True, status=None):
        super().__init__(message)
        self.retryable = retryable
        self.status = status


class StorageError(Error, OSError):
    """A file could not be written to the target directory."""


class ToolMissingError(Error):
    """The external converter could not be located."""


class ConversionError(Error):
    """The converter failed on a single file."""


class PipelineError(Error):
    """No variant made it through to the stylesheet."""

    def __init__(self, message, failures=()):
        super().__init__(message)
        self.failures = list(failures)


class CancelledError(Error):
    """The run was interrupted before this piece of work started."""
