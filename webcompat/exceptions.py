"""Exception types for pywebcompat."""

from __future__ import annotations


class WebCompatError(Exception):
    """Base exception for expected application errors."""


class NetworkError(WebCompatError):
    """Raised when a network operation fails."""

    def __init__(self, url: str, *, cause: str | None = None) -> None:
        detail = f"Unable to connect while downloading {url}"
        if cause:
            detail = f"{detail} ({cause})"
        super().__init__(detail)


class RequestTimeoutError(WebCompatError):
    """Raised when a request times out."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Request timed out for {url}")


class HttpStatusError(WebCompatError):
    """Raised when a non-200 HTTP response is returned."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Request failed with HTTP {status_code} for {url}")


class ContentError(WebCompatError):
    """Raised when a response body is invalid or unexpectedly empty."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Received empty or invalid JSON content from {url}")


class DatasetError(WebCompatError):
    """Base class for dataset loading failures."""


class DatasetNotFoundError(DatasetError):
    """Raised when a dataset file is missing and may not be downloaded."""

    def __init__(self, name: str, path: str) -> None:
        self.path = path
        super().__init__(
            f"{name} dataset not found at {path}. Run `webcompat download` or set the path "
            "via environment variables."
        )


class DatasetFormatError(DatasetError):
    """Raised when a dataset file cannot be parsed into the expected shape."""

    def __init__(self, name: str, path: str, *, reason: str) -> None:
        self.path = path
        super().__init__(f"{name} dataset at {path} is invalid: {reason}")
