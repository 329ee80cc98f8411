class SweeperError(Exception):
    pass


class InvalidInput(SweeperError):
    """Client error — never retried, mapped to HTTP 400."""

    message = "Invalid input"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class InvalidAccount(InvalidInput):
    message = "Invalid account"


class InvalidAction(InvalidInput):
    message = "Invalid action"


class UpstreamError(SweeperError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamRateLimited(UpstreamError):
    """HTTP 429 (or RPC equivalent) — retried by with_retry()."""


class UpstreamUnavailable(UpstreamError):
    pass


class SwapDecodeError(SweeperError):
    pass
