from typing import Any


class RelayError(Exception):
    """Base error for every failure the relay turns into a JSON response."""

    status_code = 500

    def __init__(self, message: str, upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.upstream_status = upstream_status

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.upstream_status is not None:
            payload["status"] = self.upstream_status
        return payload


class InvalidRequest(RelayError):
    status_code = 400

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class Misconfiguration(RelayError):
    status_code = 500


class UpstreamFailure(RelayError):
    status_code = 502


class InternalFailure(RelayError):
    status_code = 500
