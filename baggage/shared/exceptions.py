"""
Custom Exceptions for the Baggage Report Relay

Request rejections carry the HTTP status code and the exact message the
caller receives. Everything else surfaces as a 500 from the handler.
"""

from dataclasses import dataclass
from typing import Any


class BaggageReportError(Exception):
    """Base exception for the baggage report relay."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class RequestRejectedError(BaggageReportError):
    """The request cannot be processed; answered with ``status_code``."""

    status_code: int = 400

    def __init__(self, message: str, status_code: int | None = None, **context: Any) -> None:
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message, **context)


class MethodNotAllowedError(RequestRejectedError):
    """Only POST submissions are accepted."""

    status_code = 405

    def __init__(self, method: str | None) -> None:
        self.method = method
        super().__init__("Method Not Allowed", method=method)


class EmptyBodyError(RequestRejectedError):
    """The request carried no body."""

    def __init__(self) -> None:
        super().__init__("No request body found.")


@dataclass
class UnsupportedContentTypeError(RequestRejectedError):
    """Body is neither multipart nor urlencoded form data."""

    content_type: str

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(
            f"Unsupported Content-Type: {content_type or '(none)'}.",
            content_type=content_type,
        )


@dataclass
class EmptyMultipartPayloadError(RequestRejectedError):
    """Multipart body yielded no parts in either parsing mode."""

    length: int

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(
            f"Empty multipart payload (length={length} bytes).",
            length=length,
        )


class HoneypotTriggeredError(RequestRejectedError):
    """The hidden ``fax`` field was filled in."""

    def __init__(self) -> None:
        super().__init__("Invalid submission")


@dataclass
class MissingFieldError(RequestRejectedError):
    """A required report field is empty."""

    field_name: str
    received_keys: list[str] | None = None

    def __init__(self, field_name: str, received_keys: list[str] | None = None) -> None:
        self.field_name = field_name
        self.received_keys = received_keys
        message = f"Missing: {field_name}"
        if received_keys is not None:
            message = f"{message} (received: {', '.join(received_keys)})"
        super().__init__(message, field_name=field_name)


class NoDestinationConfiguredError(RequestRejectedError):
    """Neither a primary nor a station inbox is configured."""

    status_code = 500

    def __init__(self, station_code: str) -> None:
        self.station_code = station_code
        super().__init__("No destination inbox configured.", station_code=station_code)


@dataclass
class EmailDeliveryError(BaggageReportError):
    """The email provider rejected or failed to accept the message."""

    provider: str  # "sendgrid", "ses"
    recipient: str | None = None
    error_message: str | None = None

    def __init__(
        self,
        provider: str,
        recipient: str | None = None,
        error_message: str | None = None,
    ) -> None:
        self.provider = provider
        self.recipient = recipient
        self.error_message = error_message
        super().__init__(
            f"{provider} send failed{f' for {recipient}' if recipient else ''}: "
            f"{error_message or 'Unknown error'}",
            provider=provider,
            recipient=recipient,
            error_message=error_message,
        )
