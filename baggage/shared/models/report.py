"""
Baggage Report Models

Pydantic models for the inbound request, the validated report record and
the outbound notification message.
"""

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Required on every report, checked in this order
REQUIRED_FIELDS: tuple[str, ...] = (
    "full_name",
    "email",
    "phone",
    "date",
    "flight",
    "station",
    "incident_type",
    "damage_desc",
)

# Additionally required when incident_type is "Damaged"
DAMAGE_FIELDS: tuple[str, ...] = ("brand_dmg", "age_years", "purchase_price")

DAMAGED_INCIDENT_TYPE = "Damaged"
DEFAULT_ATTACHMENT_TYPE = "application/octet-stream"


class InboundRequest(BaseModel):
    """
    The parts of a platform HTTP event the handler reads.

    Accepts the Netlify/API Gateway REST shape (``httpMethod``) and the
    API Gateway HTTP API v2 shape (``requestContext.http.method``).
    """

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="", description="HTTP method, upper-cased")
    headers: dict[str, str] = Field(default_factory=dict, description="Headers, lower-cased names")
    body: str | None = Field(default=None, description="Raw body as delivered by the platform")
    is_base64_encoded: bool = Field(default=False, description="Body is base64 transport-encoded")
    raw_url: str = Field(default="", description="Full request URL, if provided")
    path: str = Field(default="", description="Request path")
    raw_query_string: str = Field(default="", description="Raw query string, if provided")

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "InboundRequest":
        """Build from a Lambda/Netlify event dict."""
        method = event.get("httpMethod")
        if not method:
            method = ((event.get("requestContext") or {}).get("http") or {}).get("method", "")

        headers = {
            str(name).lower(): str(value)
            for name, value in (event.get("headers") or {}).items()
            if value is not None
        }

        return cls(
            method=str(method or "").upper(),
            headers=headers,
            body=event.get("body"),
            is_base64_encoded=bool(event.get("isBase64Encoded")),
            raw_url=event.get("rawUrl") or "",
            path=event.get("path") or event.get("rawPath") or "",
            raw_query_string=event.get("rawQueryString") or "",
        )

    @property
    def content_type(self) -> str:
        """Content-Type header as sent (case preserved for the boundary)."""
        return self.headers.get("content-type", "")

    def body_bytes(self) -> bytes:
        """Body with the platform's base64 transport encoding removed."""
        if not self.body:
            return b""
        if self.is_base64_encoded:
            return base64.b64decode(self.body)
        return self.body.encode("utf-8")


class UploadedFile(BaseModel):
    """A file part from a multipart submission."""

    model_config = ConfigDict(frozen=True)

    field_name: str = Field(..., description="Form field the file was posted under")
    filename: str = Field(default="", description="Client-supplied filename")
    content_type: str | None = Field(default=None, description="Declared MIME type")
    content: bytes = Field(default=b"", description="File bytes")

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class BaggageReport(BaseModel):
    """
    Validated view of a normalized submission.

    Every member is a trimmed string, empty when the client did not send it.
    Unknown fields are kept in the normalized field map for rendering only.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    full_name: str = ""
    email: str = ""
    phone: str = ""
    date: str = ""
    flight: str = ""
    station: str = ""
    incident_type: str = ""
    damage_desc: str = ""

    # Damage claims
    brand_dmg: str = ""
    age_years: str = ""
    purchase_price: str = ""

    # Honeypot, never rendered in the real form
    fax: str = ""

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "BaggageReport":
        return cls.model_validate(fields)

    @property
    def is_bot_submission(self) -> bool:
        return bool(self.fax.strip())

    @property
    def is_damage_claim(self) -> bool:
        return self.incident_type == DAMAGED_INCIDENT_TYPE

    @property
    def station_code(self) -> str:
        """First three characters of the upper-cased station."""
        return self.station.upper()[:3]

    def missing_fields(self) -> list[str]:
        """
        Required members that are empty, in validation order.

        Damage fields are only required for damage claims.
        """
        required = REQUIRED_FIELDS + (DAMAGE_FIELDS if self.is_damage_claim else ())
        return [name for name in required if not getattr(self, name)]


class EmailAttachment(BaseModel):
    """File attached to the outbound notification."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(default="file", description="Attachment filename")
    content_type: str = Field(default=DEFAULT_ATTACHMENT_TYPE, description="MIME content type")
    content: bytes = Field(..., description="Attachment bytes")
    disposition: str = Field(default="attachment", description="Content-Disposition")

    @property
    def content_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")

    @property
    def size_bytes(self) -> int:
        return len(self.content)


class OutboundMessage(BaseModel):
    """
    A rendered report notification ready for the email provider.

    Constructed once per request and sent once, never retried.
    """

    model_config = ConfigDict(frozen=True)

    recipients: list[str] = Field(..., min_length=1, description="To addresses")
    from_address: str | None = Field(default=None, description="Sender address")
    from_name: str | None = Field(default=None, description="Sender display name")
    subject: str = Field(..., description="Email subject line")
    html: str = Field(..., description="HTML body")
    attachments: list[EmailAttachment] = Field(default_factory=list, description="Uploads")
    cc: str | None = Field(default=None, description="Submitter copy")


class HandlerResponse(BaseModel):
    """HTTP response returned to the hosting platform."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str
    headers: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the platform's response shape."""
        response: dict[str, Any] = {"statusCode": self.status_code, "body": self.body}
        if self.headers:
            response["headers"] = self.headers
        return response
