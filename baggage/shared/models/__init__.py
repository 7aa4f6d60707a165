# Shared Models
"""
Pydantic models for report submissions and notifications.
"""

from baggage.shared.models.report import (
    DAMAGE_FIELDS,
    REQUIRED_FIELDS,
    BaggageReport,
    EmailAttachment,
    HandlerResponse,
    InboundRequest,
    OutboundMessage,
    UploadedFile,
)

__all__ = [
    "DAMAGE_FIELDS",
    "REQUIRED_FIELDS",
    "BaggageReport",
    "EmailAttachment",
    "HandlerResponse",
    "InboundRequest",
    "OutboundMessage",
    "UploadedFile",
]
