# Shared Infrastructure for the Baggage Report Relay
"""
Shared infrastructure components.

This package provides:
- Pydantic models for the request, report record and outbound message
- Email provider adapters (SendGrid, SES)
- Configuration management
- Custom exceptions
"""

from baggage.shared.config import Settings, get_settings
from baggage.shared.exceptions import (
    BaggageReportError,
    EmailDeliveryError,
    MissingFieldError,
    NoDestinationConfiguredError,
    RequestRejectedError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "BaggageReportError",
    "EmailDeliveryError",
    "MissingFieldError",
    "NoDestinationConfiguredError",
    "RequestRejectedError",
]
