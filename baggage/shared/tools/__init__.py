# Shared Tools
"""
Email provider adapters.
"""

from baggage.shared.tools.email import (
    EmailSender,
    SendGridEmailSender,
    SesEmailSender,
    build_email_sender,
)

__all__ = [
    "EmailSender",
    "SendGridEmailSender",
    "SesEmailSender",
    "build_email_sender",
]
