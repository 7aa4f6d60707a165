"""
SubmitBaggageReport Lambda

Accepts baggage irregularity reports posted from the public form and relays
them to the baggage inboxes by email.

Flow:
    Report form POST
    → Netlify function / API Gateway
    → This Lambda
    → SendGrid or SES: report notification
"""

from lambdas.submit_report.attachment_handler import select_attachments
from lambdas.submit_report.field_normalizer import normalize_fields, normalize_key
from lambdas.submit_report.form_parser import ParsedForm, parse_form
from lambdas.submit_report.handler import SubmissionHandler, lambda_handler

__all__ = [
    "ParsedForm",
    "SubmissionHandler",
    "lambda_handler",
    "normalize_fields",
    "normalize_key",
    "parse_form",
    "select_attachments",
]
