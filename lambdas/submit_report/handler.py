"""
SubmitBaggageReport Lambda Handler

Main entry point for baggage irregularity report submissions.
Validates the posted form and relays it to the baggage inboxes by email.

Trigger: HTTP POST (Netlify function / API Gateway proxy event)
Output: One notification email, response body "OK:<case_id>"

Flow:
1. Method and body gates
2. Parse the form body (multipart or urlencoded)
3. Normalize field keys
4. Debug short-circuit (debug=1 in URL or path)
5. Honeypot and required-field validation
6. Generate case ID and resolve recipients by station
7. Render the HTML report and select attachments
8. Send through the configured email provider
"""

import json
import logging
import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog
from email_validator import EmailNotValidError, validate_email

from baggage.notification.tools import generate_case_id, render_report_html, render_subject
from baggage.shared.config import Settings, get_settings
from baggage.shared.exceptions import (
    EmptyBodyError,
    HoneypotTriggeredError,
    MethodNotAllowedError,
    MissingFieldError,
    NoDestinationConfiguredError,
    RequestRejectedError,
)
from baggage.shared.models.report import (
    BaggageReport,
    HandlerResponse,
    InboundRequest,
    OutboundMessage,
)
from baggage.shared.tools.email import EmailSender, build_email_sender
from lambdas.submit_report.attachment_handler import select_attachments
from lambdas.submit_report.field_normalizer import normalize_fields
from lambdas.submit_report.form_parser import parse_form

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()

DEBUG_FLAG_PATTERN = re.compile(r"\bdebug=1\b")


def _request_id(context: Any) -> str:
    """Invocation ID from a Lambda context object or a Netlify context dict."""
    if isinstance(context, dict):
        return context.get("awsRequestId") or context.get("invocationId") or "n/a"
    return getattr(context, "aws_request_id", None) or "n/a"


def _is_debug_request(request: InboundRequest) -> bool:
    return any(
        DEBUG_FLAG_PATTERN.search(value)
        for value in (request.raw_url, request.path, request.raw_query_string)
        if value
    )


def _error_text(error: Exception) -> str:
    message = getattr(error, "message", None) or str(error)
    return message or type(error).__name__


def _server_error(error: Exception) -> HandlerResponse:
    return HandlerResponse(status_code=500, body=f"Server error: {_error_text(error)}")


def _submitter_cc(address: str, recipients: list[str]) -> str | None:
    """
    Submitter copy address, or None.

    Malformed addresses and addresses already on the To list are dropped so
    the provider does not reject the whole message.
    """
    if not address or address in recipients:
        return None
    try:
        validate_email(address, check_deliverability=False)
    except EmailNotValidError as e:
        log.warning("submitter_cc_skipped", reason="invalid_address", error=str(e))
        return None
    return address


class SubmissionHandler:
    """
    Single-pass pipeline for one report submission.

    Holds its configuration and email provider; reads no environment.
    """

    def __init__(
        self,
        settings: Settings,
        sender: EmailSender,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._sender = sender
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def handle(self, event: dict[str, Any], context: Any = None) -> dict[str, Any]:
        """
        Process one HTTP event.

        Args:
            event: Platform HTTP event
            context: Platform context

        Returns:
            Response dict with statusCode, body and optional headers
        """
        request_id = _request_id(context)

        try:
            request = InboundRequest.from_event(event)
            response = self._process(request, request_id)
        except RequestRejectedError as e:
            log.info(
                "submission_rejected",
                request_id=request_id,
                status_code=e.status_code,
                reason=e.message,
                error_type=type(e).__name__,
            )
            response = HandlerResponse(status_code=e.status_code, body=e.message)
        except Exception as e:
            log.error(
                "handler_failed",
                request_id=request_id,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            response = _server_error(e)

        return response.to_dict()

    def _process(self, request: InboundRequest, request_id: str) -> HandlerResponse:
        if request.method != "POST":
            raise MethodNotAllowedError(request.method)
        if not request.body:
            raise EmptyBodyError()

        log.info(
            "processing_submission",
            request_id=request_id,
            content_type=request.content_type.lower(),
            is_base64=request.is_base64_encoded,
        )

        form = parse_form(request)
        fields = normalize_fields(form.fields)
        received_keys = sorted(fields)

        log.info(
            "fields_normalized",
            request_id=request_id,
            received_keys=received_keys,
            file_count=len(form.files),
        )

        if _is_debug_request(request):
            return self._debug_response(request, received_keys)

        report = BaggageReport.from_fields(fields)

        if report.is_bot_submission:
            raise HoneypotTriggeredError()

        missing = report.missing_fields()
        if missing:
            raise MissingFieldError(
                missing[0],
                received_keys if self._settings.echo_received_keys else None,
            )

        case_id = generate_case_id(self._clock())
        station_code = report.station_code

        recipients = self._settings.recipients_for(station_code)
        if not recipients:
            raise NoDestinationConfiguredError(station_code)

        message = OutboundMessage(
            recipients=recipients,
            from_address=self._settings.from_address,
            from_name=self._settings.from_name,
            subject=render_subject(station_code, report.incident_type, case_id),
            html=render_report_html(fields, case_id),
            attachments=select_attachments(
                form.files,
                max_count=self._settings.max_attachments,
                max_size=self._settings.max_attachment_bytes,
            ),
            cc=_submitter_cc(report.email, recipients),
        )

        message_id = self._sender.send(message)

        log.info(
            "report_sent",
            request_id=request_id,
            case_id=case_id,
            station_code=station_code,
            provider=self._sender.provider,
            message_id=message_id,
            recipient_count=len(recipients),
            attachment_count=len(message.attachments),
        )

        return HandlerResponse(status_code=200, body=f"OK:{case_id}")

    def _debug_response(self, request: InboundRequest, received_keys: list[str]) -> HandlerResponse:
        """Diagnostic dump of what the parser saw; nothing is validated or sent."""
        log.info("debug_short_circuit", received_keys=received_keys)
        return HandlerResponse(
            status_code=200,
            headers={"content-type": "application/json"},
            body=json.dumps(
                {
                    "contentType": request.content_type.lower(),
                    "isBase64": request.is_base64_encoded,
                    "receivedKeys": received_keys,
                },
                indent=2,
            ),
        )


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Platform entry point for report submissions.

    Args:
        event: HTTP event (Netlify function or API Gateway proxy)
        context: Platform context

    Returns:
        Response dict with statusCode and body
    """
    try:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level)
        submission_handler = SubmissionHandler(settings, build_email_sender(settings))
    except Exception as e:
        log.error("handler_setup_failed", error=str(e), exc_info=True)
        return _server_error(e).to_dict()

    return submission_handler.handle(event, context)


# Entry point name for platforms that expect `handler`
handler = lambda_handler
