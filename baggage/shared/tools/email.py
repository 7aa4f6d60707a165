"""
Email Tools

Provider adapters for sending report notifications. The handler depends
only on the EmailSender interface; one adapter per real provider.
"""

from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Protocol

import boto3
import structlog
from botocore.exceptions import ClientError
from python_http_client.exceptions import HTTPError
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import (
    Attachment,
    Cc,
    Disposition,
    Email,
    FileContent,
    FileName,
    FileType,
    Mail,
    To,
)

from baggage.shared.config import Settings
from baggage.shared.exceptions import EmailDeliveryError
from baggage.shared.models.report import OutboundMessage

log = structlog.get_logger()


class EmailSender(Protocol):
    """Send one structured message; return the provider message id."""

    provider: str

    def send(self, message: OutboundMessage) -> str:
        """
        Raises:
            EmailDeliveryError: If the provider does not accept the message
        """
        ...


def _format_sender(from_address: str | None, from_name: str | None) -> str:
    if from_name and from_address:
        return str(Address(display_name=from_name, addr_spec=from_address))
    return from_address or ""


class SendGridEmailSender:
    """EmailSender backed by the SendGrid v3 mail API."""

    provider = "sendgrid"

    def __init__(self, api_key: str | None, *, client: SendGridAPIClient | None = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> SendGridAPIClient:
        if self._client is None:
            if not self._api_key:
                raise EmailDeliveryError(
                    provider=self.provider,
                    error_message="SENDGRID_API_KEY is not configured",
                )
            self._client = SendGridAPIClient(api_key=self._api_key)
        return self._client

    def build_mail(self, message: OutboundMessage) -> Mail:
        """Translate an OutboundMessage into a SendGrid Mail object."""
        mail = Mail(
            from_email=Email(message.from_address, message.from_name),
            to_emails=[To(address) for address in message.recipients],
            subject=message.subject,
            html_content=message.html,
        )

        if message.cc:
            mail.add_cc(Cc(message.cc))

        for attachment in message.attachments:
            mail.add_attachment(
                Attachment(
                    FileContent(attachment.content_base64),
                    FileName(attachment.filename),
                    FileType(attachment.content_type),
                    Disposition(attachment.disposition),
                )
            )

        return mail

    def send(self, message: OutboundMessage) -> str:
        client = self._get_client()
        mail = self.build_mail(message)

        log.info(
            "sending_sendgrid_email",
            to=message.recipients,
            subject=message.subject[:80],
            attachment_count=len(message.attachments),
        )

        try:
            response = client.send(mail)
        except HTTPError as e:
            log.error(
                "sendgrid_send_failed",
                to=message.recipients,
                status_code=e.status_code,
                error_body=str(e.body)[:500],
            )
            raise EmailDeliveryError(
                provider=self.provider,
                recipient=", ".join(message.recipients),
                error_message=f"HTTP {e.status_code}: {e.body!r}",
            ) from e

        headers = response.headers or {}
        message_id = headers.get("X-Message-Id", "") or ""

        log.info(
            "sendgrid_email_sent",
            message_id=message_id,
            status_code=response.status_code,
        )

        return message_id


class SesEmailSender:
    """EmailSender backed by Amazon SES raw email (supports attachments)."""

    provider = "ses"

    def __init__(
        self,
        *,
        region_name: str = "us-east-1",
        endpoint_url: str | None = None,
        configuration_set: str | None = None,
        client=None,
    ) -> None:
        self._client_config = {"region_name": region_name}
        if endpoint_url and endpoint_url != "mock":
            self._client_config["endpoint_url"] = endpoint_url
        self._configuration_set = configuration_set
        self._client = client

    def _get_client(self):
        """Get SES client."""
        if self._client is None:
            self._client = boto3.client("ses", **self._client_config)
        return self._client

    def build_mime(self, message: OutboundMessage) -> EmailMessage:
        """Build the MIME document sent through send_raw_email."""
        mime = EmailMessage()
        mime["Subject"] = message.subject
        mime["From"] = _format_sender(message.from_address, message.from_name)
        mime["To"] = ", ".join(message.recipients)
        if message.cc:
            mime["Cc"] = message.cc
        mime["Message-ID"] = make_msgid()

        mime.set_content(message.html, subtype="html")

        for attachment in message.attachments:
            maintype, _, subtype = attachment.content_type.partition("/")
            mime.add_attachment(
                attachment.content,
                maintype=maintype or "application",
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )

        return mime

    def send(self, message: OutboundMessage) -> str:
        client = self._get_client()
        mime = self.build_mime(message)

        destinations = list(message.recipients)
        if message.cc:
            destinations.append(message.cc)

        send_params = {
            "Source": message.from_address,
            "Destinations": destinations,
            "RawMessage": {"Data": mime.as_bytes()},
        }
        if self._configuration_set:
            send_params["ConfigurationSetName"] = self._configuration_set

        log.info(
            "sending_ses_email",
            to=message.recipients,
            subject=message.subject[:80],
            attachment_count=len(message.attachments),
        )

        try:
            response = client.send_raw_email(**send_params)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            error_message = e.response["Error"]["Message"]

            log.error(
                "ses_send_failed",
                to=message.recipients,
                error_code=error_code,
                error_message=error_message,
            )

            raise EmailDeliveryError(
                provider=self.provider,
                recipient=", ".join(message.recipients),
                error_message=f"{error_code}: {error_message}",
            ) from e

        message_id = response["MessageId"]
        log.info("ses_email_sent", message_id=message_id)

        return message_id


def build_email_sender(settings: Settings) -> EmailSender:
    """Select the provider adapter named by settings.email_provider."""
    if settings.email_provider == "ses":
        return SesEmailSender(
            **settings.ses_config,
            configuration_set=settings.ses_configuration_set,
        )
    return SendGridEmailSender(settings.sendgrid_api_key)
