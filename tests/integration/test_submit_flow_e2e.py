"""
End-to-End Integration Tests for Report Submission

Drives lambda_handler with platform events, environment configuration
and SES delivery.
"""

import email
import re
from email.policy import default as default_policy

import pytest
from moto.core import DEFAULT_ACCOUNT_ID
from moto.ses import ses_backends

from tests.utils.event_generator import MockEventGenerator
from tests.utils.fakes import (
    DEFAULT_STATION_INBOX,
    INTEGRATION_REGION,
    NASSAU_INBOX,
    PRIMARY_INBOX,
)


def _sent_messages():
    return ses_backends[DEFAULT_ACCOUNT_ID][INTEGRATION_REGION].sent_messages


@pytest.mark.integration
class TestSubmitFlowE2E:
    """End-to-end tests for complete submissions."""

    def test_multipart_damage_claim_delivered(self, integration_ses):
        """
        Test complete flow: multipart form -> validation -> SES raw email.

        Verify that:
        1. The response carries the generated case ID
        2. One raw message reaches the primary and NAS inboxes and the submitter
        3. Uploads travel as MIME attachments
        """
        from lambdas.submit_report.handler import lambda_handler

        generator = MockEventGenerator(seed=42)
        fields = generator.generate_report_fields(
            incident_type="Damaged",
            station="NAS - Nassau",
            email="traveller@example.org",
        )
        files = [
            generator.generate_file(filename="damage.jpg", size_bytes=2048),
            generator.generate_file(filename="tag.png", content_type="image/png", size_bytes=512),
        ]

        response = lambda_handler(generator.generate_multipart_event(fields, files), None)

        assert response["statusCode"] == 200
        assert re.match(r"^OK:BAG-\d{8}-\d{6}-[A-Z0-9]{4}$", response["body"])

        messages = _sent_messages()
        assert len(messages) == 1
        raw = messages[0]
        assert set(raw.destinations) == {PRIMARY_INBOX, NASSAU_INBOX, "traveller@example.org"}

        case_id = response["body"].removeprefix("OK:")
        mime = email.message_from_string(raw.raw_data, policy=default_policy)
        assert mime["Subject"] == f"[NAS] Damaged Baggage Report — {case_id}"
        assert case_id in mime.get_body(preferencelist=("html",)).get_content()
        assert [part.get_filename() for part in mime.iter_attachments()] == [
            "damage.jpg",
            "tag.png",
        ]

    def test_urlencoded_default_station(self, integration_ses):
        from lambdas.submit_report.handler import lambda_handler

        generator = MockEventGenerator(seed=7)
        fields = generator.generate_report_fields(incident_type="Delayed", station="MIA - Miami")

        response = lambda_handler(
            generator.generate_urlencoded_event(fields, base64_encode=True),
            None,
        )

        assert response["statusCode"] == 200
        raw = _sent_messages()[0]
        assert PRIMARY_INBOX in raw.destinations
        assert DEFAULT_STATION_INBOX in raw.destinations
        assert NASSAU_INBOX not in raw.destinations

    def test_rejected_submission_sends_nothing(self, integration_ses):
        from lambdas.submit_report.handler import lambda_handler

        generator = MockEventGenerator(seed=3)
        fields = generator.generate_report_fields(fax="555-0100")

        response = lambda_handler(generator.generate_urlencoded_event(fields), None)

        assert response == {"statusCode": 400, "body": "Invalid submission"}
        assert _sent_messages() == []

    def test_unverified_sender_is_server_error(self, integration_ses, monkeypatch):
        from baggage.shared.config import get_settings
        from lambdas.submit_report.handler import lambda_handler

        monkeypatch.setenv("FROM_ADDRESS", "nobody@unverified.example.net")
        get_settings.cache_clear()

        generator = MockEventGenerator(seed=11)
        response = lambda_handler(
            generator.generate_urlencoded_event(generator.generate_report_fields()),
            None,
        )

        assert response["statusCode"] == 500
        assert response["body"].startswith("Server error: ses send failed for ")
        assert "MessageRejected" in response["body"]
