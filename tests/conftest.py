"""
Pytest Configuration and Shared Fixtures

Provides settings, a recording email sender, moto SES mocking and sample
submission events.
"""

import os
from datetime import datetime, timezone
from typing import Any

import boto3
import pytest
from moto import mock_aws

from baggage.shared.config import Settings
from tests.utils.event_generator import MockEventGenerator
from tests.utils.fakes import SENDER_ADDRESS, RecordingEmailSender, make_settings

# Set test environment before importing application modules
os.environ["AWS_DEFAULT_REGION"] = "us-west-2"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"


# --- Time Fixtures ---


@pytest.fixture
def frozen_datetime() -> datetime:
    """Fixed datetime for deterministic tests."""
    return datetime(2025, 2, 6, 14, 30, 5, tzinfo=timezone.utc)


# --- Settings Fixtures ---


@pytest.fixture
def settings() -> Settings:
    """Settings with primary, default-station and NAS routing configured."""
    return make_settings()


@pytest.fixture
def recording_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def submission_handler(settings, recording_sender, frozen_datetime):
    """SubmissionHandler wired to the recording sender and a fixed clock."""
    from lambdas.submit_report.handler import SubmissionHandler

    return SubmissionHandler(settings, recording_sender, clock=lambda: frozen_datetime)


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-west-2",
    }


@pytest.fixture
def mock_ses(aws_credentials):
    """Create a mocked SES client with verified sender identity."""
    with mock_aws():
        ses = boto3.client("ses", **aws_credentials)
        ses.verify_email_identity(EmailAddress=SENDER_ADDRESS)
        yield ses


# --- Event Fixtures ---


@pytest.fixture
def event_generator() -> MockEventGenerator:
    """Seeded generator for reproducible submissions."""
    return MockEventGenerator(seed=42)


@pytest.fixture
def report_fields() -> dict[str, str]:
    """A complete delayed-bag report as the form posts it."""
    return {
        "Full Name": "Jane Pinder",
        "email": "jane.pinder@example.org",
        "phone": "+1 242 555 0134",
        "date": "2025-02-05",
        "flight": "UP301",
        "station": "NAS1",
        "incident_type": "Delayed",
        "damage_desc": "Bag did not arrive on the carousel.",
        "bag_tag": "UP123456",
    }


@pytest.fixture
def damaged_report_fields(report_fields) -> dict[str, str]:
    """A complete damaged-bag report."""
    return {
        **report_fields,
        "incident_type": "Damaged",
        "damage_desc": "Wheel torn off,\nzip broken.",
        "brand_dmg": "Samsonite",
        "age_years": "3",
        "purchase_price": "249.99",
    }


@pytest.fixture
def urlencoded_event(event_generator, report_fields) -> dict[str, Any]:
    """Valid urlencoded submission event."""
    return event_generator.generate_urlencoded_event(report_fields)
