"""
Integration test fixtures and configuration.

Integration tests configure the relay through environment variables,
exactly as a deployment does, and deliver through moto's SES.
"""

import os
from typing import Generator

import boto3
import pytest
from moto import mock_aws

from baggage.shared.config import get_settings
from tests.utils.fakes import (
    DEFAULT_STATION_INBOX,
    INTEGRATION_REGION,
    NASSAU_INBOX,
    PRIMARY_INBOX,
    SENDER_ADDRESS,
)

# Set integration test environment
os.environ["INTEGRATION_TEST"] = "true"


@pytest.fixture
def relay_environment(monkeypatch) -> Generator[None, None, None]:
    """Deployment-style environment routing NAS and defaulting elsewhere."""
    monkeypatch.setenv("EMAIL_PROVIDER", "ses")
    monkeypatch.setenv("AWS_REGION", INTEGRATION_REGION)
    monkeypatch.setenv("FROM_ADDRESS", SENDER_ADDRESS)
    monkeypatch.setenv("TO_PRIMARY", PRIMARY_INBOX)
    monkeypatch.setenv("TO_DEFAULT_STATION", DEFAULT_STATION_INBOX)
    monkeypatch.setenv("TO_NAS", NASSAU_INBOX)
    monkeypatch.delenv("SES_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("SENDGRID_API_KEY", raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def integration_ses(relay_environment):
    """SES in the configured region with the sender identity verified."""
    with mock_aws():
        ses = boto3.client("ses", region_name=INTEGRATION_REGION)
        ses.verify_email_identity(EmailAddress=SENDER_ADDRESS)
        yield ses
