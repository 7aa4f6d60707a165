"""
FastAPI Server for Local Development

Serves the report form endpoint on localhost. Requests are converted into
platform events and passed to the real lambda_handler; email is delivered
to moto's in-memory SES so nothing leaves the machine.

Usage:
    python -m scripts.local_api_server
"""

import base64
import os

# Set environment for local mode BEFORE any other imports
os.environ["EMAIL_PROVIDER"] = "ses"
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("FROM_ADDRESS", "reports@localhost.example.com")
os.environ.setdefault("TO_PRIMARY", "baggage@localhost.example.com")
os.environ.setdefault("TO_DEFAULT_STATION", "stations@localhost.example.com")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from moto import mock_aws

mock = mock_aws()
mock.start()

# Clear settings cache so new env vars take effect
from baggage.shared.config import get_settings

get_settings.cache_clear()

from contextlib import asynccontextmanager
from typing import Any

import boto3
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from moto.core import DEFAULT_ACCOUNT_ID
from moto.ses import ses_backends

from lambdas.submit_report.handler import lambda_handler

import structlog

# Configure console logging after the handler import, which installs the
# JSON renderer at module level
structlog.configure(
    processors=[
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()

SUBMIT_PATH = "/.netlify/functions/submit"


def setup_local_ses():
    """Verify the sender identity in the mocked SES."""
    settings = get_settings()
    ses = boto3.client("ses", region_name=settings.aws_region)

    try:
        ses.verify_email_identity(EmailAddress=settings.from_address)
        log.info("ses_identity_verified", email=settings.from_address)
    except Exception as e:
        log.warning("ses_identity_setup_error", error=str(e))


async def request_to_event(request: Request, path: str) -> dict[str, Any]:
    """Convert an incoming request into a Netlify-style function event."""
    body = await request.body()
    return {
        "httpMethod": request.method,
        "path": path,
        "rawUrl": str(request.url),
        "rawQueryString": request.url.query,
        "headers": dict(request.headers),
        "body": base64.b64encode(body).decode("ascii") if body else None,
        "isBase64Encoded": bool(body),
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    setup_local_ses()
    log.info("local_aws_resources_initialized")
    yield
    log.info("shutting_down")
    mock.stop()


app = FastAPI(
    title="Baggage Report API",
    description="Local development server for baggage irregularity reports",
    lifespan=lifespan,
)

# CORS configuration
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if os.environ.get("CORS_ORIGINS"):
    origins.extend(
        o.strip() for o in os.environ["CORS_ORIGINS"].split(",") if o.strip()
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =====================================================
# API Endpoints
# =====================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "environment": "local", "version": "0.1.0"}


@app.api_route(SUBMIT_PATH, methods=["GET", "POST", "PUT", "DELETE"])
@app.api_route(SUBMIT_PATH + "/{suffix:path}", methods=["GET", "POST", "PUT", "DELETE"])
async def submit_report(request: Request, suffix: str = ""):
    """
    Submit a baggage report form.

    Any method is forwarded so the handler's own 405 is exercised. A
    trailing ``/debug=1`` path segment triggers the debug response.
    """
    path = f"{SUBMIT_PATH}/{suffix}" if suffix else SUBMIT_PATH
    event = await request_to_event(request, path)
    result = lambda_handler(event, {"invocationId": "local"})

    return Response(
        content=result["body"],
        status_code=result["statusCode"],
        headers=result.get("headers"),
        media_type=None if result.get("headers") else "text/plain",
    )


@app.get("/api/sent-emails")
async def list_sent_emails():
    """Messages accepted by the mocked SES since startup."""
    backend = ses_backends[DEFAULT_ACCOUNT_ID][get_settings().aws_region]
    return [
        {
            "id": message.id,
            "source": message.source,
            "destinations": message.destinations,
            "raw_data": message.raw_data,
        }
        for message in backend.sent_messages
    ]


if __name__ == "__main__":
    import uvicorn

    log.info("starting_local_api_server", host="0.0.0.0", port=8000)
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
