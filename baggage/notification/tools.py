"""
Notification Tools

Case identifiers, subject lines and the HTML body of the report email.
All user-controlled text passes through Jinja2 autoescaping.
"""

import re
import secrets
import string
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

log = structlog.get_logger()

TEMPLATE_DIRECTORY = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "report.html"

REPORT_TITLE = "Bahamasair Baggage Irregularity Report"
AIRLINE_NAME = "Bahamasair"
CLAIM_DEADLINE_DAYS = 90

CASE_ID_ALPHABET = string.digits + string.ascii_uppercase
CASE_ID_SUFFIX_LENGTH = 4
CASE_ID_PATTERN = re.compile(r"^BAG-\d{8}-\d{6}-[A-Z0-9]{4}$")


def generate_case_id(now: datetime | None = None) -> str:
    """
    Generate a report reference: BAG-YYYYMMDD-HHMMSS-XXXX.

    The timestamp is UTC; the suffix is 4 random base-36 characters.
    Uniqueness is probable, not guaranteed, and nothing checks for collisions.

    Args:
        now: Override the current time (naive values are taken as UTC)

    Returns:
        Case identifier string
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)

    suffix = "".join(secrets.choice(CASE_ID_ALPHABET) for _ in range(CASE_ID_SUFFIX_LENGTH))
    return f"BAG-{now:%Y%m%d-%H%M%S}-{suffix}"


def render_subject(station_code: str, incident_type: str, case_id: str) -> str:
    """Subject line, e.g. "[NAS] Delayed Baggage Report — BAG-...". """
    return f"[{station_code}] {incident_type} Baggage Report — {case_id}"


def nl2br(value: object) -> Markup:
    """Escape a value and render its line breaks as <br>."""
    text = str(value if value is not None else "").replace("\r\n", "\n")
    return Markup("<br>").join(escape(text).split("\n"))


@lru_cache(maxsize=1)
def get_template_environment() -> Environment:
    """Jinja2 environment for report templates (autoescape on for HTML)."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIRECTORY),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["nl2br"] = nl2br
    return env


def render_report_html(fields: dict[str, str], case_id: str) -> str:
    """
    Render the report email body.

    Every normalized field is listed, followed by the case ID. Keys and
    values are escaped; value line breaks become <br>.

    Args:
        fields: Normalized field map
        case_id: Generated case identifier

    Returns:
        HTML body
    """
    rows = list({**fields, "case_id": case_id}.items())

    log.debug("rendering_report", row_count=len(rows), case_id=case_id)

    template = get_template_environment().get_template(REPORT_TEMPLATE)
    return template.render(
        title=REPORT_TITLE,
        airline=AIRLINE_NAME,
        case_id=case_id,
        rows=rows,
        claim_deadline_days=CLAIM_DEADLINE_DAYS,
    )
