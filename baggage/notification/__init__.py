"""
Report notification rendering: case IDs, subjects and the HTML body.
"""

from baggage.notification.tools import (
    generate_case_id,
    render_report_html,
    render_subject,
)

__all__ = [
    "generate_case_id",
    "render_report_html",
    "render_subject",
]
