"""
Attachment Handler Module

Selects uploaded files to attach to the report email.
"""

import structlog

from baggage.shared.models.report import DEFAULT_ATTACHMENT_TYPE, EmailAttachment, UploadedFile

log = structlog.get_logger()

UPLOAD_FIELD_NAMES = frozenset({"uploads", "uploads[]"})
MAX_ATTACHMENTS = 5
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024  # 10MB


def to_email_attachment(upload: UploadedFile) -> EmailAttachment:
    """Convert an upload, defaulting the filename and content type."""
    return EmailAttachment(
        filename=upload.filename or "file",
        content_type=upload.content_type or DEFAULT_ATTACHMENT_TYPE,
        content=upload.content,
    )


def select_attachments(
    files: list[UploadedFile],
    *,
    max_count: int = MAX_ATTACHMENTS,
    max_size: int = MAX_ATTACHMENT_SIZE,
    field_names: frozenset[str] = UPLOAD_FIELD_NAMES,
) -> list[EmailAttachment]:
    """
    Pick the uploads that go out with the report.

    Only files posted under an upload field are considered. Empty and
    oversized files are skipped; the first ``max_count`` remaining files are
    kept in arrival order. Skips are logged, never raised.

    Args:
        files: Uploaded files in arrival order
        max_count: Maximum number of attachments
        max_size: Maximum size of a single attachment in bytes
        field_names: Form fields that carry report uploads

    Returns:
        Email attachments
    """
    attachments: list[EmailAttachment] = []

    for upload in files:
        if upload.field_name not in field_names:
            continue

        if len(attachments) >= max_count:
            log.warning(
                "skipping_excess_attachment",
                filename=upload.filename,
                max_count=max_count,
            )
            continue

        if upload.size_bytes == 0:
            log.warning("skipping_empty_attachment", filename=upload.filename)
            continue

        if upload.size_bytes > max_size:
            log.warning(
                "skipping_oversized_attachment",
                filename=upload.filename,
                size_bytes=upload.size_bytes,
                max_size=max_size,
            )
            continue

        attachments.append(to_email_attachment(upload))

    log.info(
        "attachments_selected",
        candidate_count=len(files),
        attached_count=len(attachments),
    )

    return attachments
