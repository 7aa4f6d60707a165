"""
Form Parser Module

Turns a platform request body into raw form fields and uploaded files.

Supports:
- multipart/form-data, parsed with the stdlib MIME parser
- application/x-www-form-urlencoded
- base64 transport encoding flagged by the platform
"""

import email
from dataclasses import dataclass, field
from email.message import Message
from email.policy import default as default_policy
from email.utils import collapse_rfc2231_value
from urllib.parse import parse_qs

import structlog

from baggage.shared.exceptions import EmptyMultipartPayloadError, UnsupportedContentTypeError
from baggage.shared.models.report import InboundRequest, UploadedFile

log = structlog.get_logger()

MULTIPART_FORM = "multipart/form-data"
URLENCODED_FORM = "application/x-www-form-urlencoded"


@dataclass
class ParsedForm:
    """Raw fields and files from one request body."""

    fields: dict[str, str | list[str]] = field(default_factory=dict)
    files: list[UploadedFile] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.fields and not self.files


def _decode_text(payload: bytes, charset: str | None) -> str:
    try:
        return payload.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _part_name(part: Message) -> str | None:
    name = part.get_param("name", header="content-disposition")
    if name is None:
        return None
    return collapse_rfc2231_value(name)


def _load_mime(body: bytes, content_type: str, binary: bool) -> Message:
    """
    Wrap the body in a minimal MIME header block and parse it.

    Binary mode parses bytes directly. Text mode decodes the body as latin-1
    first (byte-preserving) and goes through the string parser.
    """
    header = f"MIME-Version: 1.0\r\nContent-Type: {content_type}\r\n\r\n".encode("utf-8")
    if binary:
        return email.message_from_bytes(header + body, policy=default_policy)
    return email.message_from_string((header + body).decode("latin-1"), policy=default_policy)


def parse_multipart(body: bytes, content_type: str, *, binary: bool = True) -> ParsedForm:
    """
    Parse a multipart/form-data body.

    Parts carrying a ``filename`` disposition parameter become files tagged
    with their field name; other parts become fields (last value wins).

    Args:
        body: Body bytes with transport encoding removed
        content_type: Content-Type header value including the boundary
        binary: Parse bytes directly (True) or via the text parser (False)

    Returns:
        ParsedForm, empty when the body holds no parts
    """
    form = ParsedForm()
    msg = _load_mime(body, content_type, binary)

    if not msg.is_multipart():
        return form

    for part in msg.iter_parts():
        name = _part_name(part)
        if name is None:
            continue

        payload = part.get_payload(decode=True) or b""
        filename = part.get_filename()

        if filename is not None:
            has_content_type = part.get("Content-Type") is not None
            form.files.append(
                UploadedFile(
                    field_name=name,
                    filename=filename,
                    content_type=part.get_content_type() if has_content_type else None,
                    content=payload,
                )
            )
        else:
            form.fields[name] = _decode_text(payload, part.get_content_charset())

    log.debug(
        "multipart_parsed",
        binary=binary,
        field_count=len(form.fields),
        file_count=len(form.files),
    )

    return form


def parse_urlencoded(body: bytes) -> ParsedForm:
    """Parse a query-string encoded body; repeated keys become lists."""
    parsed = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
    fields: dict[str, str | list[str]] = {
        key: values[0] if len(values) == 1 else values
        for key, values in parsed.items()
    }
    return ParsedForm(fields=fields)


def parse_form(request: InboundRequest) -> ParsedForm:
    """
    Dispatch on Content-Type and parse the request body.

    Multipart bodies are parsed in binary mode first and, when that yields
    nothing, once more in text mode.

    Raises:
        EmptyMultipartPayloadError: Multipart body yielded no parts
        UnsupportedContentTypeError: Content-Type is not a form encoding
    """
    content_type = request.content_type.lower()

    if MULTIPART_FORM in content_type:
        body = request.body_bytes()
        form = parse_multipart(body, request.content_type, binary=True)
        if form.is_empty:
            log.info("multipart_retry_text_mode", length=len(body))
            form = parse_multipart(body, request.content_type, binary=False)
        if form.is_empty:
            raise EmptyMultipartPayloadError(length=len(body))
        return form

    if URLENCODED_FORM in content_type:
        return parse_urlencoded(request.body_bytes())

    raise UnsupportedContentTypeError(content_type)
