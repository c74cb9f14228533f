"""Summary: Builds classifier input text from email messages.

Importance: Decides which parts of a message the classifier learns from.
Alternatives: Feed only the subject and body into the tokenizer.
"""

from __future__ import annotations

from email import message_from_bytes
from email.header import decode_header
from email.message import Message
from email.utils import getaddresses
from pathlib import Path

from folderpilot.models import Address, MessageEnvelope


def assemble_text(envelope: MessageEnvelope) -> str:
    """Summary: Join addresses, subject, and body into one newline-separated text.

    Importance: Lets sender domains and names act as classification words.
    Alternatives: Tokenize each header separately with its own weight.
    """

    lines: list[str] = []
    for address in envelope.addresses():
        if address.email:
            lines.append(address.email)
            domain = address.domain
            if domain:
                lines.append(domain)
        if address.name:
            lines.append(address.name)
    if envelope.subject is not None:
        lines.append(envelope.subject)
    text = "".join(f"{line}\n" for line in lines)
    return text + (envelope.body or "")


def envelope_from_eml(path: Path) -> MessageEnvelope:
    """Summary: Parse an .eml file into a message envelope.

    Importance: Supports learning from exported emails without a mail store.
    Alternatives: Read messages over IMAP.
    """

    message = message_from_bytes(path.read_bytes())
    subject = message.get("Subject")
    return MessageEnvelope(
        sender=parse_addresses(message.get_all("From", [])),
        to=parse_addresses(message.get_all("To", [])),
        cc=parse_addresses(message.get_all("Cc", [])),
        bcc=parse_addresses(message.get_all("Bcc", [])),
        reply_to=parse_addresses(message.get_all("Reply-To", [])),
        subject=_decode_header_value(subject) if subject is not None else None,
        body=_extract_body(message),
    )


def parse_addresses(values: list[str]) -> list[Address]:
    """Parse raw address header values into addresses, dropping empty ones."""

    addresses: list[Address] = []
    for name, email in getaddresses([str(value) for value in values]):
        if not email and not name:
            continue
        addresses.append(Address(email=email, name=_decode_header_value(name) or None))
    return addresses


def _decode_header_value(value: str) -> str:
    decoded_parts = decode_header(str(value))
    fragments: list[str] = []
    for part, encoding in decoded_parts:
        if isinstance(part, bytes):
            fragments.append(part.decode(encoding or "utf-8", errors="ignore"))
        else:
            fragments.append(part)
    return "".join(fragments).strip()


def _extract_body(message: Message) -> str:
    """Summary: Extract the plain-text parts of an email message.

    Importance: The body carries most of the classification vocabulary.
    Alternatives: Convert HTML parts to text as well.
    """

    if message.is_multipart():
        parts = []
        for part in message.walk():
            if part.get_content_type() == "text/plain":
                payload = part.get_payload(decode=True) or b""
                parts.append(payload.decode(part.get_content_charset() or "utf-8", errors="ignore"))
        return "\n".join(parts).strip()
    payload = message.get_payload(decode=True) or b""
    return payload.decode(message.get_content_charset() or "utf-8", errors="ignore").strip()
