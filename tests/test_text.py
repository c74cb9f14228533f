"""Summary: Tests for classifier text assembly and .eml parsing.

Importance: Address and subject words feed the classifier alongside the body.
Alternatives: Feed only message bodies into the classifier.
"""

from __future__ import annotations

from pathlib import Path

from folderpilot.models import Address, MessageEnvelope
from folderpilot.text import assemble_text, envelope_from_eml, parse_addresses


def test_assemble_text_orders_addresses_subject_and_body() -> None:
    """Summary: Emit email, domain, and name per address, then subject and body.

    Importance: Fixes the order in which words are learned.
    Alternatives: Append headers after the body.
    """

    envelope = MessageEnvelope(
        sender=[Address(email="billing@example.com", name="Example Billing")],
        to=[Address(email="me@home.test")],
        reply_to=[Address(email="", name="No Reply")],
        subject="Your invoice",
        body="Amount due",
    )
    assert assemble_text(envelope) == (
        "billing@example.com\nexample.com\nExample Billing\n"
        "me@home.test\nhome.test\n"
        "No Reply\n"
        "Your invoice\n"
        "Amount due"
    )


def test_assemble_text_skips_missing_domain() -> None:
    """Summary: Addresses without a domain contribute only themselves.

    Importance: Local addresses must not add empty lines.
    Alternatives: Reject addresses without a domain.
    """

    envelope = MessageEnvelope(sender=[Address(email="postmaster@")], subject=None, body="")
    assert assemble_text(envelope) == "postmaster@\n"
    assert assemble_text(MessageEnvelope()) == ""


def test_parse_addresses_decodes_names() -> None:
    """Summary: Parse address headers into email and display name.

    Importance: Display names often identify the sender organisation.
    Alternatives: Keep raw header strings.
    """

    addresses = parse_addresses(['"Club News" <news@club.test>, fan@club.test'])
    assert addresses == [
        Address(email="news@club.test", name="Club News"),
        Address(email="fan@club.test", name=None),
    ]


def test_envelope_from_eml(tmp_path: Path) -> None:
    """Summary: Parse headers and the plain-text part of an .eml file.

    Importance: Supports learning from exported messages.
    Alternatives: Require clients to send structured payloads.
    """

    eml_path = tmp_path / "sample.eml"
    eml_path.write_text(
        "From: Billing <billing@example.com>\n"
        "To: me@home.test\n"
        "Cc: Partner <partner@home.test>\n"
        "Subject: Invoice ready\n"
        "MIME-Version: 1.0\n"
        "Content-Type: multipart/alternative; boundary=XYZ\n"
        "\n"
        "--XYZ\n"
        "Content-Type: text/plain; charset=utf-8\n"
        "\n"
        "Your invoice is ready.\n"
        "--XYZ\n"
        "Content-Type: text/html; charset=utf-8\n"
        "\n"
        "<p>Your invoice is ready.</p>\n"
        "--XYZ--\n",
        encoding="utf-8",
    )
    envelope = envelope_from_eml(eml_path)
    assert envelope.sender == [Address(email="billing@example.com", name="Billing")]
    assert envelope.to == [Address(email="me@home.test", name=None)]
    assert envelope.cc == [Address(email="partner@home.test", name="Partner")]
    assert envelope.subject == "Invoice ready"
    assert envelope.body == "Your invoice is ready."
