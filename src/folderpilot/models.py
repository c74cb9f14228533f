"""Summary: Domain model dataclasses for FolderPilot.

Importance: Defines the entities shared by the classifier, services, and API.
Alternatives: Use Pydantic models or ORM classes directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field


FOLDER_INBOX = "inbox"
FOLDER_JUNK = "junk"
FOLDER_USER = "user"
FOLDER_SENT = "sent"
FOLDER_DRAFTS = "drafts"
FOLDER_TRASH = "trash"
FOLDER_ARCHIVE = "archive"

FOLDER_TYPES = frozenset(
    {FOLDER_INBOX, FOLDER_JUNK, FOLDER_USER, FOLDER_SENT, FOLDER_DRAFTS, FOLDER_TRASH, FOLDER_ARCHIVE}
)
CLASSIFIABLE_FOLDER_TYPES = frozenset({FOLDER_INBOX, FOLDER_JUNK, FOLDER_USER})


@dataclass(frozen=True)
class Address:
    """Summary: Represents one mailbox address with an optional display name.

    Importance: Sender and recipient addresses feed the classifier vocabulary.
    Alternatives: Store raw header strings and parse them on demand.
    """

    email: str
    name: str | None = None

    @property
    def domain(self) -> str | None:
        """Return the part after the last ``@``, or None when absent."""

        at = self.email.find("@")
        if at < 0:
            return None
        return self.email[at + 1 :] or None


@dataclass(frozen=True)
class MessageEnvelope:
    """Summary: Represents the classifiable parts of an email message.

    Importance: Keeps the text assembly independent of any mail store.
    Alternatives: Pass provider-specific message objects into the classifier.
    """

    sender: list[Address] = field(default_factory=list)
    to: list[Address] = field(default_factory=list)
    cc: list[Address] = field(default_factory=list)
    bcc: list[Address] = field(default_factory=list)
    reply_to: list[Address] = field(default_factory=list)
    subject: str | None = None
    body: str = ""

    def addresses(self) -> list[Address]:
        """Summary: Return all addresses in header order.

        Importance: Fixes the order in which address words are learned.
        Alternatives: Deduplicate addresses before assembling text.
        """

        return [*self.sender, *self.to, *self.cc, *self.bcc, *self.reply_to]


@dataclass(frozen=True)
class Folder:
    """Summary: Represents a destination folder within an account.

    Importance: Folder names are the category labels the classifier learns.
    Alternatives: Use numeric folder identifiers as labels.
    """

    account_id: int
    name: str
    type: str = FOLDER_USER
    auto_classify: bool = False


@dataclass(frozen=True)
class CategoryCountRecord:
    """Flat snapshot record: messages filed under a category for an account."""

    account: int
    category: str
    count: int


@dataclass(frozen=True)
class WordFrequencyRecord:
    """Flat snapshot record: messages in a category that contained a word."""

    account: int
    word: str
    category: str
    frequency: int


@dataclass(frozen=True)
class StoreSnapshot:
    """Summary: Full bulk export of the statistics store.

    Importance: Decouples the in-memory tables from the on-disk JSON layout.
    Alternatives: Serialize the nested dictionaries directly.
    """

    messages: list[CategoryCountRecord] = field(default_factory=list)
    words: list[WordFrequencyRecord] = field(default_factory=list)


@dataclass(frozen=True)
class Chance:
    """Normalized matching score of one category for one message."""

    category: str
    chance: float
    total_frequency: int
    messages: int
    matched_words: int


@dataclass(frozen=True)
class Classification:
    """Summary: Outcome of one learn pass.

    Importance: Returns the suggestion together with the numbers behind it.
    Alternatives: Return only the predicted folder name.
    """

    category: str
    added: bool
    predicted: str | None = None
    words: int = 0
    max_matched_words: int = 0
    chances: list[Chance] = field(default_factory=list)


def can_classify(folder_type: str) -> bool:
    """Summary: Check whether messages in a folder type are eligible.

    Importance: Keeps sent, drafts, and trash out of the learned statistics.
    Alternatives: Let users opt folders in individually.
    """

    return folder_type in CLASSIFIABLE_FOLDER_TYPES
