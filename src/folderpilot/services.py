"""Summary: Core application services for FolderPilot.

Importance: Connects folders and messages to the classifier and its persistence.
Alternatives: Call the classifier directly from every entry point.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable

from folderpilot.classifier import MessageClassifier
from folderpilot.config import AppConfig
from folderpilot.models import FOLDER_JUNK, Classification, Folder, MessageEnvelope, can_classify
from folderpilot.storage.snapshot import SnapshotFile
from folderpilot.storage.stats_store import StatisticsStore
from folderpilot.text import assemble_text


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationService:
    """Summary: Runs the classifier for messages filed into or removed from folders.

    Importance: Applies enablement and eligibility rules before each pass.
    Alternatives: Let every caller check the rules itself.
    """

    config: AppConfig
    store: StatisticsStore
    snapshot: SnapshotFile
    classifier: MessageClassifier

    def classify_message(
        self, folder: Folder, envelope: MessageEnvelope, added: bool = True
    ) -> str | None:
        """Summary: Learn a message and return the folder it seems to belong to.

        Importance: Advises a move without ever blocking message processing.
        Alternatives: Return the full classification result to callers.
        """

        result = self.evaluate_message(folder, envelope, added)
        return result.predicted if result else None

    def evaluate_message(
        self, folder: Folder, envelope: MessageEnvelope, added: bool = True
    ) -> Classification | None:
        """Summary: Learn a message and return the full classification result.

        Importance: Exposes the chances behind a suggestion for diagnostics.
        Alternatives: Log the chances and discard them.

        Any failure during the pass is logged and discarded; statistics may be
        partially updated in that case.
        """

        if not self.config.classification_enabled:
            return None
        if not can_classify(folder.type):
            logger.debug("Folder %s of type %s is not classified.", folder.name, folder.type)
            return None
        try:
            text = assemble_text(envelope)
            if not text:
                return None
            self.snapshot.load(self.store)
            result = self.classifier.learn(folder.account_id, folder.name, text, added)
        except Exception:
            logger.exception("Classification failed for folder %s.", folder.name)
            return None
        logger.info(
            "Classified account=%s folder=%s added=%s class=%s",
            folder.account_id,
            folder.name,
            added,
            result.predicted,
        )
        return result

    def load(self) -> bool:
        """Summary: Load the persisted statistics if not loaded yet.

        Importance: Lets callers surface a corrupt snapshot and decide what to do.
        Alternatives: Always start from an empty store on failure.
        """

        return self.snapshot.load(self.store)

    def save(self) -> bool:
        """Summary: Persist the statistics when they changed.

        Importance: Keeps learned data across restarts.
        Alternatives: Save after every classification.
        """

        return self.snapshot.save(self.store)

    def clear(self) -> None:
        """Summary: Forget all learned statistics.

        Importance: Allows users to reset a classifier that learned bad habits.
        Alternatives: Delete the snapshot file and restart.
        """

        self.snapshot.reset(self.store)
        logger.info("Classifier statistics cleared.")


@dataclass(frozen=True)
class MoveAdvisor:
    """Summary: Decides whether a suggested folder should receive the message.

    Importance: Keeps move policy out of the classifier.
    Alternatives: Move every message whose suggestion differs from its folder.
    """

    find_folder: Callable[[int, str], Folder | None]

    def advise(
        self, source: Folder, suggestion: str | None, auto_classified: bool = False
    ) -> Folder | None:
        """Summary: Return the folder to move a message to, if any.

        Importance: Prevents moves out of junk, loops, and moves into opted-out folders.
        Alternatives: Ask the user to confirm every suggestion.
        """

        if suggestion is None or auto_classified:
            return None
        target = self.find_folder(source.account_id, suggestion)
        if target is None or not target.auto_classify:
            return None
        if target.name == source.name:
            return None
        if source.type == FOLDER_JUNK:
            return None
        logger.info("Advising move from %s to %s.", source.name, target.name)
        return target


@dataclass(frozen=True)
class StatsService:
    """Summary: Reports learned statistics per account.

    Importance: Shows how much the classifier has learned for each folder.
    Alternatives: Inspect the snapshot file manually.
    """

    store: StatisticsStore

    def snapshot(self, account_id: int | None = None) -> dict[str, Any]:
        """Summary: Return category counts and vocabulary size per account.

        Importance: Feeds the CLI stats command and the API stats endpoint.
        Alternatives: Return only totals across all accounts.
        """

        with self.store.transaction():
            accounts = self.store.accounts() if account_id is None else [account_id]
            summary = {
                str(account): {
                    "categories": self.store.category_counts(account),
                    "vocabulary": self.store.vocabulary_size(account),
                }
                for account in accounts
            }
            return {
                "accounts": summary,
                "messages": sum(sum(item["categories"].values()) for item in summary.values()),
                "words": sum(item["vocabulary"] for item in summary.values()),
                "dirty": self.store.dirty,
            }
