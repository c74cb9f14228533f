"""Summary: Application factory wiring core services.

Importance: Centralizes dependency creation for the CLI and API layers.
Alternatives: Instantiate services manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass

from folderpilot.classifier import MessageClassifier
from folderpilot.config import AppConfig
from folderpilot.services import ClassificationService, StatsService
from folderpilot.storage.snapshot import SnapshotFile
from folderpilot.storage.stats_store import StatisticsStore
from folderpilot.tokenizer import Tokenizer


@dataclass(frozen=True)
class AppServices:
    """Summary: Bundle of core services for FolderPilot.

    Importance: Simplifies passing dependencies to the CLI and API layers.
    Alternatives: Use a dependency injection container.
    """

    config: AppConfig
    store: StatisticsStore
    classification: ClassificationService
    stats: StatsService


def build_services(config: AppConfig, tokenizer: Tokenizer | None = None) -> AppServices:
    """Summary: Build core services from configuration.

    Importance: Gives each process exactly one statistics store.
    Alternatives: Keep the store in a module-level global.
    """

    store = StatisticsStore()
    classification = ClassificationService(
        config=config,
        store=store,
        snapshot=SnapshotFile(config.snapshot_path),
        classifier=MessageClassifier(store, tokenizer),
    )
    return AppServices(
        config=config,
        store=store,
        classification=classification,
        stats=StatsService(store=store),
    )
