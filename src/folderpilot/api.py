"""Summary: FastAPI application for FolderPilot.

Importance: Exposes the classifier to mail clients and integrations over HTTP.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from folderpilot.app import AppServices, build_services
from folderpilot.config import AppConfig
from folderpilot.errors import SnapshotError
from folderpilot.models import FOLDER_TYPES, FOLDER_USER, Address, Folder, MessageEnvelope
from folderpilot.services import MoveAdvisor


logger = logging.getLogger(__name__)


class AddressPayload(BaseModel):
    """Summary: Request payload for one mailbox address.

    Importance: Keeps display names alongside addresses for learning.
    Alternatives: Accept raw header strings.
    """

    email: str
    name: str | None = None


class FolderPayload(BaseModel):
    """Summary: Request payload describing a folder.

    Importance: Folder names are the labels the classifier learns.
    Alternatives: Reference folders by numeric identifiers only.
    """

    account_id: int
    name: str = Field(min_length=1)
    type: str = FOLDER_USER
    auto_classify: bool = False


class MessagePayload(BaseModel):
    """Summary: Request payload for the classifiable parts of a message.

    Importance: Lets clients send already extracted plain text.
    Alternatives: Upload raw MIME and parse it server side.
    """

    sender: list[AddressPayload] = Field(default_factory=list)
    to: list[AddressPayload] = Field(default_factory=list)
    cc: list[AddressPayload] = Field(default_factory=list)
    bcc: list[AddressPayload] = Field(default_factory=list)
    reply_to: list[AddressPayload] = Field(default_factory=list)
    subject: str | None = None
    body: str = ""


class ClassifyRequest(BaseModel):
    """Summary: Request payload for learning a newly filed message.

    Importance: Carries the known folders so a move can be advised.
    Alternatives: Look folders up in a separate folder service.
    """

    folder: FolderPayload
    message: MessagePayload
    folders: list[FolderPayload] = Field(default_factory=list)
    auto_classified: bool = False


class UnlearnRequest(BaseModel):
    """Request payload for forgetting a message removed from a folder."""

    folder: FolderPayload
    message: MessagePayload


def _to_folder(payload: FolderPayload) -> Folder:
    if payload.type not in FOLDER_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown folder type: {payload.type}")
    return Folder(
        account_id=payload.account_id,
        name=payload.name,
        type=payload.type,
        auto_classify=payload.auto_classify,
    )


def _to_addresses(items: list[AddressPayload]) -> list[Address]:
    return [Address(email=item.email, name=item.name) for item in items]


def _to_envelope(payload: MessagePayload) -> MessageEnvelope:
    return MessageEnvelope(
        sender=_to_addresses(payload.sender),
        to=_to_addresses(payload.to),
        cc=_to_addresses(payload.cc),
        bcc=_to_addresses(payload.bcc),
        reply_to=_to_addresses(payload.reply_to),
        subject=payload.subject,
        body=payload.body,
    )


def _save_snapshot(services: AppServices) -> None:
    """Summary: Persist statistics after a response has been sent.

    Importance: Keeps file I/O off the request latency path.
    Alternatives: Save synchronously inside the request handler.
    """

    try:
        services.classification.save()
    except SnapshotError:
        logger.exception("Background snapshot save failed.")


def create_app(config: AppConfig, services: AppServices | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to FolderPilot services.

    Importance: Ensures the API layer shares the same configuration and store.
    Alternatives: Instantiate services globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="FolderPilot API", version="0.1.0")
    services = services or build_services(config)
    app.state.services = services

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"status": "ok", "classification": config.classification_enabled}

    @app.post("/classify", dependencies=[Depends(require_api_key)])
    def classify(payload: ClassifyRequest, background_tasks: BackgroundTasks) -> dict[str, Any]:
        """Summary: Learn a newly filed message and suggest a better folder.

        Importance: Main integration point for mail clients.
        Alternatives: Classify in batches on a schedule.
        """

        folder = _to_folder(payload.folder)
        known = {(item.account_id, item.name): _to_folder(item) for item in payload.folders}
        result = services.classification.evaluate_message(
            folder, _to_envelope(payload.message), added=True
        )
        move_to = None
        if result is not None:
            advisor = MoveAdvisor(find_folder=lambda account_id, name: known.get((account_id, name)))
            target = advisor.advise(folder, result.predicted, payload.auto_classified)
            move_to = target.name if target else None
            background_tasks.add_task(_save_snapshot, services)
        return {
            "class": result.predicted if result else None,
            "move_to": move_to,
            "matched_words": result.max_matched_words if result else 0,
            "chances": [
                {"class": chance.category, "chance": chance.chance}
                for chance in (result.chances if result else [])
            ],
        }

    @app.post("/unlearn", dependencies=[Depends(require_api_key)])
    def unlearn(payload: UnlearnRequest, background_tasks: BackgroundTasks) -> dict[str, Any]:
        """Summary: Forget a message that left a folder.

        Importance: Keeps statistics in line with the user's current filing.
        Alternatives: Let statistics only ever grow.
        """

        folder = _to_folder(payload.folder)
        result = services.classification.evaluate_message(
            folder, _to_envelope(payload.message), added=False
        )
        if result is not None:
            background_tasks.add_task(_save_snapshot, services)
        return {"removed": result is not None}

    @app.get("/stats", dependencies=[Depends(require_api_key)])
    def stats(account: int | None = None) -> dict[str, Any]:
        try:
            services.classification.load()
        except SnapshotError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return services.stats.snapshot(account)

    @app.post("/snapshot/load", dependencies=[Depends(require_api_key)])
    def load_snapshot() -> dict[str, bool]:
        try:
            return {"loaded": services.classification.load()}
        except SnapshotError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.post("/snapshot/save", dependencies=[Depends(require_api_key)])
    def save_snapshot() -> dict[str, bool]:
        """Summary: Write the statistics snapshot if it changed.

        Importance: Lets clients flush statistics before shutdown.
        Alternatives: Rely on background saves only.
        """

        try:
            return {"saved": services.classification.save()}
        except SnapshotError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc

    @app.post("/snapshot/clear", dependencies=[Depends(require_api_key)])
    def clear_snapshot(background_tasks: BackgroundTasks) -> dict[str, str]:
        services.classification.clear()
        background_tasks.add_task(_save_snapshot, services)
        return {"status": "cleared"}

    return app
