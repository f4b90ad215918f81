"""HTTP API for the SOP assistant.

Why: Thin surface over the use cases; no business logic here.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from sop_assistant.application.dto.query_dto import AskRequest
from sop_assistant.domain.errors import DomainError, ValidationError
from sop_assistant.domain.models import SourceEntry

logger = logging.getLogger(__name__)


class AskRequestModel(BaseModel):
    question: str
    user_id: str | None = None
    is_preferred: bool = False


class AskResponseModel(BaseModel):
    answer: str
    confidence: float
    confidence_level: str
    sources: list[str] = Field(default_factory=list)
    corrections: list[str] = Field(default_factory=list)
    grounding_warnings: list[str] = Field(default_factory=list)


class EntryModel(BaseModel):
    title: str = ""
    content: str = ""
    category: str = "General"
    section: str = ""
    source_file: str = ""

    def to_entry(self) -> SourceEntry:
        return SourceEntry(
            title=self.title,
            content=self.content,
            category=self.category,
            section=self.section,
            source_file=self.source_file,
        )


class RebuildRequestModel(BaseModel):
    entries: list[EntryModel]


class RebuildResponseModel(BaseModel):
    entry_count: int
    chunk_count: int
    files: dict[str, int] = Field(default_factory=dict)


class ValidateQuestionsRequestModel(BaseModel):
    source_file: str
    entries: list[EntryModel]
    category: str | None = None


class CountResponseModel(BaseModel):
    count: int


app = FastAPI(title="SOP Assistant API", version="1.0.0")
container: Any | None = None


@app.on_event("startup")
async def startup_event() -> None:
    global container

    from sop_assistant.config.composition import build_container

    if container is None:
        container = build_container()


@app.on_event("shutdown")
async def shutdown_event() -> None:
    if container is not None:
        await container.aclose()


def _require_container() -> Any:
    if container is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return container


@app.post("/v1/ask", response_model=AskResponseModel)
async def ask(req: AskRequestModel) -> AskResponseModel:
    """Backend failures come back as a zero-confidence answer, not an HTTP error."""
    c = _require_container()
    try:
        result = await c.get_answer_use_case().execute(
            AskRequest(question=req.question, user_id=req.user_id, is_preferred=req.is_preferred)
        )
    except ValidationError as ex:
        raise HTTPException(status_code=400, detail=str(ex)) from ex
    return AskResponseModel(
        answer=result.answer,
        confidence=result.confidence,
        confidence_level=result.confidence_level,
        sources=result.sources,
        corrections=result.corrections,
        grounding_warnings=result.grounding_warnings,
    )


@app.post("/v1/rebuild-index", response_model=RebuildResponseModel)
async def rebuild_index(req: RebuildRequestModel) -> RebuildResponseModel:
    c = _require_container()
    try:
        summary = await c.get_rebuild_use_case().execute([e.to_entry() for e in req.entries])
    except DomainError as ex:
        logger.error("Index rebuild failed: %s", ex)
        raise HTTPException(status_code=502, detail=f"{type(ex).__name__}: {ex}") from ex
    return RebuildResponseModel(
        entry_count=summary.entry_count, chunk_count=summary.chunk_count, files=summary.files
    )


@app.post("/v1/questions/validate", response_model=CountResponseModel)
async def validate_questions(req: ValidateQuestionsRequestModel) -> CountResponseModel:
    c = _require_container()
    try:
        stored = await c.get_validate_questions_use_case().execute(
            req.source_file, [e.to_entry() for e in req.entries], req.category
        )
    except DomainError as ex:
        raise HTTPException(status_code=502, detail=f"{type(ex).__name__}: {ex}") from ex
    return CountResponseModel(count=stored)


@app.post("/v1/acronyms/reload", response_model=CountResponseModel)
async def reload_acronyms() -> CountResponseModel:
    c = _require_container()
    return CountResponseModel(count=len(c.get_acronym_cache().reload()))


@app.post("/v1/acronyms/index", response_model=CountResponseModel)
async def index_acronyms() -> CountResponseModel:
    c = _require_container()
    try:
        count = await c.get_index_acronyms_use_case().execute()
    except DomainError as ex:
        raise HTTPException(status_code=502, detail=f"{type(ex).__name__}: {ex}") from ex
    return CountResponseModel(count=count)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy", "service": "sop-assistant"}
