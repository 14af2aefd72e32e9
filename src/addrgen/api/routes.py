"""JSON API routes for the generator page."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from addrgen.generator.session import GeneratorSession
from addrgen.models.history import HistoryRecord
from addrgen.models.mail import TempMailMessage
from addrgen.models.state import InputMode, SessionState

router = APIRouter()


def get_session(request: Request) -> GeneratorSession:
    """Dependency returning the process-wide page session."""
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Session not ready.")
    return session


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class ModeRequest(BaseModel):
    mode: InputMode


class InputRequest(BaseModel):
    value: str = ""


class GenerateRequest(BaseModel):
    """Optional overrides applied before ``POST /api/generate`` runs."""

    mode: InputMode | None = None
    value: str | None = Field(None, description="IP address, or country|state|city in address mode.")


class MailResponse(BaseModel):
    address: str = ""
    messages: list[TempMailMessage] = Field(default_factory=list)
    new_messages: list[TempMailMessage] = Field(default_factory=list)
    toast_message: TempMailMessage | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/state", response_model=SessionState)
def get_state(session: GeneratorSession = Depends(get_session)) -> SessionState:
    return session.snapshot()


@router.post("/api/initialize", response_model=SessionState)
def initialize(session: GeneratorSession = Depends(get_session)) -> SessionState:
    """Detect the caller IP and load the first identity."""
    session.initialize()
    return session.snapshot()


@router.post("/api/mode", response_model=SessionState)
def set_mode(req: ModeRequest, session: GeneratorSession = Depends(get_session)) -> SessionState:
    session.set_input_mode(req.mode)
    return session.snapshot()


@router.post("/api/input", response_model=SessionState)
def set_input(req: InputRequest, session: GeneratorSession = Depends(get_session)) -> SessionState:
    session.set_input(req.value)
    return session.snapshot()


@router.post("/api/generate", response_model=SessionState)
def generate(req: GenerateRequest | None = None, session: GeneratorSession = Depends(get_session)) -> SessionState:
    """Generate a new identity for the current (or supplied) input."""
    if req is not None:
        if req.mode is not None:
            session.set_input_mode(req.mode)
        if req.value is not None:
            session.set_input(req.value)
    session.generate()
    return session.snapshot()


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


@router.get("/api/history", response_model=list[HistoryRecord])
def list_history(session: GeneratorSession = Depends(get_session)) -> list[HistoryRecord]:
    return session.history()


@router.post("/api/history/{record_id}/select", response_model=SessionState)
def select_history(record_id: str, session: GeneratorSession = Depends(get_session)) -> SessionState:
    session.select_history(record_id)
    return session.snapshot()


@router.delete("/api/history/{record_id}")
def delete_history(record_id: str, session: GeneratorSession = Depends(get_session)) -> dict[str, Any]:
    session.delete_history(record_id)
    return {"deleted": record_id}


@router.delete("/api/history")
def clear_history(session: GeneratorSession = Depends(get_session)) -> dict[str, Any]:
    return {"deleted": session.clear_history()}


# ---------------------------------------------------------------------------
# Disposable inbox
# ---------------------------------------------------------------------------


@router.get("/api/mail", response_model=MailResponse)
def get_mail(session: GeneratorSession = Depends(get_session)) -> MailResponse:
    """Poll the inbox and return it; the page calls this on a timer."""
    fresh = session.refresh_mail()
    return MailResponse(
        address=session.mailbox.address if session.mailbox else "",
        messages=session.messages,
        new_messages=fresh,
        toast_message=session.toast_message,
    )


@router.get("/api/mail/messages/{message_id}", response_model=TempMailMessage)
def get_message(message_id: str, session: GeneratorSession = Depends(get_session)) -> TempMailMessage:
    return session.open_message(message_id)


@router.post("/api/mail/toast/dismiss")
def dismiss_toast(session: GeneratorSession = Depends(get_session)) -> dict[str, str]:
    session.dismiss_toast()
    return {"status": "ok"}
