from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from agency.accounts import login
from agency.config import Settings, get_settings
from agency.db import DocumentStore
from agency.dependencies import get_document_store
from agency.schemas import LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login_admin(
    payload: dict = Body(default={}),
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    return login(store, settings, payload)
