from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from agency.crud import NewsletterController
from agency.dependencies import get_newsletter_controller, require_admin
from agency.schemas import MessageResponse, SubscriberOut

router = APIRouter()


@router.post("", response_model=MessageResponse, status_code=201)
def subscribe(
    payload: dict = Body(default={}),
    controller: NewsletterController = Depends(get_newsletter_controller),
) -> MessageResponse:
    return controller.subscribe(payload)


@router.get("", response_model=list[SubscriberOut], dependencies=[Depends(require_admin)])
def list_subscribers(
    controller: NewsletterController = Depends(get_newsletter_controller),
) -> list[SubscriberOut]:
    return controller.list_records()
