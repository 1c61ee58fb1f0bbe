"""
Partner companies and the single "about" text section.
"""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from agency.crud import AboutController
from agency.dependencies import get_about_controller, get_company_controller, require_admin
from agency.routes.entities import image_entity_router
from agency.schemas import AboutOut, CompanyOut

router = image_entity_router(get_company_controller, CompanyOut)

about_router = APIRouter()


@about_router.get("", response_model=AboutOut)
def get_about(controller: AboutController = Depends(get_about_controller)) -> AboutOut:
    return controller.current()


@about_router.put("", response_model=AboutOut, dependencies=[Depends(require_admin)])
def update_about(
    payload: dict = Body(default={}),
    controller: AboutController = Depends(get_about_controller),
) -> AboutOut:
    return controller.upsert(payload)
