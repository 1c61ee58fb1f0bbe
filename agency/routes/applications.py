"""
Model application intake (public) and application review (admin).
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Request
from starlette.concurrency import run_in_threadpool

from agency.config import Settings, get_settings
from agency.crud import ApplicationController
from agency.dependencies import (
    get_application_controller,
    get_intake_pipeline,
    require_admin,
)
from agency.intake import IntakePipeline
from agency.routes.forms import read_multipart
from agency.schemas import (
    ApplicationList,
    ApplicationOut,
    ApplicationReceipt,
    MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ApplicationReceipt, status_code=201)
async def submit_application(
    request: Request,
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
    settings: Settings = Depends(get_settings),
) -> ApplicationReceipt:
    form = await read_multipart(request)
    photos = await form.files("photos", settings.max_upload_bytes)
    logger.info("Application received with %d photo(s)", len(photos))
    return await run_in_threadpool(pipeline.submit_application, form.fields, photos)


@router.get("", response_model=ApplicationList, dependencies=[Depends(require_admin)])
def list_applications(
    controller: ApplicationController = Depends(get_application_controller),
) -> ApplicationList:
    return controller.list_all()


@router.get("/{application_id}", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def get_application(
    application_id: str,
    controller: ApplicationController = Depends(get_application_controller),
) -> ApplicationOut:
    return controller.get(application_id)


@router.put("/{application_id}", response_model=ApplicationOut, dependencies=[Depends(require_admin)])
def update_application_status(
    application_id: str,
    payload: dict = Body(default={}),
    controller: ApplicationController = Depends(get_application_controller),
) -> ApplicationOut:
    return controller.update_status(application_id, payload)


@router.delete("/{application_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_application(
    application_id: str,
    controller: ApplicationController = Depends(get_application_controller),
) -> MessageResponse:
    return controller.delete(application_id)
