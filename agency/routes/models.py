"""
Model roster: public browsing plus admin management of profiles and portfolios.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from starlette.concurrency import run_in_threadpool

from agency.config import Settings, get_settings
from agency.crud import ModelController
from agency.dependencies import get_model_controller, require_admin
from agency.routes.forms import read_multipart
from agency.schemas import MessageResponse, ModelList, ModelOut
from agency.validation import parse_pagination

router = APIRouter()


@router.get("", response_model=ModelList)
def list_models(
    category: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    modelSize: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    controller: ModelController = Depends(get_model_controller),
) -> ModelList:
    page_num, limit_num = parse_pagination(page, limit)
    return controller.list_page(
        category=category,
        name=name,
        model_size=modelSize,
        page=page_num,
        limit=limit_num,
    )


@router.get("/{model_id}", response_model=ModelOut)
def get_model(
    model_id: str,
    controller: ModelController = Depends(get_model_controller),
) -> ModelOut:
    return controller.get(model_id)


@router.post("", response_model=ModelOut, status_code=201, dependencies=[Depends(require_admin)])
async def create_model(
    request: Request,
    controller: ModelController = Depends(get_model_controller),
    settings: Settings = Depends(get_settings),
) -> ModelOut:
    form = await read_multipart(request)
    image = await form.file("image", settings.max_upload_bytes)
    return await run_in_threadpool(controller.create, form.fields, image)


@router.put("/{model_id}", response_model=ModelOut, dependencies=[Depends(require_admin)])
async def update_model(
    model_id: str,
    request: Request,
    controller: ModelController = Depends(get_model_controller),
    settings: Settings = Depends(get_settings),
) -> ModelOut:
    form = await read_multipart(request)
    image = await form.file("image", settings.max_upload_bytes)
    return await run_in_threadpool(controller.update, model_id, form.fields, image)


@router.post("/{model_id}/portfolio", response_model=ModelOut, dependencies=[Depends(require_admin)])
async def add_portfolio_image(
    model_id: str,
    request: Request,
    controller: ModelController = Depends(get_model_controller),
    settings: Settings = Depends(get_settings),
) -> ModelOut:
    form = await read_multipart(request)
    image = await form.file("image", settings.max_upload_bytes)
    return await run_in_threadpool(controller.add_portfolio_image, model_id, image)


@router.delete(
    "/{model_id}/portfolio/{image_index}",
    response_model=ModelOut,
    dependencies=[Depends(require_admin)],
)
def remove_portfolio_image(
    model_id: str,
    image_index: str,
    controller: ModelController = Depends(get_model_controller),
) -> ModelOut:
    return controller.remove_portfolio_image(model_id, image_index)


@router.delete("/{model_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_model(
    model_id: str,
    controller: ModelController = Depends(get_model_controller),
) -> MessageResponse:
    return controller.delete(model_id)
