"""
Router factory for the single-image entities (gallery, team, companies).

Reads are public; writes require an admin token and take multipart forms.
"""

from __future__ import annotations

from typing import Callable, Type

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from agency.config import Settings, get_settings
from agency.crud import ImageEntityController
from agency.dependencies import require_admin
from agency.routes.forms import read_multipart
from agency.schemas import MessageResponse


def image_entity_router(
    get_controller: Callable[..., ImageEntityController],
    item_schema: Type,
) -> APIRouter:
    router = APIRouter()

    @router.get("", response_model=list[item_schema])
    def list_items(controller: ImageEntityController = Depends(get_controller)):
        return controller.list_records()

    @router.get("/{item_id}", response_model=item_schema)
    def get_item(item_id: str, controller: ImageEntityController = Depends(get_controller)):
        return controller.get(item_id)

    @router.post("", response_model=item_schema, status_code=201, dependencies=[Depends(require_admin)])
    async def create_item(
        request: Request,
        controller: ImageEntityController = Depends(get_controller),
        settings: Settings = Depends(get_settings),
    ):
        form = await read_multipart(request)
        file = await form.file(controller.file_field, settings.max_upload_bytes)
        return await run_in_threadpool(controller.create, form.fields, file)

    @router.put("/{item_id}", response_model=item_schema, dependencies=[Depends(require_admin)])
    async def update_item(
        item_id: str,
        request: Request,
        controller: ImageEntityController = Depends(get_controller),
        settings: Settings = Depends(get_settings),
    ):
        form = await read_multipart(request)
        file = await form.file(controller.file_field, settings.max_upload_bytes)
        return await run_in_threadpool(controller.update, item_id, form.fields, file)

    @router.delete("/{item_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
    def delete_item(item_id: str, controller: ImageEntityController = Depends(get_controller)):
        return controller.delete(item_id)

    return router
