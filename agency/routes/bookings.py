from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from agency.crud import BookingController
from agency.dependencies import get_booking_controller, get_intake_pipeline, require_admin
from agency.intake import IntakePipeline
from agency.schemas import BookingOut, BookingReceipt, MessageResponse

router = APIRouter()


@router.post("", response_model=BookingReceipt, status_code=201)
def submit_booking(
    payload: dict = Body(default={}),
    pipeline: IntakePipeline = Depends(get_intake_pipeline),
) -> BookingReceipt:
    return pipeline.submit_booking(payload)


@router.get("", response_model=list[BookingOut], dependencies=[Depends(require_admin)])
def list_bookings(
    controller: BookingController = Depends(get_booking_controller),
) -> list[BookingOut]:
    return controller.list_records()


@router.get("/{booking_id}", response_model=BookingOut, dependencies=[Depends(require_admin)])
def get_booking(
    booking_id: str,
    controller: BookingController = Depends(get_booking_controller),
) -> BookingOut:
    return controller.get(booking_id)


@router.put("/{booking_id}", response_model=BookingOut, dependencies=[Depends(require_admin)])
def update_booking(
    booking_id: str,
    payload: dict = Body(default={}),
    controller: BookingController = Depends(get_booking_controller),
) -> BookingOut:
    return controller.update(booking_id, payload)


@router.delete("/{booking_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_booking(
    booking_id: str,
    controller: BookingController = Depends(get_booking_controller),
) -> MessageResponse:
    return controller.delete(booking_id)
