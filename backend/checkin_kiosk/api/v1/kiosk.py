"""Kiosk state and customer action endpoints."""

from fastapi import APIRouter, Depends

from checkin_kiosk.core.logging import get_logger
from checkin_kiosk.schemas.actions import (
    CustomerConfirmRequest,
    LanguageRequest,
    RentalRequest,
    SignAgreementRequest,
)
from checkin_kiosk.schemas.state import ActionResponse, KioskStateResponse
from checkin_kiosk.services.controller import KioskController, get_controller

logger = get_logger(__name__)

router = APIRouter()


def _result(controller: KioskController, ok: bool) -> ActionResponse:
    return ActionResponse(ok=ok, state=controller.state_response())


@router.get("/state", response_model=KioskStateResponse)
async def get_state(controller: KioskController = Depends(get_controller)) -> KioskStateResponse:
    """Current view, customer-safe session and screen models."""
    return controller.state_response()


@router.post("/actions/language", response_model=ActionResponse)
async def select_language(
    body: LanguageRequest,
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.select_language(body.language)
    return _result(controller, ok)


@router.post("/actions/rental", response_model=ActionResponse)
async def select_rental(
    body: RentalRequest,
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    """
    Pick a rental.

    Sold-out rentals open the waitlist flow instead of proposing.
    """
    ok = await controller.dispatcher.select_rental(body.rental)
    return _result(controller, ok)


@router.post("/actions/waitlist/backup", response_model=ActionResponse)
async def select_waitlist_backup(
    body: RentalRequest,
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.select_waitlist_backup(body.rental)
    return _result(controller, ok)


@router.post("/actions/waitlist/acknowledge", response_model=ActionResponse)
async def acknowledge_upgrade_disclaimer(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.acknowledge_upgrade_disclaimer()
    return _result(controller, ok)


@router.post("/actions/waitlist/disclaimer/close", response_model=ActionResponse)
async def close_upgrade_disclaimer(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    controller.dispatcher.close_upgrade_disclaimer()
    return _result(controller, True)


@router.post("/actions/waitlist/cancel", response_model=ActionResponse)
async def cancel_waitlist(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.cancel_waitlist()
    return _result(controller, ok)


@router.post("/actions/membership/one-time", response_model=ActionResponse)
async def select_one_time_membership(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.select_one_time_membership()
    return _result(controller, ok)


@router.post("/actions/membership/six-month", response_model=ActionResponse)
async def open_six_month_membership(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = controller.dispatcher.open_six_month_membership()
    return _result(controller, ok)


@router.post("/actions/membership/continue", response_model=ActionResponse)
async def continue_membership_purchase(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.continue_membership_purchase()
    return _result(controller, ok)


@router.post("/actions/membership/close", response_model=ActionResponse)
async def close_membership_modal(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    controller.dispatcher.close_membership_modal()
    return _result(controller, True)


@router.post("/actions/membership/clear-intent", response_model=ActionResponse)
async def clear_membership_purchase_intent(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.clear_membership_purchase_intent()
    return _result(controller, ok)


@router.post("/actions/customer-confirm", response_model=ActionResponse)
async def respond_to_customer_confirmation(
    body: CustomerConfirmRequest,
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.respond_to_customer_confirmation(body.confirmed)
    return _result(controller, ok)


@router.post("/actions/agreement/sign", response_model=ActionResponse)
async def sign_agreement(
    body: SignAgreementRequest,
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.sign_agreement(body.signaturePayload)
    return _result(controller, ok)


@router.post("/actions/renewal-disclaimer/open", response_model=ActionResponse)
async def open_renewal_disclaimer(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    controller.dispatcher.open_renewal_disclaimer()
    return _result(controller, True)


@router.post("/actions/renewal-disclaimer/close", response_model=ActionResponse)
async def close_renewal_disclaimer(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    controller.dispatcher.close_renewal_disclaimer()
    return _result(controller, True)


@router.post("/actions/complete/acknowledge", response_model=ActionResponse)
async def acknowledge_completion(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.acknowledge_completion()
    return _result(controller, ok)


@router.post("/actions/id-scan/dismiss", response_model=ActionResponse)
async def dismiss_id_scan_issue(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    ok = await controller.dispatcher.dismiss_id_scan_issue()
    return _result(controller, ok)


@router.post("/actions/error/clear", response_model=ActionResponse)
async def clear_error(
    controller: KioskController = Depends(get_controller),
) -> ActionResponse:
    controller.dispatcher.clear_error()
    return _result(controller, True)
