"""FastAPI endpoints for the calculator page.

Routes
------
GET    /calculator                 Current display
POST   /calculator/keys            Press a button
GET    /calculator/state           Snapshot of the calculator aggregate
PUT    /calculator/state           Restore a snapshot
GET    /plans                      Purchasable plans
GET    /purchase                   Purchase wizard state
POST   /purchase/open              Open the wizard at plan selection
POST   /purchase/plan              Choose a plan
POST   /purchase/continue          Advance to the payment method step
POST   /purchase/back              Return to plan selection
POST   /purchase/pay               Run the (simulated) payment
POST   /purchase/close             Close the wizard, optionally with result
GET    /entitlement                Current entitlement
DELETE /entitlement                Cancel the subscription
POST   /debug/reset-entitlement    Clear the entitlement (debug mode only)
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from calculator import InvalidStateError
from models import (
    CalculatorState,
    CalculatorView,
    Entitlement,
    KeyPress,
    PLANS,
    PlanListing,
    PlanSelection,
    WizardView,
)
from purchase import UnknownPlanError, WizardStateError
from session import CalculatorSession, EntitlementRequiredError
from store import EntitlementNotFoundError

calculator_router = APIRouter(prefix="/calculator", tags=["calculator"])
plans_router = APIRouter(prefix="/plans", tags=["subscription"])
purchase_router = APIRouter(prefix="/purchase", tags=["subscription"])
entitlement_router = APIRouter(prefix="/entitlement", tags=["subscription"])
debug_router = APIRouter(prefix="/debug", tags=["debug"])


def get_session(request: Request) -> CalculatorSession:
    """Dependency: the session owned by the running app."""
    return request.app.state.session


# ---------------------------------------------------------------------------
# Error helpers
# ---------------------------------------------------------------------------

def _payment_required(e: EntitlementRequiredError) -> HTTPException:
    return HTTPException(status_code=402, detail=str(e))


def _conflict(e: WizardStateError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


def _unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------

@calculator_router.get("", response_model=CalculatorView)
def get_calculator(
    session: CalculatorSession = Depends(get_session),
) -> CalculatorView:
    return session.calculator.view()


@calculator_router.post("/keys", response_model=CalculatorView)
def press_key(
    payload: KeyPress,
    session: CalculatorSession = Depends(get_session),
) -> CalculatorView:
    """Press one button and return the updated display."""
    try:
        return session.press(payload.key, payload.value)
    except EntitlementRequiredError as e:
        raise _payment_required(e) from e
    except WizardStateError as e:
        raise _conflict(e) from e
    except ValueError as e:
        raise _unprocessable(e) from e


@calculator_router.get("/state", response_model=CalculatorState)
def get_state(
    session: CalculatorSession = Depends(get_session),
) -> CalculatorState:
    return session.calculator.capture_state()


@calculator_router.put("/state", response_model=CalculatorView)
def put_state(
    payload: CalculatorState,
    session: CalculatorSession = Depends(get_session),
) -> CalculatorView:
    """Replace the calculator aggregate with a snapshot."""
    try:
        session.calculator.restore_state(payload)
    except InvalidStateError as e:
        raise _unprocessable(e) from e
    return session.calculator.view()


# ---------------------------------------------------------------------------
# Plans and purchase wizard
# ---------------------------------------------------------------------------

@plans_router.get("", response_model=list[PlanListing])
def list_plans() -> list[PlanListing]:
    return [PlanListing(id=plan_id, info=info) for plan_id, info in PLANS.items()]


@purchase_router.get("", response_model=WizardView)
def get_purchase(session: CalculatorSession = Depends(get_session)) -> WizardView:
    return session.wizard.view()


@purchase_router.post("/open", response_model=WizardView)
def open_purchase(session: CalculatorSession = Depends(get_session)) -> WizardView:
    try:
        session.wizard.open(on_result=session.resume)
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


@purchase_router.post("/plan", response_model=WizardView)
def select_plan(
    payload: PlanSelection,
    session: CalculatorSession = Depends(get_session),
) -> WizardView:
    try:
        session.wizard.select_plan(payload.plan)
    except UnknownPlanError as e:
        raise _unprocessable(e) from e
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


@purchase_router.post("/continue", response_model=WizardView)
def continue_to_payment(
    session: CalculatorSession = Depends(get_session),
) -> WizardView:
    try:
        session.wizard.continue_to_payment()
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


@purchase_router.post("/back", response_model=WizardView)
def back_to_plan(session: CalculatorSession = Depends(get_session)) -> WizardView:
    try:
        session.wizard.back_to_plan()
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


@purchase_router.post("/pay", response_model=WizardView)
async def pay(session: CalculatorSession = Depends(get_session)) -> WizardView:
    """Run the simulated payment; responds once it has completed."""
    try:
        await session.wizard.process_payment()
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


@purchase_router.post("/close", response_model=WizardView)
def close_purchase(
    with_result: bool = Query(
        default=False, description="Restore the calculation deferred by equals"
    ),
    session: CalculatorSession = Depends(get_session),
) -> WizardView:
    try:
        if with_result:
            session.wizard.close_with_result()
        else:
            session.wizard.close()
    except WizardStateError as e:
        raise _conflict(e) from e
    return session.wizard.view()


# ---------------------------------------------------------------------------
# Entitlement
# ---------------------------------------------------------------------------

@entitlement_router.get("", response_model=Entitlement)
def get_entitlement(session: CalculatorSession = Depends(get_session)) -> Entitlement:
    try:
        return session.store.get()
    except EntitlementNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@entitlement_router.delete("", status_code=204)
def cancel_entitlement(session: CalculatorSession = Depends(get_session)) -> Response:
    session.cancel_subscription()
    return Response(status_code=204)


@debug_router.post("/reset-entitlement", status_code=204)
def reset_entitlement(session: CalculatorSession = Depends(get_session)) -> Response:
    session.store.clear()
    return Response(status_code=204)
