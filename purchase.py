"""Purchase wizard for the calculator subscription.

Steps::

    closed -> plan_selection -> payment_method -> success
                    ^                 |
                    +---- back -------+

Payment is simulated with a delay.  While it runs the wizard refuses to be
closed or stepped back.  The wizard never touches calculator state; the
session hands it a callback that restores the deferred calculation when the
user closes the success screen.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from loguru import logger

from models import (
    Entitlement,
    PaymentMethod,
    PlanId,
    WizardStep,
    WizardView,
    get_plan_info,
)
from store import EntitlementStore


class WizardStateError(Exception):
    """Raised when an action is not allowed at the current step."""

    def __init__(self, action: str, step: WizardStep) -> None:
        self.action = action
        self.step = step
        super().__init__(self._message())

    def _message(self) -> str:
        return f"Cannot {self.action} at step '{self.step.value}'"


class PaymentInProgressError(WizardStateError):
    """Raised when the wizard is asked to move while a payment runs."""

    def _message(self) -> str:
        return f"Cannot {self.action} while a payment is processing"


class UnknownPlanError(Exception):
    """Raised when a plan id is not offered."""

    def __init__(self, plan: str) -> None:
        self.plan = plan
        super().__init__(f"Unknown plan: {plan}")


class PurchaseWizard:
    """Walks the user from plan selection to a recorded entitlement."""

    def __init__(
        self,
        store: EntitlementStore,
        delay_seconds: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._delay_seconds = delay_seconds
        self._sleep = sleep
        self._on_result: Callable[[], None] | None = None

        self.step = WizardStep.CLOSED
        self.selected_plan: PlanId | None = None
        self.payment_method = PaymentMethod.CARD
        self.processing = False

    # -- helpers -------------------------------------------------------------

    def _require(self, action: str, *steps: WizardStep) -> None:
        if self.processing:
            raise PaymentInProgressError(action, self.step)
        if self.step not in steps:
            raise WizardStateError(action, self.step)

    def _reset(self) -> None:
        self.step = WizardStep.CLOSED
        self.selected_plan = None

    # -- steps ---------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.step != WizardStep.CLOSED

    def open(self, on_result: Callable[[], None] | None = None) -> None:
        """Show the plan selection step."""
        if self.processing:
            raise PaymentInProgressError("open", self.step)
        self.step = WizardStep.PLAN_SELECTION
        self.selected_plan = None
        if on_result is not None:
            self._on_result = on_result

    def select_plan(self, plan: PlanId | str) -> None:
        """Mark a plan as chosen."""
        self._require("select a plan", WizardStep.PLAN_SELECTION)
        try:
            self.selected_plan = PlanId(plan)
        except ValueError:
            raise UnknownPlanError(str(plan)) from None

    def continue_to_payment(self) -> None:
        """Advance to the payment method step."""
        self._require("continue to payment", WizardStep.PLAN_SELECTION)
        if self.selected_plan is None:
            raise WizardStateError("continue without a plan", self.step)
        self.step = WizardStep.PAYMENT_METHOD

    def back_to_plan(self) -> None:
        """Return to plan selection, keeping the chosen plan."""
        self._require("go back", WizardStep.PAYMENT_METHOD)
        self.step = WizardStep.PLAN_SELECTION

    async def process_payment(self) -> Entitlement:
        """Simulate the payment and record the entitlement."""
        self._require("pay", WizardStep.PAYMENT_METHOD)
        assert self.selected_plan is not None

        self.processing = True
        try:
            logger.info("Processing payment for plan {}", self.selected_plan.value)
            await self._sleep(self._delay_seconds)
            entitlement = self._store.save(
                Entitlement(
                    plan=self.selected_plan,
                    payment_method=self.payment_method,
                    is_paid=True,
                    plan_info=get_plan_info(self.selected_plan),
                )
            )
            self.step = WizardStep.SUCCESS
            return entitlement
        finally:
            self.processing = False

    def close(self) -> None:
        """Hide the wizard and reset it."""
        if self.processing:
            raise PaymentInProgressError("close", self.step)
        self._reset()

    def close_with_result(self) -> None:
        """Close the success screen, then run the pending result callback once."""
        self._require("close with result", WizardStep.SUCCESS)
        self.close()
        callback, self._on_result = self._on_result, None
        if callback is not None:
            callback()

    # -- output --------------------------------------------------------------

    def view(self) -> WizardView:
        plan = self.selected_plan
        return WizardView(
            step=self.step,
            selected_plan=plan,
            selected_plan_info=get_plan_info(plan) if plan is not None else None,
            payment_method=self.payment_method,
            processing=self.processing,
            can_continue=self.step == WizardStep.PLAN_SELECTION and plan is not None,
            can_pay=self.step == WizardStep.PAYMENT_METHOD and not self.processing,
        )
