"""Tests for the purchase wizard."""
from __future__ import annotations

import asyncio

import pytest

from models import PlanId, WizardStep
from purchase import (
    PaymentInProgressError,
    PurchaseWizard,
    UnknownPlanError,
    WizardStateError,
)


def _at_payment(wizard: PurchaseWizard, plan: PlanId = PlanId.MONTHLY) -> None:
    wizard.open()
    wizard.select_plan(plan)
    wizard.continue_to_payment()


class TestSteps:

    def test_starts_closed(self, wizard):
        assert wizard.step == WizardStep.CLOSED
        assert wizard.is_open is False

    def test_open_shows_plan_selection(self, wizard):
        wizard.open()
        assert wizard.step == WizardStep.PLAN_SELECTION
        assert wizard.is_open is True
        assert wizard.selected_plan is None

    def test_select_plan(self, wizard):
        wizard.open()
        wizard.select_plan("yearly")
        assert wizard.selected_plan == PlanId.YEARLY
        view = wizard.view()
        assert view.can_continue is True
        assert view.selected_plan_info.name == "Pro plan"

    def test_reselect_plan(self, wizard):
        wizard.open()
        wizard.select_plan(PlanId.MONTHLY)
        wizard.select_plan(PlanId.LIFETIME)
        assert wizard.selected_plan == PlanId.LIFETIME

    def test_unknown_plan(self, wizard):
        wizard.open()
        with pytest.raises(UnknownPlanError, match="weekly"):
            wizard.select_plan("weekly")
        assert wizard.selected_plan is None

    def test_continue_requires_plan(self, wizard):
        wizard.open()
        assert wizard.view().can_continue is False
        with pytest.raises(WizardStateError):
            wizard.continue_to_payment()
        assert wizard.step == WizardStep.PLAN_SELECTION

    def test_continue_to_payment(self, wizard):
        _at_payment(wizard)
        assert wizard.step == WizardStep.PAYMENT_METHOD
        assert wizard.view().can_pay is True

    def test_back_keeps_plan(self, wizard):
        _at_payment(wizard, PlanId.YEARLY)
        wizard.back_to_plan()
        assert wizard.step == WizardStep.PLAN_SELECTION
        assert wizard.selected_plan == PlanId.YEARLY

    def test_select_plan_while_closed(self, wizard):
        with pytest.raises(WizardStateError, match="closed"):
            wizard.select_plan(PlanId.MONTHLY)

    def test_back_from_plan_selection(self, wizard):
        wizard.open()
        with pytest.raises(WizardStateError):
            wizard.back_to_plan()

    def test_pay_before_payment_step(self, wizard):
        wizard.open()
        with pytest.raises(WizardStateError):
            asyncio.run(wizard.process_payment())

    def test_close_resets(self, wizard):
        _at_payment(wizard)
        wizard.close()
        assert wizard.step == WizardStep.CLOSED
        assert wizard.selected_plan is None

    def test_reopen_clears_selection(self, wizard):
        wizard.open()
        wizard.select_plan(PlanId.LIFETIME)
        wizard.open()
        assert wizard.selected_plan is None


class TestPayment:

    def test_payment_records_entitlement(self, wizard, store):
        _at_payment(wizard, PlanId.LIFETIME)
        entitlement = asyncio.run(wizard.process_payment())
        assert entitlement.plan == PlanId.LIFETIME
        assert entitlement.plan_info.name == "Premium plan"
        assert entitlement.is_paid is True
        assert store.is_entitled() is True
        assert wizard.step == WizardStep.SUCCESS
        assert wizard.processing is False

    def test_payment_waits_for_delay(self, store):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        wizard = PurchaseWizard(store, delay_seconds=3.0, sleep=fake_sleep)
        _at_payment(wizard)
        asyncio.run(wizard.process_payment())
        assert delays == [3.0]

    def test_processing_blocks_close_and_back(self, store):
        seen = {}

        async def checking_sleep(seconds):
            seen["processing"] = wizard.processing
            seen["can_pay"] = wizard.view().can_pay
            for action in (wizard.close, wizard.back_to_plan, wizard.open):
                with pytest.raises(PaymentInProgressError):
                    action()
            with pytest.raises(PaymentInProgressError, match="processing"):
                await wizard.process_payment()

        wizard = PurchaseWizard(store, delay_seconds=0, sleep=checking_sleep)
        _at_payment(wizard)
        asyncio.run(wizard.process_payment())
        assert seen == {"processing": True, "can_pay": False}
        assert wizard.step == WizardStep.SUCCESS

    def test_failed_sleep_clears_processing(self, store):
        async def failing_sleep(seconds):
            raise RuntimeError("gateway down")

        wizard = PurchaseWizard(store, delay_seconds=0, sleep=failing_sleep)
        _at_payment(wizard)
        with pytest.raises(RuntimeError):
            asyncio.run(wizard.process_payment())
        assert wizard.processing is False
        assert wizard.step == WizardStep.PAYMENT_METHOD
        assert store.is_entitled() is False


class TestResultCallback:

    @staticmethod
    def _pay(wizard: PurchaseWizard) -> None:
        wizard.select_plan(PlanId.MONTHLY)
        wizard.continue_to_payment()
        asyncio.run(wizard.process_payment())

    def test_close_with_result_runs_callback_once(self, wizard):
        calls = []
        wizard.open(on_result=lambda: calls.append(1))
        self._pay(wizard)
        wizard.close_with_result()
        wizard.open()
        self._pay(wizard)
        wizard.close_with_result()
        assert calls == [1]
        assert wizard.step == WizardStep.CLOSED

    def test_plain_close_keeps_callback(self, wizard):
        calls = []
        wizard.open(on_result=lambda: calls.append(1))
        wizard.close()
        wizard.open()
        self._pay(wizard)
        wizard.close_with_result()
        assert calls == [1]

    def test_close_with_result_without_callback(self, wizard):
        wizard.open()
        self._pay(wizard)
        wizard.close_with_result()
        assert wizard.step == WizardStep.CLOSED

    @pytest.mark.parametrize("steps", [0, 1, 2])
    def test_close_with_result_before_success(self, wizard, steps):
        calls = []
        if steps:
            wizard.open(on_result=lambda: calls.append(1))
        if steps == 2:
            wizard.select_plan(PlanId.YEARLY)
            wizard.continue_to_payment()
        before = wizard.step
        with pytest.raises(WizardStateError, match="close with result"):
            wizard.close_with_result()
        assert wizard.step == before
        assert calls == []
