"""Calculator session: one calculator behind the subscription gate.

The session owns the calculator, the entitlement store and the purchase
wizard.  ``equals`` consults the store before letting the calculator
finish a computation.  When the user is not entitled the calculator is left
exactly as it was, a snapshot is kept as the deferred state, and the
purchase wizard is opened.  Closing the wizard's success screen restores
that snapshot so the user can press equals again.
"""
from __future__ import annotations

from loguru import logger

from calculator import Calculator
from config import Settings
from models import CalculatorState, CalculatorView, Key
from purchase import PurchaseWizard
from store import EntitlementStore


class EntitlementRequiredError(Exception):
    """Raised when equals is pressed without an active subscription."""

    def __init__(self, deferred: CalculatorState) -> None:
        self.deferred = deferred
        super().__init__("A subscription is required to evaluate")


class CalculatorSession:
    """Event-dispatch owner of the calculator and its collaborators."""

    def __init__(
        self,
        calculator: Calculator | None = None,
        store: EntitlementStore | None = None,
        wizard: PurchaseWizard | None = None,
    ) -> None:
        self.calculator = calculator if calculator is not None else Calculator()
        self.store = store if store is not None else EntitlementStore()
        self.wizard = wizard if wizard is not None else PurchaseWizard(self.store)
        self.deferred: CalculatorState | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> CalculatorSession:
        store = EntitlementStore(settings.entitlement_path)
        return cls(
            calculator=Calculator(max_entry_length=settings.max_entry_length),
            store=store,
            wizard=PurchaseWizard(store, delay_seconds=settings.payment_delay_seconds),
        )

    # -- key handling --------------------------------------------------------

    def press(self, key: Key | str, value: str | None = None) -> CalculatorView:
        key = Key(key)
        logger.debug("key {} {}", key.value, value or "")
        if key == Key.EQUALS:
            self.equals()
        else:
            self.calculator.press(key, value)
        return self.calculator.view()

    def equals(self) -> None:
        if not self.store.is_entitled():                          # GATE-DENIED
            snapshot = self.calculator.capture_state()
            # Raises while a payment runs; the earlier deferral stands.
            self.wizard.open(on_result=self.resume)
            self.deferred = snapshot
            logger.warning("Evaluation blocked: no active subscription")
            raise EntitlementRequiredError(self.deferred)
        self.calculator.equals()                                  # GATE-ALLOWED

    def resume(self) -> None:
        """Put back the calculation that was pending when equals was blocked."""
        if self.deferred is None:
            return
        self.calculator.restore_state(self.deferred)
        self.deferred = None
        logger.info("Restored deferred calculation")

    # -- subscription --------------------------------------------------------

    def cancel_subscription(self) -> None:
        self.store.clear()
        logger.info("Subscription cancelled")
