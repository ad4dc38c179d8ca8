"""Data models for the calculator and its subscription paywall.

``CalculatorState`` is the frozen snapshot of the calculator aggregate.  The
remaining models describe key presses, what the page shows, the purchasable
plans, and the persisted entitlement record.  This module defines data only;
behaviour lives in ``calculator``, ``store`` and ``purchase``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from evaluator import Operator


# ---------------------------------------------------------------------------
# Calculator state
# ---------------------------------------------------------------------------

class CalculatorState(BaseModel):
    """Snapshot of the calculator aggregate.

    Field types are checked here; the structural rules (well-formed numeral,
    operator iff operand, ...) live in ``contract.STATE_RULES``.
    """

    model_config = ConfigDict(frozen=True)

    entry_text: str = "0"
    pending_left_operand: float | None = None
    pending_operator: Operator | None = None
    awaiting_fresh_entry: bool = False


DEFAULT_STATE = CalculatorState()


# ---------------------------------------------------------------------------
# Key input and display output
# ---------------------------------------------------------------------------

class Key(str, Enum):
    DIGIT = "digit"
    DECIMAL = "decimal"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    EQUALS = "equals"
    CLEAR = "clear"
    CLEAR_ENTRY = "clear-entry"
    PERCENT = "percent"
    TOGGLE_SIGN = "toggle-sign"


OPERATOR_KEYS = {
    Key.ADD: Operator.ADD,
    Key.SUBTRACT: Operator.SUBTRACT,
    Key.MULTIPLY: Operator.MULTIPLY,
    Key.DIVIDE: Operator.DIVIDE,
}


class KeyPress(BaseModel):
    """A single button press. ``value`` carries the digit for ``Key.DIGIT``."""

    key: Key
    value: str | None = Field(default=None, pattern=r"^[0-9]$")


class CalculatorView(BaseModel):
    """What the page renders after every press."""

    display: str
    expression: str
    pending_operator: str | None = None
    awaiting_fresh_entry: bool = False


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

class PlanId(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    LIFETIME = "lifetime"


class PlanInfo(BaseModel):
    name: str
    price: str
    description: str


PLANS: dict[PlanId, PlanInfo] = {
    PlanId.MONTHLY: PlanInfo(
        name="Basic plan",
        price="₩9,900 / month",
        description="Core features plus saved calculation history",
    ),
    PlanId.YEARLY: PlanInfo(
        name="Pro plan",
        price="₩99,000 / year",
        description="Every feature plus two months free",
    ),
    PlanId.LIFETIME: PlanInfo(
        name="Premium plan",
        price="₩199,000 once",
        description="Every feature plus free updates for life",
    ),
}


def get_plan_info(plan: PlanId | str | None) -> PlanInfo:
    """Look up a plan, falling back to the monthly plan when unknown."""
    try:
        return PLANS[PlanId(plan)]
    except ValueError:
        return PLANS[PlanId.MONTHLY]


class PlanListing(BaseModel):
    id: PlanId
    info: PlanInfo


# ---------------------------------------------------------------------------
# Entitlement
# ---------------------------------------------------------------------------

class PaymentMethod(str, Enum):
    CARD = "card"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entitlement(BaseModel):
    """Persisted record of a completed purchase."""

    plan: PlanId
    payment_method: PaymentMethod = PaymentMethod.CARD
    payment_date: datetime = Field(default_factory=_utcnow)
    is_paid: bool = True
    plan_info: PlanInfo


# ---------------------------------------------------------------------------
# Purchase wizard
# ---------------------------------------------------------------------------

class WizardStep(str, Enum):
    CLOSED = "closed"
    PLAN_SELECTION = "plan_selection"
    PAYMENT_METHOD = "payment_method"
    SUCCESS = "success"


class PlanSelection(BaseModel):
    plan: PlanId


class WizardView(BaseModel):
    step: WizardStep
    selected_plan: PlanId | None = None
    selected_plan_info: PlanInfo | None = None
    payment_method: PaymentMethod = PaymentMethod.CARD
    processing: bool = False
    can_continue: bool = False
    can_pay: bool = False
