"""Shared fixtures for calculator tests."""
from __future__ import annotations

import pytest

from calculator import Calculator
from entry import EntryBuffer
from models import Entitlement, PlanId, get_plan_info
from purchase import PurchaseWizard
from session import CalculatorSession
from store import EntitlementStore
from tracker import OperationTracker


def press_all(calc: Calculator, keys: str) -> str:
    """Press a compact key string and return the display.

    ``0-9`` digits, ``.`` decimal, ``+ - * /`` operators, ``=`` equals,
    ``%`` percent, ``~`` toggle sign, ``C`` clear, ``<`` clear entry.
    Spaces are ignored.
    """
    for ch in keys:
        if ch.isdigit():
            calc.digit(ch)
        elif ch == ".":
            calc.decimal_point()
        elif ch in "+-*/":
            calc.operator({"+": "add", "-": "subtract", "*": "multiply", "/": "divide"}[ch])
        elif ch == "=":
            calc.equals()
        elif ch == "%":
            calc.percent()
        elif ch == "~":
            calc.toggle_sign()
        elif ch == "C":
            calc.clear_all()
        elif ch == "<":
            calc.clear_entry()
        elif ch == " ":
            continue
        else:
            raise ValueError(f"unknown key {ch!r}")
    return calc.display


@pytest.fixture
def calc() -> Calculator:
    return Calculator()


@pytest.fixture
def keys(calc):
    """``keys("10-2*3=")`` presses on the ``calc`` fixture, returns the display."""
    return lambda sequence: press_all(calc, sequence)


@pytest.fixture
def entry() -> EntryBuffer:
    return EntryBuffer()


@pytest.fixture
def tracker(entry) -> OperationTracker:
    return OperationTracker(entry)


@pytest.fixture
def store() -> EntitlementStore:
    return EntitlementStore()


@pytest.fixture
def file_store(tmp_path) -> EntitlementStore:
    return EntitlementStore(tmp_path / "entitlement.json")


@pytest.fixture
def wizard(store) -> PurchaseWizard:
    return PurchaseWizard(store, delay_seconds=0)


@pytest.fixture
def session(store, wizard) -> CalculatorSession:
    return CalculatorSession(calculator=Calculator(), store=store, wizard=wizard)


@pytest.fixture
def paid_entitlement() -> Entitlement:
    return Entitlement(plan=PlanId.YEARLY, plan_info=get_plan_info(PlanId.YEARLY))


@pytest.fixture
def entitled_session(session, paid_entitlement) -> CalculatorSession:
    session.store.save(paid_entitlement)
    return session
