# Overview: Flask API routes for income transactions, expense vouchers and budgets.

"""
Finance Routes

SECURITY: All routes require authentication and parish scope.
- Income and expense reads: any role, within the resolved parish
- Income and expense writes, and all budget routes: finance capability
  (SUPER_ADMIN, PARISH_ADMIN, ACCOUNTANT); the role gate runs before any
  parish is resolved
"""

from flask import Blueprint, request

from ..decorators import require_auth, require_finance
from ..services.entity_kinds import BUDGETS, EXPENSES, INCOME
from ..validation import ValidationError
from .common import create_response, delete_response, get_response, list_response, update_response


finance_bp = Blueprint("finance", __name__)


def _int_arg(name: str):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


# -- Income --

@finance_bp.get("/transactions/income")
@require_auth
def list_income_route():
    return list_response(
        INCOME,
        category=request.args.get("category"),
        member_id=request.args.get("member_id"),
    )


@finance_bp.post("/transactions/income")
@require_auth
@require_finance
def create_income_route():
    return create_response(INCOME)


@finance_bp.get("/transactions/income/<record_id>")
@require_auth
def get_income_route(record_id):
    return get_response(INCOME, record_id)


@finance_bp.put("/transactions/income/<record_id>")
@require_auth
@require_finance
def update_income_route(record_id):
    return update_response(INCOME, record_id)


@finance_bp.delete("/transactions/income/<record_id>")
@require_auth
@require_finance
def delete_income_route(record_id):
    return delete_response(INCOME, record_id)


# -- Expenses --

@finance_bp.get("/transactions/expense")
@require_auth
def list_expense_route():
    return list_response(
        EXPENSES,
        category=request.args.get("category"),
        approval_status=request.args.get("approval_status"),
    )


@finance_bp.post("/transactions/expense")
@require_auth
@require_finance
def create_expense_route():
    return create_response(EXPENSES)


@finance_bp.get("/transactions/expense/<record_id>")
@require_auth
def get_expense_route(record_id):
    return get_response(EXPENSES, record_id)


@finance_bp.put("/transactions/expense/<record_id>")
@require_auth
@require_finance
def update_expense_route(record_id):
    return update_response(EXPENSES, record_id)


@finance_bp.delete("/transactions/expense/<record_id>")
@require_auth
@require_finance
def delete_expense_route(record_id):
    return delete_response(EXPENSES, record_id)


# -- Budgets --

@finance_bp.get("/budgets")
@require_auth
@require_finance
def list_budgets_route():
    return list_response(BUDGETS, fiscal_year=_int_arg("fiscal_year"))


@finance_bp.post("/budgets")
@require_auth
@require_finance
def create_budget_route():
    return create_response(BUDGETS)


@finance_bp.put("/budgets/<budget_id>")
@require_auth
@require_finance
def update_budget_route(budget_id):
    return update_response(BUDGETS, budget_id)


@finance_bp.delete("/budgets/<budget_id>")
@require_auth
@require_finance
def delete_budget_route(budget_id):
    return delete_response(BUDGETS, budget_id)
