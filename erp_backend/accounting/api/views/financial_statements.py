"""
PATH: accounting/api/views/financial_statements.py

FINANCIAL STATEMENT API VIEWS (READ-ONLY)

GET /api/accounting/profit-and-loss/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
GET /api/accounting/balance-sheet/?as_of=YYYY-MM-DD
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import ENGINE_ERRORS, error_response
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.profit_and_loss_service import get_profit_and_loss


class InvalidDateParam(ValueError):
    pass


def _date_param(request, name):
    raw = request.query_params.get(name)
    if not raw:
        return None
    value = parse_date(raw)
    if value is None:
        raise InvalidDateParam(f"Invalid {name}. Use YYYY-MM-DD.")
    return value


def _invalid_date(exc):
    return Response({"detail": str(exc), "code": "invalid_date"}, status=status.HTTP_400_BAD_REQUEST)


def _date_query(name, description):
    return OpenApiParameter(
        name=name,
        type=str,
        location=OpenApiParameter.QUERY,
        required=False,
        description=description,
    )


@extend_schema(
    tags=["accounting"],
    parameters=[
        _date_query("date_from", "First day of the period (YYYY-MM-DD). Defaults to the start of the ledger."),
        _date_query("date_to", "Last day of the period (YYYY-MM-DD). Defaults to today."),
    ],
    responses={200: dict},
)
class ProfitAndLossView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            date_from = _date_param(request, "date_from")
            date_to = _date_param(request, "date_to")
        except InvalidDateParam as exc:
            return _invalid_date(exc)

        return Response(
            get_profit_and_loss(date_from=date_from, date_to=date_to),
            status=status.HTTP_200_OK,
        )


@extend_schema(
    tags=["accounting"],
    parameters=[_date_query("as_of", "Snapshot date (YYYY-MM-DD). Defaults to today.")],
    responses={200: dict},
)
class BalanceSheetView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        try:
            as_of = _date_param(request, "as_of")
        except InvalidDateParam as exc:
            return _invalid_date(exc)

        try:
            report = generate_balance_sheet(as_of=as_of)
        except ENGINE_ERRORS as exc:
            return error_response(exc)
        return Response(report, status=status.HTTP_200_OK)
