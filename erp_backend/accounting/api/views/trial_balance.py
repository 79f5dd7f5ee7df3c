"""
PATH: accounting/api/views/trial_balance.py

TRIAL BALANCE API VIEW (READ-ONLY)

GET /api/accounting/trial-balance/?as_of=YYYY-MM-DD
"""

from __future__ import annotations

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.services.trial_balance_service import TrialBalanceService


@extend_schema(
    tags=["accounting"],
    parameters=[
        OpenApiParameter(
            name="as_of",
            type=str,
            location=OpenApiParameter.QUERY,
            required=False,
            description="Snapshot date (YYYY-MM-DD). Defaults to today.",
        ),
    ],
    responses={200: dict},
)
class TrialBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        as_of = None
        raw = request.query_params.get("as_of")
        if raw:
            as_of = parse_date(raw)
            if as_of is None:
                return Response(
                    {"detail": "Invalid as_of. Use YYYY-MM-DD.", "code": "invalid_date"},
                    status=status.HTTP_400_BAD_REQUEST,
                )

        return Response(TrialBalanceService().generate(as_of=as_of), status=status.HTTP_200_OK)
