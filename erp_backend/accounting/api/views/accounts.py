# accounting/api/views/accounts.py

"""
PATH: accounting/api/views/accounts.py

CHART OF ACCOUNTS API (READ-ONLY)

GET /api/accounting/accounts/?account_type=ASSET&postable=1
GET /api/accounting/accounts/<code>/statement/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
"""

from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from accounting.api.serializers.accounts import AccountListSerializer
from accounting.models.account import Account
from accounting.services.balance_service import account_balance, account_statement


class AccountListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountListSerializer
    pagination_class = None

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="account_type", type=str, required=False),
            OpenApiParameter(
                name="postable",
                type=bool,
                required=False,
                description="Only active leaf accounts that can carry journal lines.",
            ),
        ],
        responses=AccountListSerializer(many=True),
    )
    def get(self, request, *args, **kwargs):
        qs = Account.objects.select_related("parent").order_by("code")

        account_type = (request.query_params.get("account_type") or "").strip().upper()
        if account_type:
            qs = qs.filter(account_type=account_type)

        if request.query_params.get("postable") in ("1", "true", "True"):
            qs = qs.filter(is_active=True, is_parent=False)

        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)


class AccountStatementView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="date_from", type=str, required=False, description="YYYY-MM-DD"),
            OpenApiParameter(name="date_to", type=str, required=False, description="YYYY-MM-DD"),
        ],
        responses={200: dict},
    )
    def get(self, request, code, *args, **kwargs):
        bounds = {}
        for name in ("date_from", "date_to"):
            raw = request.query_params.get(name)
            if not raw:
                continue
            parsed = parse_date(raw)
            if parsed is None:
                return Response(
                    {"detail": f"Invalid {name}. Use YYYY-MM-DD.", "code": "invalid_date"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            bounds[name] = parsed

        try:
            statement = account_statement(code, **bounds)
            statement["balance"] = str(account_balance(code, as_of=bounds.get("date_to")))
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(statement, status=status.HTTP_200_OK)
