# products/views/product.py

"""
PRODUCT VIEWSET

Purpose:
- Product master data CRUD (stock figures are read-only)
- Valuation at moving weighted-average cost
- Administrative opening balances
- Per-product movement history
"""

from django.db.models import F, ProtectedError, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from products.models import Product
from products.serializers import (
    InventoryMovementSerializer,
    OpeningBalanceSerializer,
    ProductAverageCostSerializer,
    ProductSerializer,
)
from products.services.stock import record_opening_balance


@extend_schema(tags=["products"])
class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - CRUD
    - GET  /api/products/products/<id>/average-cost/
    - POST /api/products/products/<id>/opening-balance/
    - GET  /api/products/products/<id>/movements/
    - GET  /api/products/products/low-stock/
    """

    serializer_class = ProductSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active", "code"]

    def get_queryset(self):
        qs = Product.objects.all().order_by("code")

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(name__icontains=q) | Q(code__icontains=q))

        return qs

    def update(self, request, *args, **kwargs):
        try:
            return super().update(request, *args, **kwargs)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

    def destroy(self, request, *args, **kwargs):
        try:
            return super().destroy(request, *args, **kwargs)
        except ProtectedError:
            return Response(
                {
                    "detail": "Product has stock movements or document lines; deactivate it instead.",
                    "code": "protected",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

    @extend_schema(responses=ProductAverageCostSerializer)
    @action(detail=True, methods=["get"], url_path="average-cost")
    def average_cost(self, request, pk=None):
        product = self.get_object()
        return Response(ProductAverageCostSerializer(product).data, status=status.HTTP_200_OK)

    @extend_schema(request=OpeningBalanceSerializer, responses=InventoryMovementSerializer)
    @action(detail=True, methods=["post"], url_path="opening-balance")
    def opening_balance(self, request, pk=None):
        product = self.get_object()
        serializer = OpeningBalanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            movement = record_opening_balance(product=product, **serializer.validated_data)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(InventoryMovementSerializer(movement).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses=InventoryMovementSerializer(many=True))
    @action(detail=True, methods=["get"])
    def movements(self, request, pk=None):
        product = self.get_object()
        qs = product.movements.select_related("product").order_by("created_at")

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(InventoryMovementSerializer(page, many=True).data)
        return Response(InventoryMovementSerializer(qs, many=True).data)

    @extend_schema(responses=ProductSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = self.get_queryset().filter(
            is_active=True, quantity_on_hand__lte=F("min_stock_level")
        )
        return Response(ProductSerializer(qs, many=True).data)
