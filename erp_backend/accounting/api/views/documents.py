# accounting/api/views/documents.py

"""
======================================================
PATH: accounting/api/views/documents.py
======================================================
DOCUMENT API

- Post / cancel any document type through the posting engine:
    POST /api/documents/<type>/<uuid>/post/
    POST /api/documents/<type>/<uuid>/cancel/
  Optional body: {"expected_version": <int>, "cancel_date": "YYYY-MM-DD"}

- DraftDocumentViewSet: shared CRUD for draft documents (sales, purchases,
  adjustments). Engine and model validation errors come back as
  {"detail", "code"} payloads instead of 500s.
======================================================
"""

from django.db import transaction
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import ENGINE_ERRORS, error_response
from accounting.api.serializers.documents import DocumentTransitionSerializer
from accounting.services.concurrency import lock_row
from accounting.services.document_lifecycle import cancel_document, post_document


class DocumentPostView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentTransitionSerializer

    @extend_schema(tags=["documents"], responses={200: dict})
    def post(self, request, document_type, document_id):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = post_document(
                document_type,
                document_id,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


class DocumentCancelView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = DocumentTransitionSerializer

    @extend_schema(tags=["documents"], responses={200: dict})
    def post(self, request, document_type, document_id):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = cancel_document(
                document_type,
                document_id,
                expected_version=serializer.validated_data.get("expected_version"),
                cancel_date=serializer.validated_data.get("cancel_date"),
            )
        except ENGINE_ERRORS as exc:
            return error_response(exc)

        return Response(result, status=status.HTTP_200_OK)


class DraftDocumentViewSet(viewsets.ModelViewSet):
    """
    Base viewset for document CRUD. Subclasses set queryset + serializer_class.
    Only drafts can be updated or deleted; posting goes through DocumentPostView.
    """

    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]
    filterset_fields = ["status"]

    def create(self, request, *args, **kwargs):
        try:
            with transaction.atomic():
                return super().create(request, *args, **kwargs)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

    def update(self, request, *args, **kwargs):
        try:
            with transaction.atomic():
                return super().update(request, *args, **kwargs)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

    def destroy(self, request, *args, **kwargs):
        try:
            with transaction.atomic():
                return super().destroy(request, *args, **kwargs)
        except ENGINE_ERRORS as exc:
            return error_response(exc)

    def perform_destroy(self, instance):
        lock_row(type(instance), instance.pk).delete()
