# accounting/api/document_urls.py

"""
Posting engine routes, mounted at /api/documents/.

<document_type> is one of: sales_invoice, purchase_invoice, sales_return,
purchase_return, inventory_adjustment.
"""

from django.urls import path

from accounting.api.views.documents import DocumentCancelView, DocumentPostView

urlpatterns = [
    path(
        "<str:document_type>/<uuid:document_id>/post/",
        DocumentPostView.as_view(),
        name="document-post",
    ),
    path(
        "<str:document_type>/<uuid:document_id>/cancel/",
        DocumentCancelView.as_view(),
        name="document-cancel",
    ),
]
