"""
Expenses URLs - API routing.

URL Namespaces:
- API: api:v1:expenses:resource-name
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import views_api


api_router = DefaultRouter()

api_router.register(
    r'expenses',
    views_api.ExpenseViewSet,
    basename='expense'
)


api_urlpatterns = [
    path('', include(api_router.urls)),
]

# Mounted at /api/expenses/ for clients that still call the unversioned route.
legacy_api_urlpatterns = [
    path(
        'refresh-receipt-url',
        views_api.RefreshReceiptUrlView.as_view(),
        name='refresh_receipt_url',
    ),
]
