"""ÉgliseConnect Finance URL configuration with namespaced routing."""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from apps.donations.urls import api_urlpatterns as donations_api
from apps.expenses.urls import api_urlpatterns as expenses_api
from apps.expenses.urls import legacy_api_urlpatterns as expenses_legacy_api
from apps.payments.urls import api_urlpatterns as payments_api


api_v1_patterns = [
    path('donations/', include((donations_api, 'donations'))),
    path('expenses/', include((expenses_api, 'expenses'))),
    path('payments/', include((payments_api, 'payments'))),
]


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include((api_v1_patterns, 'api'), namespace='v1')),
    path('api/expenses/', include((expenses_legacy_api, 'expenses'), namespace='expenses-legacy')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
    path('accounts/', include('allauth.urls')),
]
