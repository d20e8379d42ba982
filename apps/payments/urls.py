"""URL configuration for payments app."""
from django.urls import path

from . import views_api

api_urlpatterns = [
    path('intents/', views_api.CreatePaymentIntentView.as_view(), name='create_payment_intent'),
    path('webhook/', views_api.StripeWebhookView.as_view(), name='stripe_webhook'),
]
