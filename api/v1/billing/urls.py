"""
URL configuration for billing API endpoints.
"""

from django.urls import path

from api.v1.billing import views

app_name = "billing"

urlpatterns = [
    path("webhook", views.WebhookView.as_view(), name="webhook"),
    path("auto-create-license", views.AutoCreateLicenseView.as_view(), name="auto-create-license"),
    path("checkout-session", views.CheckoutSessionView.as_view(), name="checkout-session"),
    path("portal-session", views.PortalSessionView.as_view(), name="portal-session"),
    path("config", views.BillingConfigView.as_view(), name="config"),
]
