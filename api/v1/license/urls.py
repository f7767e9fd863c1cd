"""
URL configuration for license API endpoints.
"""

from django.urls import path

from api.v1.license import views

app_name = "license"

urlpatterns = [
    path("license", views.LicenseView.as_view(), name="get-license"),
    path("verify", views.VerifyLicenseView.as_view(), name="verify-license"),
]
