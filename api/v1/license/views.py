"""
License API views.

Used by the browser extension to fetch and verify its Pro license.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.license.serializers import (
    LicenseLookupQuerySerializer,
    LicenseResolutionResponseSerializer,
    LicenseVerificationResponseSerializer,
    VerifyLicenseQuerySerializer,
)
from billing.application.handlers.resolve_license_handler import ResolveLicenseHandler
from billing.application.queries.resolve_license import ResolveLicenseQuery
from billing.application.services.reconciliation_resolver import ReconciliationResolver
from billing.infrastructure.stripe_gateway import StripeBillingGateway
from core.domain.exceptions import LicenseNotFoundError
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.handlers.verify_license_handler import VerifyLicenseHandler
from licenses.application.queries.verify_license import VerifyLicenseQuery
from licenses.domain.services import LicenseLifecycleManager
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize adapters (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_billing_gateway = StripeBillingGateway(
    api_key=settings.STRIPE_SECRET_KEY, timeout=settings.STRIPE_TIMEOUT_SECONDS
)

tracer = get_tracer(__name__)

USER_ID_PARAM = OpenApiParameter(
    name="userId", type=str, location=OpenApiParameter.QUERY, description="Extension install id"
)
LICENSE_KEY_PARAM = OpenApiParameter(
    name="licenseKey", type=str, location=OpenApiParameter.QUERY, description="Issued license key"
)


def build_resolver() -> ReconciliationResolver:
    """Wire the reconciliation resolver from the module adapters."""
    return ReconciliationResolver(
        license_repository=_license_repo,
        billing_gateway=_billing_gateway,
        lifecycle_manager=LicenseLifecycleManager(
            _license_repo, event_bus=event_bus, key_prefix=settings.LICENSE_KEY_PREFIX
        ),
        scan_page_size=settings.BILLING_SCAN_PAGE_SIZE,
    )


class LicenseView(APIView):
    """View for fetching the caller's license."""

    @extend_schema(
        operation_id="get_license",
        summary="Get License",
        description=(
            "Return the caller's license. If the local record is missing, the "
            "billing provider is searched (checkout sessions, then subscriptions) "
            "and the license is created on the spot."
        ),
        tags=["License API"],
        parameters=[USER_ID_PARAM, LICENSE_KEY_PARAM],
        responses={
            200: LicenseResolutionResponseSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "No active license found"},
            502: {"description": "Billing provider unavailable"},
        },
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_get_license)(request)

    async def _handle_get_license(self, request: Request) -> Response:
        with tracer.start_as_current_span("get_license") as span:
            serializer = LicenseLookupQuerySerializer(data=request.query_params)
            serializer.is_valid(raise_exception=True)
            data = serializer.validated_data

            if data.get("userId"):
                span.set_attribute("user_id", data["userId"])

            handler = ResolveLicenseHandler(build_resolver())
            resolution = await handler.handle(
                ResolveLicenseQuery(user_id=data.get("userId"), license_key=data.get("licenseKey"))
            )
            if not resolution.found:
                span.set_attribute("resolution.strategy", "absent")
                raise LicenseNotFoundError()

            span.set_attribute("resolution.strategy", resolution.strategy)
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseResolutionResponseSerializer(resolution).data)


class VerifyLicenseView(APIView):
    """View for verifying a license key."""

    @extend_schema(
        operation_id="verify_license",
        summary="Verify License",
        description=(
            "Check a license key against the caller's record. Answers from the "
            "local store only; never calls the billing provider."
        ),
        tags=["License API"],
        parameters=[USER_ID_PARAM, LICENSE_KEY_PARAM],
        responses={
            200: LicenseVerificationResponseSerializer,
            400: {"description": "Bad Request"},
        },
    )
    def get(self, request: Request) -> Response:
        return async_to_sync(self._handle_verify_license)(request)

    async def _handle_verify_license(self, request: Request) -> Response:
        with tracer.start_as_current_span("verify_license") as span:
            serializer = VerifyLicenseQuerySerializer(data=request.query_params)
            serializer.is_valid(raise_exception=True)

            handler = VerifyLicenseHandler(license_repository=_license_repo)
            result = await handler.handle(
                VerifyLicenseQuery(
                    user_id=serializer.validated_data["userId"],
                    license_key=serializer.validated_data["licenseKey"],
                )
            )

            span.set_attribute("license.valid", result.valid)
            span.set_status(Status(StatusCode.OK))
            return Response(LicenseVerificationResponseSerializer(result).data)
