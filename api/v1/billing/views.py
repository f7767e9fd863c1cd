"""
Billing API views.

Stripe webhooks, checkout and portal sessions, and the synchronous
license fallback used right after checkout.
"""

import logging
from dataclasses import asdict

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import error_response
from api.v1.billing.serializers import (
    AutoCreateLicenseRequestSerializer,
    AutoCreateLicenseResponseSerializer,
    BillingConfigResponseSerializer,
    CheckoutSessionRequestSerializer,
    CheckoutSessionResponseSerializer,
    PortalSessionRequestSerializer,
    PortalSessionResponseSerializer,
    WebhookResponseSerializer,
)
from billing.application.commands.auto_reconcile import AutoReconcileCommand
from billing.application.commands.create_checkout_session import CreateCheckoutSessionCommand
from billing.application.commands.create_portal_session import CreatePortalSessionCommand
from billing.application.commands.ingest_webhook_event import IngestWebhookEventCommand
from billing.application.handlers.auto_reconcile_handler import AutoReconcileHandler
from billing.application.handlers.checkout_session_handlers import (
    CreateCheckoutSessionHandler,
    CreatePortalSessionHandler,
)
from billing.application.handlers.webhook_ingestion_handler import WebhookIngestionHandler
from billing.application.services.reconciliation_resolver import ReconciliationResolver
from billing.infrastructure.stripe_gateway import StripeBillingGateway
from core.domain.exceptions import BillingConfigurationError
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.domain.services import LicenseLifecycleManager
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

logger = logging.getLogger(__name__)

# Initialize adapters (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_billing_gateway = StripeBillingGateway(
    api_key=settings.STRIPE_SECRET_KEY, timeout=settings.STRIPE_TIMEOUT_SECONDS
)

tracer = get_tracer(__name__)

PUBLISHABLE_KEY_PREFIXES = ("pk_test_", "pk_live_")


def _lifecycle_manager() -> LicenseLifecycleManager:
    return LicenseLifecycleManager(
        _license_repo, event_bus=event_bus, key_prefix=settings.LICENSE_KEY_PREFIX
    )


def _resolver() -> ReconciliationResolver:
    return ReconciliationResolver(
        license_repository=_license_repo,
        billing_gateway=_billing_gateway,
        lifecycle_manager=_lifecycle_manager(),
        scan_page_size=settings.BILLING_SCAN_PAGE_SIZE,
    )


class WebhookView(APIView):
    """Stripe webhook endpoint."""

    @extend_schema(
        operation_id="stripe_webhook",
        summary="Stripe Webhook",
        description=(
            "Receive Stripe events. The raw body is verified against the "
            "Stripe-Signature header. A 5xx answer makes Stripe re-deliver."
        ),
        tags=["Billing API"],
        parameters=[
            OpenApiParameter(
                name="Stripe-Signature",
                type=str,
                location=OpenApiParameter.HEADER,
                required=True,
                description="Stripe webhook signature",
            ),
        ],
        request=None,
        responses={
            200: WebhookResponseSerializer,
            400: {"description": "Invalid signature or payload"},
            502: {"description": "Billing provider unavailable; retry"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_webhook)(request)

    async def _handle_webhook(self, request: Request) -> Response:
        with tracer.start_as_current_span("stripe_webhook") as span:
            handler = WebhookIngestionHandler(
                billing_gateway=_billing_gateway,
                license_repository=_license_repo,
                lifecycle_manager=_lifecycle_manager(),
                webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            )
            result = await handler.handle(
                IngestWebhookEventCommand(
                    payload=request.body,
                    signature_header=request.META.get("HTTP_STRIPE_SIGNATURE", ""),
                )
            )

            span.set_attribute("webhook.event_type", result.event_type)
            span.set_attribute("webhook.outcome", result.outcome)
            span.set_status(Status(StatusCode.OK))
            return Response(
                WebhookResponseSerializer({"received": True, **asdict(result)}).data
            )


class AutoCreateLicenseView(APIView):
    """Fallback license creation from a checkout session."""

    @extend_schema(
        operation_id="auto_create_license",
        summary="Auto-create License",
        description=(
            "Create the license straight from a completed checkout session, "
            "for clients returning from checkout before the webhook arrives."
        ),
        tags=["Billing API"],
        request=AutoCreateLicenseRequestSerializer,
        responses={
            200: AutoCreateLicenseResponseSerializer,
            400: {"description": "Bad Request or session not eligible"},
            502: {"description": "Billing provider unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_auto_create)(request)

    async def _handle_auto_create(self, request: Request) -> Response:
        with tracer.start_as_current_span("auto_create_license") as span:
            serializer = AutoCreateLicenseRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            user_id = serializer.validated_data["userId"]
            span.set_attribute("user_id", user_id)

            handler = AutoReconcileHandler(
                billing_gateway=_billing_gateway,
                license_repository=_license_repo,
                lifecycle_manager=_lifecycle_manager(),
            )
            result = await handler.handle(
                AutoReconcileCommand(
                    session_id=serializer.validated_data["sessionId"], user_id=user_id
                )
            )

            if not result.eligible:
                span.set_status(Status(StatusCode.ERROR, result.reason))
                return error_response("NOT_ELIGIBLE", result.reason, status.HTTP_400_BAD_REQUEST)

            span.set_status(Status(StatusCode.OK))
            message = (
                "License already exists" if result.already_existed else "License created successfully"
            )
            return Response(
                AutoCreateLicenseResponseSerializer(
                    {
                        "success": True,
                        "licenseKey": result.license.license_key,
                        "message": message,
                    }
                ).data
            )


class CheckoutSessionView(APIView):
    """Start a Pro subscription checkout."""

    @extend_schema(
        operation_id="create_checkout_session",
        summary="Create Checkout Session",
        tags=["Billing API"],
        request=CheckoutSessionRequestSerializer,
        responses={
            200: CheckoutSessionResponseSerializer,
            400: {"description": "Bad Request"},
            502: {"description": "Billing provider unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_checkout)(request)

    async def _handle_checkout(self, request: Request) -> Response:
        with tracer.start_as_current_span("create_checkout_session") as span:
            serializer = CheckoutSessionRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            span.set_attribute("user_id", serializer.validated_data["userId"])

            handler = CreateCheckoutSessionHandler(
                billing_gateway=_billing_gateway,
                backend_url=settings.BACKEND_URL,
                price_id=settings.STRIPE_PRICE_ID,
            )
            session = await handler.handle(
                CreateCheckoutSessionCommand(
                    user_id=serializer.validated_data["userId"],
                    cancel_url=serializer.validated_data.get("returnUrl"),
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(CheckoutSessionResponseSerializer(session).data)


class PortalSessionView(APIView):
    """Open the Stripe billing portal for the caller's subscription."""

    @extend_schema(
        operation_id="create_portal_session",
        summary="Create Portal Session",
        tags=["Billing API"],
        request=PortalSessionRequestSerializer,
        responses={
            200: PortalSessionResponseSerializer,
            404: {"description": "No subscription found"},
            502: {"description": "Billing provider unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        return async_to_sync(self._handle_portal)(request)

    async def _handle_portal(self, request: Request) -> Response:
        with tracer.start_as_current_span("create_portal_session") as span:
            serializer = PortalSessionRequestSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            span.set_attribute("user_id", serializer.validated_data["userId"])

            handler = CreatePortalSessionHandler(
                billing_gateway=_billing_gateway,
                resolver=_resolver(),
                backend_url=settings.BACKEND_URL,
            )
            url = await handler.handle(
                CreatePortalSessionCommand(
                    user_id=serializer.validated_data["userId"],
                    return_url=serializer.validated_data.get("returnUrl"),
                )
            )

            span.set_status(Status(StatusCode.OK))
            return Response(PortalSessionResponseSerializer({"url": url}).data)


class BillingConfigView(APIView):
    """Public billing configuration for the client."""

    @extend_schema(
        operation_id="billing_config",
        summary="Billing Config",
        description="Return the Stripe publishable key. Secret-looking keys are refused.",
        tags=["Billing API"],
        responses={
            200: BillingConfigResponseSerializer,
            500: {"description": "Publishable key missing or invalid"},
        },
    )
    def get(self, request: Request) -> Response:
        publishable_key = settings.STRIPE_PUBLISHABLE_KEY
        if not publishable_key:
            raise BillingConfigurationError("Stripe publishable key not configured")
        if not publishable_key.startswith(PUBLISHABLE_KEY_PREFIXES):
            logger.error("STRIPE_PUBLISHABLE_KEY does not look like a publishable key")
            raise BillingConfigurationError(
                "Invalid publishable key format. Must start with pk_test_ or pk_live_"
            )
        return Response(
            BillingConfigResponseSerializer({"stripePublishableKey": publishable_key}).data
        )
