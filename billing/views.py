"""
Checkout landing pages.

Stripe cannot redirect to extension pages, so checkout returns here and
the page tells the user to go back to the extension.
"""
from django.views.generic import TemplateView


class CheckoutSuccessView(TemplateView):
    template_name = "billing/success.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["session_id"] = self.request.GET.get("session_id", "")
        return context


class CheckoutCancelView(TemplateView):
    template_name = "billing/cancel.html"
