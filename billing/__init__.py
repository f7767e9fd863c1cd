"""
Billing module - Stripe integration and license reconciliation.

This module handles:
- Billing provider gateway (port and Stripe adapter)
- Webhook event ingestion
- Synchronous license reconciliation against the provider
- Checkout and billing-portal sessions
"""
