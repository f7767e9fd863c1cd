"""
Licenses module - the Pro license record and its lifecycle.

This module handles:
- License entity and key generation
- License lifecycle (create, status transitions, entitlement)
- License store (port and Django ORM adapter)
- License verification with a cached snapshot
"""
