"""
Core module for shared domain infrastructure.

This module contains:
- Domain events, exceptions and value objects
- Event bus, cache and observability infrastructure
- Middleware, health views, Celery tasks and management commands
"""
