"""
Model registry for the licenses app.

Models live in licenses.infrastructure; Django discovers them here.
"""
from licenses.infrastructure.models import License  # noqa: F401
