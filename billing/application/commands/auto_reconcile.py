"""
AutoReconcileCommand.

Command to create a license from a completed checkout session when the
webhook has not arrived yet.
"""
from dataclasses import dataclass


@dataclass
class AutoReconcileCommand:
    """Checkout session id returned to the client, and the client identity."""

    session_id: str
    user_id: str
