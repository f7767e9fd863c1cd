"""
CreateCheckoutSessionCommand.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class CreateCheckoutSessionCommand:
    """Command to start a subscription checkout for a user."""

    user_id: str
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
