"""
CreatePortalSessionCommand.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class CreatePortalSessionCommand:
    """Command to open the billing portal for a user's subscription."""

    user_id: str
    return_url: Optional[str] = None
