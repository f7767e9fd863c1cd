"""
ResolveLicenseQuery.

Query to find (or establish) the license of a caller.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class ResolveLicenseQuery:
    """At least one of user_id or license_key must be set."""

    user_id: Optional[str] = None
    license_key: Optional[str] = None
