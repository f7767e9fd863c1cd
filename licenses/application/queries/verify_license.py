"""
VerifyLicenseQuery.

Query to check a presented license key against a user's record.
"""
from dataclasses import dataclass


@dataclass
class VerifyLicenseQuery:
    """Query to verify a license key."""

    user_id: str
    license_key: str
