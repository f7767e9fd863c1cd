"""
IngestWebhookEventCommand.

Command carrying a raw billing provider webhook delivery.
"""
from dataclasses import dataclass


@dataclass
class IngestWebhookEventCommand:
    """
    Raw webhook delivery.

    payload must be the byte-exact request body; re-serialized JSON
    does not verify.
    """

    payload: bytes
    signature_header: str
