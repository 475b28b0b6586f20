"""
Data Models

Pydantic models for normalized export records and the aggregate parse result.
"""

from src.models.entities import (
    Contact,
    Message,
    MessageDirection,
    Invite,
    InviteDirection,
    InviteStatus,
    CompanyFollow,
    SavedJob,
    ParseSummary,
    ParsedPayload,
)

__all__ = [
    "Contact",
    "Message",
    "MessageDirection",
    "Invite",
    "InviteDirection",
    "InviteStatus",
    "CompanyFollow",
    "SavedJob",
    "ParseSummary",
    "ParsedPayload",
]
