"""
Core Data Models

Pydantic models for the normalized records produced from a LinkedIn export.
Records are immutable once built; instants are canonical UTC strings or "".
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageDirection(str, Enum):
    """Who authored a message."""
    SELF = "self"
    COUNTERPART = "counterpart"


class InviteDirection(str, Enum):
    """Whether an invitation was sent or received."""
    SENT = "sent"
    RECEIVED = "received"


class InviteStatus(str, Enum):
    """Invitation outcome. Only UNKNOWN is ever produced from an export."""
    ACCEPTED = "accepted"
    PENDING = "pending"
    IGNORED = "ignored"
    UNKNOWN = "unknown"


class ExportRecord(BaseModel):
    """Base for all normalized records."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(description="Stable hash of the record's identity fields")


class Contact(ExportRecord):
    """A first-degree connection. ID: url, else name|company|connectedAt."""
    name: str
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    connected_at: str = ""
    url: Optional[str] = None


class Message(ExportRecord):
    """A single message. ID: threadKey|sentAt|body[:40]."""
    thread_key: str
    direction: MessageDirection
    counterpart_id: str = Field(
        default="",
        description="Sender URL when received, first recipient URL when sent",
    )
    body: str
    sent_at: str = ""

    @property
    def is_self(self) -> bool:
        return self.direction == MessageDirection.SELF


class Invite(ExportRecord):
    """A connection invitation. ID: direction|counterpartName|sentAt."""
    direction: InviteDirection
    counterpart_name: str
    counterpart_title: Optional[str] = None
    counterpart_company: Optional[str] = None
    status: InviteStatus = InviteStatus.UNKNOWN
    message: Optional[str] = None
    sent_at: str = ""


class CompanyFollow(ExportRecord):
    """A followed company. ID: company|followedAt."""
    company: str
    followed_at: str = ""


class SavedJob(ExportRecord):
    """A saved job or job application. ID: company|title|savedAt."""
    company: str
    title: str
    saved_at: str = ""


class ParseSummary(BaseModel):
    """Diagnostics for one parse invocation."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    files_processed: list[str] = Field(default_factory=list)
    rows: dict[str, int] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class ParsedPayload(BaseModel):
    """Aggregate result of one parse invocation.

    Built once, then superseded wholesale by the next invocation.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    contacts: list[Contact] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    invites: list[Invite] = Field(default_factory=list)
    company_follows: list[CompanyFollow] = Field(default_factory=list)
    saved_jobs: list[SavedJob] = Field(default_factory=list)
    summary: ParseSummary = Field(default_factory=ParseSummary)

    def record_counts(self) -> dict[str, int]:
        """Number of records per collection."""
        return {
            "contacts": len(self.contacts),
            "messages": len(self.messages),
            "invites": len(self.invites),
            "company_follows": len(self.company_follows),
            "saved_jobs": len(self.saved_jobs),
        }

    @property
    def is_empty(self) -> bool:
        return not any(self.record_counts().values())

    def to_dict(self) -> dict[str, Any]:
        """Plain camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)
