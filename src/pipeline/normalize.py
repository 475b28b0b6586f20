"""
Record Normalization

Turns resolved export tables into typed, identity-hashed records.

Each normalizer takes a ResolvedTable and returns (records, warnings).
Row admission per kind:
    Contact        strict: dropped (with a warning) without first or last name
    Message        dropped silently without body text
    Invite         dropped silently without both from and to
    CompanyFollow  dropped silently without an organization
    SavedJob       lenient: kept if company or title is present, the other
                   defaults to "Unknown"
"""

import logging

from src.models.entities import (
    CompanyFollow,
    Contact,
    Invite,
    InviteDirection,
    InviteStatus,
    Message,
    MessageDirection,
    SavedJob,
)
from src.pipeline.headers import ResolvedTable
from src.pipeline.ingest import normalize_text
from src.utils.ids import stable_id
from src.utils.timestamps import day_bucket, normalize_timestamp, timestamp_warning

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
SELF_TOKEN = "you"
BODY_ID_PREFIX = 40


def _parse_date(label: str, raw: str, warnings: list[str]) -> str:
    """Normalize a date, recording a warning when non-empty input fails."""
    parsed = normalize_timestamp(raw)
    warning = timestamp_warning(label, raw, parsed)
    if warning:
        warnings.append(warning)
    return parsed


def _split_urls(raw: str) -> list[str]:
    """Split a comma-separated URL cell, dropping empties."""
    return [url for url in (normalize_text(part) for part in raw.split(",")) if url]


def _processed(table: ResolvedTable, count: int, noun: str) -> str:
    return f"{table.label}: {count} {noun} processed from {table.source}"


def normalize_contacts(table: ResolvedTable) -> tuple[list[Contact], list[str]]:
    """Normalize a Connections table.

    ID: profile URL when present, else name|company|connectedAt, so the
    same profile deduplicates regardless of company, title or date.
    """
    contacts: list[Contact] = []
    warnings: list[str] = []

    for row_number, row in table.numbered_rows():
        first_name = table.value(row, "first_name")
        last_name = table.value(row, "last_name")

        if not first_name and not last_name:
            warnings.append(
                f"{table.label}: Dropped row {row_number} without a name in {table.source}"
            )
            continue

        name = f"{first_name} {last_name}".strip()
        url = table.value(row, "url")
        company = table.value(row, "company")
        connected_at = _parse_date(table.label, table.value(row, "connected_on"), warnings)

        contact_id = stable_id(url) if url else stable_id(name, company, connected_at)

        contacts.append(Contact(
            id=contact_id,
            name=name,
            title=table.value(row, "position") or None,
            company=company or None,
            location=table.value(row, "location") or None,
            connected_at=connected_at,
            url=url or None,
        ))

    warnings.append(_processed(table, len(contacts), "contacts"))
    logger.info(f"Normalized {len(contacts)} contacts from {table.source}")

    return contacts, warnings


def message_direction(sender: str) -> MessageDirection:
    """Self-authored when the sender contains "you", case-insensitively."""
    if SELF_TOKEN in sender.lower():
        return MessageDirection.SELF
    return MessageDirection.COUNTERPART


def thread_key(
    conversation_id: str,
    recipient_urls: list[str],
    participant: str,
    sent_at: str,
) -> str:
    """Explicit conversation ID, else a hash of recipients, else participant|day.

    Multiple recipients are sorted so the key does not depend on their order.
    """
    if conversation_id:
        return conversation_id
    if len(recipient_urls) == 1:
        return stable_id(recipient_urls[0])
    if recipient_urls:
        return stable_id(*sorted(recipient_urls))
    return stable_id(participant, day_bucket(sent_at))


def normalize_messages(table: ResolvedTable) -> tuple[list[Message], list[str]]:
    """Normalize a messages table.

    ID: threadKey|sentAt|first 40 body characters. Two long messages in one
    thread at the same instant sharing those 40 characters collide.
    """
    messages: list[Message] = []
    warnings: list[str] = []

    for row in table.rows:
        body = table.value(row, "content")
        if not body:
            continue

        sender = table.value(row, "from")
        recipient = table.value(row, "to")
        recipients = _split_urls(table.value(row, "recipient_urls"))
        sent_at = _parse_date(table.label, table.value(row, "date"), warnings)

        direction = message_direction(sender)
        key = thread_key(
            table.value(row, "conversation_id"),
            recipients,
            recipient or sender,
            sent_at,
        )

        if direction == MessageDirection.COUNTERPART:
            counterpart_id = table.value(row, "sender_url")
        else:
            counterpart_id = recipients[0] if recipients else ""

        messages.append(Message(
            id=stable_id(key, sent_at, body[:BODY_ID_PREFIX]),
            thread_key=key,
            direction=direction,
            counterpart_id=counterpart_id,
            body=body,
            sent_at=sent_at,
        ))

    warnings.append(_processed(table, len(messages), "messages"))
    logger.info(f"Normalized {len(messages)} messages from {table.source}")

    return messages, warnings


def invite_direction(direction: str, sender: str) -> InviteDirection:
    """Explicit OUTGOING/INCOMING column first, else infer from the sender."""
    direction = direction.lower()
    if "outgoing" in direction:
        return InviteDirection.SENT
    if "incoming" in direction:
        return InviteDirection.RECEIVED
    if SELF_TOKEN in sender.lower():
        return InviteDirection.SENT
    return InviteDirection.RECEIVED


def normalize_invites(table: ResolvedTable) -> tuple[list[Invite], list[str]]:
    """Normalize an Invitations table.

    ID: direction|counterpartName|sentAt. Status is never inferred.
    """
    invites: list[Invite] = []
    warnings: list[str] = []

    for row in table.rows:
        sender = table.value(row, "from")
        recipient = table.value(row, "to")
        if not sender and not recipient:
            continue

        sent_at = _parse_date(table.label, table.value(row, "sent_at"), warnings)
        direction = invite_direction(table.value(row, "direction"), sender)
        counterpart = recipient if direction == InviteDirection.SENT else sender

        invites.append(Invite(
            id=stable_id(direction.value, counterpart, sent_at),
            direction=direction,
            counterpart_name=counterpart,
            counterpart_title=table.value(row, "title") or None,
            counterpart_company=table.value(row, "company") or None,
            status=InviteStatus.UNKNOWN,
            message=table.value(row, "message") or None,
            sent_at=sent_at,
        ))

    warnings.append(_processed(table, len(invites), "invitations"))
    logger.info(f"Normalized {len(invites)} invitations from {table.source}")

    return invites, warnings


def normalize_company_follows(table: ResolvedTable) -> tuple[list[CompanyFollow], list[str]]:
    """Normalize a Company Follows table. ID: company|followedAt."""
    follows: list[CompanyFollow] = []
    warnings: list[str] = []

    for row in table.rows:
        organization = table.value(row, "organization")
        if not organization:
            continue

        followed_at = _parse_date(table.label, table.value(row, "followed_on"), warnings)

        follows.append(CompanyFollow(
            id=stable_id(organization, followed_at),
            company=organization,
            followed_at=followed_at,
        ))

    warnings.append(_processed(table, len(follows), "follows"))
    logger.info(f"Normalized {len(follows)} company follows from {table.source}")

    return follows, warnings


def normalize_saved_jobs(table: ResolvedTable) -> tuple[list[SavedJob], list[str]]:
    """Normalize a Saved Jobs or Job Applications table.

    ID: company|title|savedAt over the source values, before "Unknown"
    defaults are applied. The saved/applied origin is not kept.
    """
    jobs: list[SavedJob] = []
    warnings: list[str] = []

    for row in table.rows:
        title = table.value(row, "title")
        company = table.value(row, "company")
        if not title and not company:
            continue

        saved_at = _parse_date(table.label, table.value(row, "date"), warnings)

        jobs.append(SavedJob(
            id=stable_id(company, title, saved_at),
            company=company or UNKNOWN,
            title=title or UNKNOWN,
            saved_at=saved_at,
        ))

    warnings.append(_processed(table, len(jobs), "jobs"))
    logger.info(f"Normalized {len(jobs)} jobs from {table.source}")

    return jobs, warnings
