"""Application service — creation, numbering and timeline entries.

Functions flush but do NOT commit; the caller commits (or wraps the call
in services.transaction.atomic).
"""

from datetime import date, datetime, timezone

import bleach

from app.errors import ValidationError
from app.extensions import db
from app.models.application import Application, ApplicationTimeline


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(text, tags=[], strip=True).strip()


def next_application_number(now=None):
    """Next number in this month's sequence, e.g. NASYA-202610-0007."""
    now = now or datetime.now(timezone.utc)
    month_prefix = f"{Application.NUMBER_PREFIX}-{now:%Y%m}-"
    last = (
        db.session.query(db.func.max(Application.application_number))
        .filter(Application.application_number.like(f"{month_prefix}%"))
        .scalar()
    )
    sequence = int(last[-4:]) + 1 if last else 1
    return f"{month_prefix}{sequence:04d}"


def create_application(owner_id, title, status="draft", priority="normal",
                       due_date=None):
    """Create a new, unplaced application for ``owner_id``.

    Raises:
        ValidationError: If title is empty or status/priority are unknown.
    """
    title = _sanitize(title)
    if not title:
        raise ValidationError("Title is required.")
    if status not in Application.STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(Application.STATUSES)}"
        )
    if priority not in Application.PRIORITIES:
        raise ValidationError(
            f"Invalid priority '{priority}'. Must be one of: {', '.join(Application.PRIORITIES)}"
        )
    if due_date is not None and not isinstance(due_date, date):
        raise ValidationError("due_date must be a date.")

    application = Application(
        application_number=next_application_number(),
        user_id=owner_id,
        title=title,
        status=status,
        priority=priority,
        due_date=due_date,
    )
    db.session.add(application)
    db.session.flush()

    add_to_timeline(application, owner_id, "created", "Application created")
    return application


def add_to_timeline(application, user_id, action, description, metadata=None):
    """Append a history entry to an application's timeline."""
    entry = ApplicationTimeline(
        application_id=application.id,
        user_id=user_id,
        action=action,
        description=description,
        metadata_=metadata or {},
    )
    db.session.add(entry)
    db.session.flush()
    return entry
