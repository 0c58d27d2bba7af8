"""Contact-form lead persistence and triage"""

import re
from datetime import datetime

from sqlmodel import Session

from blogcore.config import CONTACT_STATUSES, PRIORITIES
from blogcore.core.errors import ContentError
from blogcore.crud.models import Contact


PRODUCT_QUESTIONS = [
    "General Inquiry",
    "Product Information",
    "Technical Support",
    "Pricing",
    "Custom Solution",
    "Partnership",
    "Other",
]
SOURCES = ["website", "api", "mobile-app"]

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$')
PHONE_RE = re.compile(r'^\+?[1-9]\d{0,15}$')
MAX_MESSAGE = 1000


def submit_contact(
    session: Session,
    name: str,
    email: str,
    phone_number: str,
    product_question: str,
    message: str,
    source: str = "website",
    ) -> Contact:
    """Record an inbound lead; raises ContentError on a missing or malformed field."""
    name, message = name.strip(), message.strip()
    email, phone_number = email.strip().lower(), phone_number.strip()
    if not name:
        raise ContentError("Name is required")
    if not EMAIL_RE.match(email):
        raise ContentError("Please enter a valid email")
    if not PHONE_RE.match(phone_number):
        raise ContentError("Please enter a valid phone number")
    if product_question not in PRODUCT_QUESTIONS:
        raise ContentError("Please select a valid product question category")
    if not message or len(message) > MAX_MESSAGE:
        raise ContentError(f"Message is required and cannot exceed {MAX_MESSAGE} characters")
    if source not in SOURCES:
        raise ContentError(f"source must be one of: {', '.join(SOURCES)}")

    contact = Contact(
        name=name,
        email=email,
        phone_number=phone_number,
        product_question=product_question,
        message=message,
        source=source,
    )
    session.add(contact)
    session.flush()
    return contact


def mark_read(session: Session, contact: Contact, admin_id: str | None = None) -> Contact:
    """Mark a lead read, stamping who read it and when; already-read leads keep their stamp."""
    if not contact.is_read:
        contact.is_read = True
        contact.read_at = datetime.now()
        contact.read_by = admin_id
        contact.updated_at = datetime.now()
        session.add(contact)
        session.flush()
    return contact


def triage(
    session: Session,
    contact: Contact,
    status: str | None = None,
    priority: str | None = None,
    assigned_to: str | None = None,
    ) -> Contact:
    """Update status, priority and/or assignee; raises ContentError on an unknown status or priority."""
    if status is not None:
        if status not in CONTACT_STATUSES:
            raise ContentError(f"status must be one of: {', '.join(CONTACT_STATUSES)}")
        contact.status = status
    if priority is not None:
        if priority not in PRIORITIES:
            raise ContentError(f"priority must be one of: {', '.join(PRIORITIES)}")
        contact.priority = priority
    if assigned_to is not None:
        contact.assigned_to = assigned_to
    contact.updated_at = datetime.now()
    session.add(contact)
    session.flush()
    return contact
