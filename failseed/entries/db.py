import logging
from uuid import UUID, uuid4
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from failseed.core.errors import AlreadyCompleted, ConcurrentUpdate, NotCompleted, NotFound
from failseed.entries.models import Entry

logger = logging.getLogger(__name__)


def _commit(db: Session, entry: Entry) -> Entry:
    """Commits pending changes, turning a lost version race into ConcurrentUpdate."""
    entry_id = entry.id
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent update detected on entry {entry_id}")
        raise ConcurrentUpdate()
    db.refresh(entry)
    return entry


# Lookups
def get_entry(db: Session, entry_id: UUID, owner: str) -> Optional[Entry]:
    """
    Retrieves an entry by its ID for a given owner.

    Args:
        db (Session): SQLAlchemy session.
        entry_id (UUID): ID of the entry.
        owner (str): Opaque owner identifier.

    Returns:
        Optional[Entry]: The entry if it exists and belongs to the owner, else None.
    """
    return db.query(Entry).filter(
        Entry.id == entry_id,
        Entry.owner == owner,
    ).first()


def get_owned_entry(db: Session, entry_id: UUID, owner: str) -> Entry:
    entry = get_entry(db, entry_id, owner)
    if entry is None:
        raise NotFound()
    return entry


def list_completed_entries(db: Session, owner: str) -> List[Entry]:
    """
    Retrieves the owner's finalized entries, newest first.
    """
    return (
        db.query(Entry)
        .filter(Entry.owner == owner, Entry.is_completed.is_(True))
        .order_by(Entry.created_at.desc())
        .all()
    )


# Entry lifecycle
def create_entry(db: Session, text: str, owner: str, messages: List[Dict[str, Any]]) -> Entry:
    """
    Creates a new ongoing entry holding the first user/assistant exchange.

    Args:
        db (Session): SQLAlchemy session.
        text (str): The free-form input that started the conversation.
        owner (str): Opaque owner identifier.
        messages (List[dict]): Initial conversation history.

    Returns:
        Entry: The created entry.
    """
    entry = Entry(
        id=uuid4(),
        owner=owner,
        text=text,
        conversation_history=list(messages),
        turn_count=1,
        hint_status="none",
        is_completed=False,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def append_turn(
    db: Session,
    entry_id: UUID,
    owner: str,
    new_messages: List[Dict[str, Any]],
    turn_count: int,
) -> Entry:
    """
    Appends a user/assistant exchange to an ongoing entry.

    Raises:
        NotFound: If the entry does not exist for the owner.
        AlreadyCompleted: If the entry has been finalized.
        ConcurrentUpdate: If another request updated the entry first.
    """
    entry = get_owned_entry(db, entry_id, owner)
    if entry.is_completed:
        raise AlreadyCompleted()

    # JSON columns are not mutation-tracked, so assign a fresh list
    entry.conversation_history = list(entry.conversation_history or []) + list(new_messages)
    entry.turn_count = turn_count
    return _commit(db, entry)


def finalize_entry(
    db: Session,
    entry_id: UUID,
    owner: str,
    growth: str,
    hint: Optional[str],
    category: Optional[str] = None,
) -> Entry:
    """
    Stores the distilled growth/hint and freezes the conversation.

    Raises:
        NotFound: If the entry does not exist for the owner.
        AlreadyCompleted: If the entry was finalized before.
        ConcurrentUpdate: If another request updated the entry first.
    """
    entry = get_owned_entry(db, entry_id, owner)
    if entry.is_completed:
        raise AlreadyCompleted()

    entry.growth = growth
    entry.hint = hint
    entry.category = category
    entry.is_completed = True
    return _commit(db, entry)


def update_hint_status(db: Session, entry_id: UUID, owner: str, status: str) -> Entry:
    """
    Records hint follow-through on a finalized entry.

    Raises:
        NotFound: If the entry does not exist for the owner.
        NotCompleted: If the conversation is still ongoing.
    """
    entry = get_owned_entry(db, entry_id, owner)
    if not entry.is_completed:
        raise NotCompleted()
    entry.hint_status = status
    return _commit(db, entry)


def delete_entry(db: Session, entry_id: UUID, owner: str) -> bool:
    """
    Hard-deletes an entry.

    Returns:
        bool: True if an owned entry was deleted, False if there was nothing to delete.
    """
    entry = get_entry(db, entry_id, owner)
    if entry is None:
        return False
    db.delete(entry)
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        return False
    return True
