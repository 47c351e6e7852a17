from uuid import UUID
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, Security
from sqlalchemy.orm import Session

from failseed.auth.service import get_current_owner
from failseed.core.database import get_db
from failseed.core.errors import FailSeedError, NotFound
from failseed.entries.db import delete_entry, get_entry, list_completed_entries, update_hint_status
from failseed.entries.schemas import DeleteResponse, EntryBase, GrowthStats, HintStatusUpdate
from failseed.entries.service import build_growth_stats

router = APIRouter(prefix="/api", tags=["Entries"])
logger = logging.getLogger(__name__)


@router.get(
    "/grows",
    response_model=List[EntryBase],
    summary="List completed entries",
    description="Retrieve the authenticated owner's finalized growth entries, newest first.",
    responses={
        200: {"description": "Entries retrieved successfully."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to retrieve entries."},
    },
)
def list_grows_route(
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
) -> List[EntryBase]:
    try:
        return list_completed_entries(db, owner)
    except Exception as e:
        logger.exception(f"Error listing completed entries: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch growth entries")


@router.get(
    "/grows/stats",
    response_model=GrowthStats,
    summary="Growth statistics",
    description="Aggregate hint follow-through and category spread over completed entries.",
    responses={
        200: {"description": "Statistics computed."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to compute statistics."},
    },
)
def grows_stats_route(
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
) -> GrowthStats:
    try:
        return build_growth_stats(list_completed_entries(db, owner))
    except Exception as e:
        logger.exception(f"Error computing growth statistics: {e}")
        raise HTTPException(status_code=500, detail="Failed to compute growth statistics")


@router.get(
    "/entry/{entry_id}",
    response_model=EntryBase,
    summary="Get an entry by ID",
    responses={
        200: {"description": "Entry retrieved successfully."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
    },
)
def read_entry_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
) -> EntryBase:
    entry = get_entry(db, entry_id, owner)
    if entry is None:
        raise NotFound()
    return entry


@router.patch(
    "/entry/{entry_id}/hint",
    response_model=EntryBase,
    summary="Update hint status",
    description="Record whether the owner tried or skipped the entry's hint.",
    responses={
        200: {"description": "Hint status updated."},
        401: {"description": "Unauthorized."},
        404: {"description": "Entry not found."},
        409: {"description": "Conversation not finalized yet."},
        422: {"description": "Invalid hint status."},
        500: {"description": "Failed to update hint status."},
    },
)
def update_hint_route(
    entry_id: UUID,
    body: HintStatusUpdate,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
) -> EntryBase:
    try:
        return update_hint_status(db, entry_id, owner, body.hint_status)
    except FailSeedError:
        raise
    except Exception as e:
        logger.exception(f"Error updating hint status for entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update hint status")


@router.delete(
    "/entry/{entry_id}",
    response_model=DeleteResponse,
    summary="Delete an entry",
    description="Permanently delete an entry. Deleting a missing entry is not an error.",
    responses={
        200: {"description": "Delete processed."},
        401: {"description": "Unauthorized."},
        500: {"description": "Failed to delete entry."},
    },
)
def delete_entry_route(
    entry_id: UUID,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
) -> DeleteResponse:
    try:
        deleted = delete_entry(db, entry_id, owner)
    except Exception as e:
        logger.exception(f"Error deleting entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete entry")
    if not deleted:
        logger.info(f"Delete requested for missing entry {entry_id}")
    return DeleteResponse(success=True)
