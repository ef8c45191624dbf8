"""Provenance tag names and the first-write / update merge policy."""
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple
from zoneinfo import ZoneInfo

from .models import MergeMode, TagPlan

CREATOR = 'Creator'
DATE_CREATED = 'DateCreated'
TIME_CREATED_PST = 'TimeCreatedInPST'
LAST_MODIFIED_BY = 'LastModifiedBy'
LAST_MODIFIED_DATE = 'LastModifiedDate'

PROVENANCE_TAGS = (CREATOR, DATE_CREATED, TIME_CREATED_PST, LAST_MODIFIED_BY, LAST_MODIFIED_DATE)

PACIFIC = ZoneInfo('America/Los_Angeles')


def provenance_timestamps(now: Optional[datetime] = None) -> Tuple[str, str]:
    """Return (date, time) in Pacific time. Naive datetimes are taken as UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(PACIFIC)
    return local.strftime('%Y-%m-%d'), local.strftime('%H:%M:%S')


def has_creator(tags: Optional[Mapping[str, str]]) -> bool:
    # ARM tag names are case-insensitive
    return any(key.lower() == CREATOR.lower() for key in tags or {})


def plan_tags(current_tags: Optional[Mapping[str, str]], creator: str, date: str, time_pst: str) -> TagPlan:
    """Decide which tags to write.

    Without a Creator tag the resource is tagged for the first time: every
    existing tag is carried over and all five provenance tags are added.
    Otherwise only LastModifiedBy/LastModifiedDate are sent, and the backend
    merge leaves Creator and everything else in place.
    """
    if not has_creator(current_tags):
        tags = dict(current_tags or {})
        tags.update({
            CREATOR: creator,
            DATE_CREATED: date,
            TIME_CREATED_PST: time_pst,
            LAST_MODIFIED_BY: creator,
            LAST_MODIFIED_DATE: date,
        })
        return TagPlan(tags, MergeMode.WRITE_ALL)
    return TagPlan({LAST_MODIFIED_BY: creator, LAST_MODIFIED_DATE: date}, MergeMode.UPDATE)


def merge_tags(current: Optional[Mapping[str, str]], patch: Mapping[str, str]) -> dict:
    """Key-level merge: patch keys overwrite, all other keys survive."""
    merged = dict(current or {})
    merged.update(patch)
    return merged
