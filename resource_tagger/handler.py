import logging
import os
from datetime import datetime
from typing import Optional

from .backend import AzureResourceBackend
from .errors import InvalidEvent, LookupFailed, ResourceNotFound, WriteFailed
from .identity import resolve_creator
from .models import Claims, Event, Outcome, PrincipalType
from .rules import RESOURCE_GROUP_TYPE, is_in_scope, is_resource_group, skip_reason
from .tags import plan_tags, provenance_timestamps

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

log = logging.getLogger(__name__)

_backend = None


def configure_logging(level: Optional[str] = None) -> None:
    """Apply LOG_LEVEL to the package logger, even when the host owns root logging."""
    level = level or os.getenv('LOG_LEVEL', LOG_LEVEL)
    logging.getLogger('resource_tagger').setLevel(level.upper())


configure_logging()


def _lookup(event: Event, backend):
    """Return (resource_type, current_tags) for the event's resource."""
    if is_resource_group(event.resource_id):
        return RESOURCE_GROUP_TYPE, backend.lookup_resource_group_tags(event.resource_id)
    resource_type = backend.lookup_resource_type(event.resource_id)
    if not resource_type:
        return None, None
    return resource_type, backend.lookup_tags(event.resource_id)


def _run(event: Event, backend, now: Optional[datetime]) -> Outcome:
    rid = event.resource_id
    reason = skip_reason(event.operation_name, event.principal_type)
    if reason:
        return Outcome.skipped(reason, rid)

    creator = resolve_creator(event.claims, event.principal_type)

    try:
        resource_type, current_tags = _lookup(event, backend)
    except ResourceNotFound:
        return Outcome.skipped('resource_not_found', rid, creator=creator)
    except LookupFailed as e:
        return Outcome.failed('lookup_failed', rid, e.cause, creator=creator)

    if not resource_type:
        return Outcome.skipped('resource_type_unresolved', rid, creator=creator)
    if not is_in_scope(resource_type):
        return Outcome.skipped('resource_type_not_in_scope', rid, creator=creator, resource_type=resource_type)

    date, time_pst = provenance_timestamps(now)
    plan = plan_tags(current_tags, creator, date, time_pst)

    try:
        backend.merge_tags(rid, plan.tags)
    except WriteFailed as e:
        return Outcome.failed('write_failed', rid, e.cause, creator=creator,
                              resource_type=resource_type, tags=plan.tags, mode=plan.mode)
    return Outcome(Outcome.DONE, 'tagged', rid, creator=creator,
                   resource_type=resource_type, tags=plan.tags, mode=plan.mode)


def process(event: Event, backend, now: Optional[datetime] = None) -> Outcome:
    outcome = _run(event, backend, now)
    if outcome.status == Outcome.FAILED:
        log.error('%s %s on %s: %s', outcome.status, event.operation_name, event.resource_id,
                  outcome.reason, exc_info=outcome.error)
    else:
        log.info('%s %s on %s: %s (creator %s)', outcome.status, event.operation_name,
                 event.resource_id, outcome.reason, outcome.creator or '-')
    return outcome


def event_from_grid(payload: dict) -> Event:
    """Build an Event from an Event Grid resource write event (envelope or its data)."""
    payload = payload or {}
    data = payload.get('data') if isinstance(payload.get('data'), dict) else payload
    operation = data.get('operationName')
    resource_id = data.get('resourceUri')
    if not operation or not resource_id:
        raise InvalidEvent('event is missing operationName or resourceUri')
    evidence = ((data.get('authorization') or {}).get('evidence') or {})
    return Event(
        operation_name=operation,
        resource_id=resource_id,
        subject=payload.get('subject') or data.get('subject') or '',
        principal_type=PrincipalType.parse(evidence.get('principalType')),
        claims=Claims.from_mapping(data.get('claims')),
    )


def _default_backend():
    global _backend
    if _backend is None:
        _backend = AzureResourceBackend()
    return _backend


def event_handler(event, context=None, backend=None) -> dict:
    # no-op when the host already installed a root handler
    logging.basicConfig()
    parsed = event_from_grid(event)
    log.debug('received %s on %s (subject %s)', parsed.operation_name, parsed.resource_id, parsed.subject)
    return process(parsed, backend or _default_backend()).as_dict()
