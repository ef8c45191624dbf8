from .handler import event_from_grid, event_handler, process
from .models import Claims, Event, MergeMode, Outcome, PrincipalType

__all__ = [
    'Claims', 'Event', 'MergeMode', 'Outcome', 'PrincipalType',
    'event_from_grid', 'event_handler', 'process',
]
