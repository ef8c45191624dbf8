"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from resource_tagger.errors import LookupFailed, ResourceNotFound, WriteFailed
from resource_tagger.tags import merge_tags

SUB = '00000000-0000-0000-0000-000000000001'
RG_ID = f"/subscriptions/{SUB}/resourceGroups/rg-app"
VM_ID = f"{RG_ID}/providers/Microsoft.Compute/virtualMachines/vm-01"


class FakeBackend:
    """In-memory backend that applies writes as key-level merges."""

    def __init__(self):
        self.types = {}
        self.tags = {}
        self.calls = []
        self.lookup_error = None
        self.write_error = None

    def add(self, resource_id, resource_type, tags=None):
        self.types[resource_id] = resource_type
        self.tags[resource_id] = tags

    def _read(self, name, resource_id):
        self.calls.append((name, resource_id))
        if self.lookup_error is not None:
            raise LookupFailed(resource_id, self.lookup_error)
        if resource_id not in self.types:
            raise ResourceNotFound(resource_id)

    def lookup_resource_type(self, resource_id):
        self._read('lookup_resource_type', resource_id)
        return self.types[resource_id]

    def lookup_tags(self, resource_id):
        self._read('lookup_tags', resource_id)
        tags = self.tags[resource_id]
        return dict(tags) if tags is not None else None

    def lookup_resource_group_tags(self, resource_id):
        self._read('lookup_resource_group_tags', resource_id)
        tags = self.tags[resource_id]
        return dict(tags) if tags is not None else None

    def merge_tags(self, resource_id, tags):
        self.calls.append(('merge_tags', resource_id))
        if self.write_error is not None:
            raise WriteFailed(resource_id, self.write_error)
        self.tags[resource_id] = merge_tags(self.tags.get(resource_id), tags)

    @property
    def writes(self):
        return [c for c in self.calls if c[0] == 'merge_tags']


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.add(VM_ID, 'Microsoft.Compute/virtualMachines')
    fake.add(RG_ID, 'Microsoft.Resources/resourceGroups')
    return fake


@pytest.fixture
def now():
    # 2024-03-15 20:30:00 UTC is 13:30:00 PDT
    return datetime(2024, 3, 15, 20, 30, 0, tzinfo=timezone.utc)


def grid_event(operation='Microsoft.Compute/virtualMachines/write', resource_id=VM_ID,
               principal_type='User', claims=None):
    return {
        'id': 'a1b2c3',
        'subject': resource_id,
        'eventType': 'Microsoft.Resources.ResourceWriteSuccess',
        'data': {
            'authorization': {
                'scope': resource_id,
                'action': operation,
                'evidence': {'role': 'Contributor', 'principalType': principal_type},
            },
            'claims': claims if claims is not None else {'name': 'Carol'},
            'operationName': operation,
            'resourceUri': resource_id,
            'status': 'Succeeded',
            'subscriptionId': SUB,
        },
    }


@pytest.fixture
def make_event():
    return grid_event


@pytest.fixture
def vm_id():
    return VM_ID


@pytest.fixture
def rg_id():
    return RG_ID
