"""Tests for event eligibility and resource type scope."""

import pytest

from resource_tagger.models import PrincipalType
from resource_tagger.rules import (
    BACKUP_OPERATION_PREFIX,
    EXCLUDED_OPERATIONS,
    RESOURCE_GROUP_TYPE,
    is_eligible,
    is_in_scope,
    is_resource_group,
    skip_reason,
)

ALLOWED = [PrincipalType.USER, PrincipalType.SERVICE_PRINCIPAL, PrincipalType.MANAGED_IDENTITY]


class TestEventFilter:

    @pytest.mark.parametrize('operation', sorted(EXCLUDED_OPERATIONS))
    def test_excluded_operations_never_eligible(self, operation):
        for principal in PrincipalType:
            assert not is_eligible(operation, principal)

    def test_backup_prefix_is_a_prefix_match(self):
        operation = BACKUP_OPERATION_PREFIX + 'Fabrics/Azure/protectionContainers/x/protectedItems/write'
        assert operation not in EXCLUDED_OPERATIONS
        assert skip_reason(operation, PrincipalType.USER) == 'backup_operation'

    def test_other_exclusions_are_exact(self):
        # a child of an excluded operation is not itself excluded
        assert is_eligible('Microsoft.Resources/tags/write/extra', PrincipalType.USER)
        assert is_eligible('microsoft.resources/tags/write', PrincipalType.USER)

    def test_other_principal_rejected(self):
        assert skip_reason('Microsoft.Compute/virtualMachines/write', PrincipalType.OTHER) == 'unsupported_principal'

    @pytest.mark.parametrize('principal', ALLOWED)
    def test_allowed_principals(self, principal):
        assert is_eligible('Microsoft.Compute/virtualMachines/write', principal)

    def test_excluded_operation_reason(self):
        assert skip_reason('Microsoft.Resources/tags/write', PrincipalType.USER) == 'excluded_operation'


class TestResourceTypeGate:

    def test_in_scope(self):
        assert is_in_scope('Microsoft.Compute/virtualMachines')
        assert is_in_scope(RESOURCE_GROUP_TYPE)

    def test_case_insensitive(self):
        assert is_in_scope('microsoft.storage/storageaccounts')

    @pytest.mark.parametrize('resource_type', ['', None, 'Microsoft.Compute/virtualMachines/extensions',
                                               'Microsoft.Portal/dashboards'])
    def test_out_of_scope(self, resource_type):
        assert not is_in_scope(resource_type)


class TestResourceGroupShape:

    @pytest.mark.parametrize('resource_id', [
        '/subscriptions/S/resourceGroups/G',
        '/subscriptions/S/resourcegroups/G/',
    ])
    def test_group_ids(self, resource_id):
        assert is_resource_group(resource_id)

    @pytest.mark.parametrize('resource_id', [
        '/subscriptions/S',
        '/subscriptions/S/resourceGroups',
        '/subscriptions/S/resourceGroups/G/providers/Microsoft.Compute/virtualMachines/vm',
        'subscriptions/S/resourceGroups/G',
        '',
    ])
    def test_non_group_ids(self, resource_id):
        assert not is_resource_group(resource_id)
