import re
from typing import Optional

from .models import PrincipalType

RESOURCE_GROUP_TYPE = 'Microsoft.Resources/resourceGroups'

# Exact matches only; see BACKUP_OPERATION_PREFIX for the one prefix rule.
EXCLUDED_OPERATIONS = frozenset({
    'Microsoft.Resources/tags/write',
    'Microsoft.Resources/deployments/write',
    'Microsoft.Compute/virtualMachines/extensions/write',
    'Microsoft.Compute/virtualMachineScaleSets/extensions/write',
    'Microsoft.HybridCompute/machines/extensions/write',
    'Microsoft.Compute/virtualMachines/installPatches/action',
    'Microsoft.Compute/virtualMachines/assessPatches/action',
    'Microsoft.Compute/virtualMachines/runCommand/action',
    'Microsoft.Compute/restorePointCollections/write',
    'Microsoft.Compute/restorePointCollections/restorePoints/write',
    'Microsoft.Maintenance/configurationAssignments/write',
    'Microsoft.Maintenance/applyUpdates/write',
    'Microsoft.PolicyInsights/policyStates/write',
    'Microsoft.PolicyInsights/attestations/write',
    'Microsoft.GuestConfiguration/guestConfigurationAssignments/write',
    'Microsoft.Insights/diagnosticSettings/write',
    'Microsoft.Security/assessments/write',
    'Microsoft.RecoveryServices/vaults/replicationFabrics/replicationProtectionContainers/replicationProtectedItems/write',
})

BACKUP_OPERATION_PREFIX = 'Microsoft.RecoveryServices/vaults/backup'

ALLOWED_PRINCIPAL_TYPES = frozenset({
    PrincipalType.USER,
    PrincipalType.SERVICE_PRINCIPAL,
    PrincipalType.MANAGED_IDENTITY,
})

INCLUDED_RESOURCE_TYPES = frozenset({
    RESOURCE_GROUP_TYPE,
    # compute
    'Microsoft.Compute/virtualMachines',
    'Microsoft.Compute/virtualMachineScaleSets',
    'Microsoft.Compute/disks',
    'Microsoft.Compute/snapshots',
    'Microsoft.Compute/images',
    'Microsoft.Compute/availabilitySets',
    'Microsoft.Web/sites',
    'Microsoft.Web/serverFarms',
    'Microsoft.ContainerService/managedClusters',
    'Microsoft.ContainerRegistry/registries',
    'Microsoft.ContainerInstance/containerGroups',
    # storage
    'Microsoft.Storage/storageAccounts',
    # networking
    'Microsoft.Network/virtualNetworks',
    'Microsoft.Network/networkSecurityGroups',
    'Microsoft.Network/networkInterfaces',
    'Microsoft.Network/publicIPAddresses',
    'Microsoft.Network/loadBalancers',
    'Microsoft.Network/applicationGateways',
    'Microsoft.Network/azureFirewalls',
    'Microsoft.Network/privateEndpoints',
    'Microsoft.Network/routeTables',
    'Microsoft.Network/dnsZones',
    'Microsoft.Network/privateDnsZones',
    # data
    'Microsoft.Sql/servers',
    'Microsoft.Sql/servers/databases',
    'Microsoft.DocumentDB/databaseAccounts',
    'Microsoft.DBforPostgreSQL/flexibleServers',
    'Microsoft.DBforMySQL/flexibleServers',
    'Microsoft.Cache/Redis',
    'Microsoft.DataFactory/factories',
    'Microsoft.Databricks/workspaces',
    'Microsoft.EventHub/namespaces',
    'Microsoft.ServiceBus/namespaces',
    # management plane
    'Microsoft.KeyVault/vaults',
    'Microsoft.OperationalInsights/workspaces',
    'Microsoft.Insights/components',
    'Microsoft.Automation/automationAccounts',
    'Microsoft.RecoveryServices/vaults',
})

_INCLUDED_LOWER = frozenset(t.lower() for t in INCLUDED_RESOURCE_TYPES)

_RESOURCE_GROUP_ID = re.compile(r'^/subscriptions/[^/]+/resourceGroups/[^/]+/?$', re.IGNORECASE)


def skip_reason(operation_name: str, principal_type: PrincipalType) -> Optional[str]:
    if operation_name in EXCLUDED_OPERATIONS:
        return 'excluded_operation'
    if operation_name.startswith(BACKUP_OPERATION_PREFIX):
        return 'backup_operation'
    if principal_type not in ALLOWED_PRINCIPAL_TYPES:
        return 'unsupported_principal'
    return None


def is_eligible(operation_name: str, principal_type: PrincipalType) -> bool:
    return skip_reason(operation_name, principal_type) is None


def is_in_scope(resource_type: Optional[str]) -> bool:
    return bool(resource_type) and resource_type.lower() in _INCLUDED_LOWER


def is_resource_group(resource_id: str) -> bool:
    return bool(_RESOURCE_GROUP_ID.match(resource_id or ''))
