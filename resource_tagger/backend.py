import logging
import os
from typing import Dict, Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import Tags, TagsPatchResource

from .errors import LookupFailed, ResourceNotFound, WriteFailed

MANAGED_IDENTITY_CLIENT_ID = os.getenv('AZURE_MANAGED_IDENTITY_CLIENT_ID')

log = logging.getLogger(__name__)


def _segments(resource_id: str) -> list:
    return [s for s in resource_id.split('/') if s]


def subscription_of(resource_id: str) -> str:
    parts = _segments(resource_id)
    if len(parts) < 2 or parts[0].lower() != 'subscriptions':
        raise ValueError(f"not a subscription-scoped resource id: {resource_id}")
    return parts[1]


def resource_group_of(resource_id: str) -> str:
    parts = _segments(resource_id)
    if len(parts) < 4 or parts[2].lower() != 'resourcegroups':
        raise ValueError(f"resource id has no resource group: {resource_id}")
    return parts[3]


def provider_type_of(resource_id: str):
    """Split an id into (namespace, 'type/childType') using the last providers segment."""
    parts = _segments(resource_id)
    idx = max((i for i, p in enumerate(parts) if p.lower() == 'providers'), default=-1)
    if idx < 0 or idx + 2 >= len(parts):
        raise ValueError(f"resource id has no provider segment: {resource_id}")
    namespace = parts[idx + 1]
    types = parts[idx + 2::2]
    return namespace, '/'.join(types)


def pick_api_version(api_versions) -> Optional[str]:
    # date-stamped versions sort newest first
    versions = sorted(api_versions or [], reverse=True)
    stable = [v for v in versions if 'preview' not in v.lower()]
    return (stable or versions or [None])[0]


class AzureResourceBackend:
    """Resource/tag reads and merge-writes against Azure Resource Manager."""

    def __init__(self, credential=None, client_factory=None):
        self._credential = credential
        self._client_factory = client_factory or ResourceManagementClient
        self._clients: Dict[str, ResourceManagementClient] = {}
        self._api_versions: Dict[str, str] = {}

    @property
    def credential(self):
        if self._credential is None:
            self._credential = DefaultAzureCredential(managed_identity_client_id=MANAGED_IDENTITY_CLIENT_ID)
        return self._credential

    def client(self, resource_id: str):
        sub = subscription_of(resource_id)
        if sub not in self._clients:
            self._clients[sub] = self._client_factory(self.credential, sub)
        return self._clients[sub]

    def _api_version(self, client, resource_id: str) -> str:
        namespace, rtype = provider_type_of(resource_id)
        key = f"{namespace}/{rtype}".lower()
        if key not in self._api_versions:
            provider = client.providers.get(namespace)
            for rt in provider.resource_types or []:
                if (rt.resource_type or '').lower() == rtype.lower():
                    version = pick_api_version(rt.api_versions)
                    if version:
                        self._api_versions[key] = version
                    break
            else:
                raise ResourceNotFound(f"provider {namespace} has no resource type {rtype}")
            if key not in self._api_versions:
                raise ResourceNotFound(f"no api version for {namespace}/{rtype}")
        return self._api_versions[key]

    def lookup_resource_type(self, resource_id: str) -> Optional[str]:
        try:
            client = self.client(resource_id)
            resource = client.resources.get_by_id(resource_id, self._api_version(client, resource_id))
        except ResourceNotFoundError as e:
            raise ResourceNotFound(str(e)) from e
        except (AzureError, ValueError) as e:
            raise LookupFailed(resource_id, e) from e
        return resource.type

    def lookup_tags(self, resource_id: str) -> Optional[dict]:
        try:
            result = self.client(resource_id).tags.get_at_scope(resource_id)
        except ResourceNotFoundError as e:
            raise ResourceNotFound(str(e)) from e
        except (AzureError, ValueError) as e:
            raise LookupFailed(resource_id, e) from e
        props = result.properties
        return dict(props.tags) if props is not None and props.tags is not None else None

    def lookup_resource_group_tags(self, resource_id: str) -> Optional[dict]:
        try:
            group = self.client(resource_id).resource_groups.get(resource_group_of(resource_id))
        except ResourceNotFoundError as e:
            raise ResourceNotFound(str(e)) from e
        except (AzureError, ValueError) as e:
            raise LookupFailed(resource_id, e) from e
        return dict(group.tags) if group.tags is not None else None

    def merge_tags(self, resource_id: str, tags: dict) -> None:
        patch = TagsPatchResource(operation='Merge', properties=Tags(tags=dict(tags)))
        try:
            self.client(resource_id).tags.update_at_scope(resource_id, patch)
        except (AzureError, ValueError) as e:
            raise WriteFailed(resource_id, e) from e
        log.debug('merged %d tags onto %s', len(tags), resource_id)
