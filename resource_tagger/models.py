from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

EMAIL_CLAIM = 'http://schemas.xmlsoap.org/ws/2005/05/identity/claims/emailaddress'


class PrincipalType(str, Enum):
    USER = 'User'
    SERVICE_PRINCIPAL = 'ServicePrincipal'
    MANAGED_IDENTITY = 'ManagedIdentity'
    OTHER = 'Other'

    @classmethod
    def parse(cls, value) -> 'PrincipalType':
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value or '').lower() == member.value.lower():
                return member
        return cls.OTHER


@dataclass(frozen=True)
class Claims:
    """The three claims the tagger reads; everything else in the token is ignored."""
    name: Optional[str] = None
    email: Optional[str] = None
    appid: Optional[str] = None

    @classmethod
    def from_mapping(cls, claims: Optional[Mapping[str, str]]) -> 'Claims':
        claims = claims or {}
        return cls(name=claims.get('name'), email=claims.get(EMAIL_CLAIM), appid=claims.get('appid'))


@dataclass(frozen=True)
class Event:
    operation_name: str
    resource_id: str
    subject: str = ''
    principal_type: PrincipalType = PrincipalType.OTHER
    claims: Claims = field(default_factory=Claims)


class MergeMode(str, Enum):
    WRITE_ALL = 'write_all'
    UPDATE = 'update'


@dataclass(frozen=True)
class TagPlan:
    tags: dict
    mode: MergeMode


@dataclass
class Outcome:
    status: str
    reason: str
    resource_id: str
    creator: Optional[str] = None
    resource_type: Optional[str] = None
    tags: Optional[dict] = None
    mode: Optional[MergeMode] = None
    error: Optional[Exception] = None

    DONE = 'done'
    SKIPPED = 'skipped'
    FAILED = 'failed'

    @classmethod
    def skipped(cls, reason: str, resource_id: str, **kw) -> 'Outcome':
        return cls(cls.SKIPPED, reason, resource_id, **kw)

    @classmethod
    def failed(cls, reason: str, resource_id: str, error: Exception, **kw) -> 'Outcome':
        return cls(cls.FAILED, reason, resource_id, error=error, **kw)

    def as_dict(self) -> dict:
        out = {'status': self.status, 'reason': self.reason, 'resource_id': self.resource_id}
        if self.creator is not None:
            out['creator'] = self.creator
        if self.resource_type is not None:
            out['resource_type'] = self.resource_type
        if self.tags is not None:
            out['tags'] = dict(self.tags)
        if self.mode is not None:
            out['mode'] = self.mode.value
        if self.error is not None:
            out['error'] = str(self.error)
        return out
