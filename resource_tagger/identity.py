from .models import Claims, PrincipalType

_SERVICE_PRINCIPALS = (PrincipalType.SERVICE_PRINCIPAL, PrincipalType.MANAGED_IDENTITY)


def resolve_creator(claims: Claims, principal_type: PrincipalType) -> str:
    # name, then email, then app id for service identities
    if claims.name:
        return claims.name
    if claims.email:
        return claims.email
    if principal_type in _SERVICE_PRINCIPALS:
        return f"Service Principal ID {claims.appid or ''}"
    return 'Unknown'
