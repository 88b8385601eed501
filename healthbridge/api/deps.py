from typing import Callable, Optional
from fastapi import Header, Request

from healthbridge.core.security import Principal, PrincipalKind, verify_token
from healthbridge.infrastructure.database import get_db  # noqa: F401  re-exported for routers


def principal_dependency(kind: PrincipalKind) -> Callable[..., Principal]:
    """
    Build a dependency authenticating one principal kind.

    The token is read from that kind's own header and must carry the matching
    kind claim, so a doctor token sent as a user token is rejected.
    """
    def dependency(request: Request) -> Principal:
        token: Optional[str] = request.headers.get(kind.header)
        return Principal(kind=kind, id=verify_token(token, kind))

    dependency.__name__ = f"current_{kind.value}"
    return dependency


get_current_user = principal_dependency(PrincipalKind.USER)
get_current_doctor = principal_dependency(PrincipalKind.DOCTOR)
get_current_admin = principal_dependency(PrincipalKind.ADMIN)


def get_origin(origin: Optional[str] = Header(None)) -> Optional[str]:
    return origin
