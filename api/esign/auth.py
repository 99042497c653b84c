from typing import Optional
from fastapi import Header, HTTPException, Query, status

from . import config


def require_operator(
    x_access_token: Optional[str] = Header(default=None, alias="X-Access-Token"),
    token: Optional[str] = Query(default=None),
) -> str:
    # operator identity is owned by the host application; this only checks the shared token
    expected = config.OPERATOR_ACCESS_TOKEN
    if not expected:
        return "operator"
    candidate = x_access_token or token
    if not candidate:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing access token")
    if candidate != expected:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid access token")
    return "operator"
