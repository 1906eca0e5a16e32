from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from .core.security import decode_token

# Los tokens los emite el servicio de autenticación; aquí solo se leen
oauth2 = OAuth2PasswordBearer(tokenUrl="/auth/login")


@dataclass(frozen=True)
class Caller:
    user_id: str
    organization_id: int
    role: str


def get_caller(token: str = Depends(oauth2)) -> Caller:
    """Identidad, rol y organización (contexto de tenant) del llamante."""
    data = decode_token(token)
    if not data or "sub" not in data or "org" not in data:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token no válido")
    try:
        org_id = int(data["org"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token no válido")
    return Caller(user_id=str(data["sub"]), organization_id=org_id, role=str(data.get("role") or ""))


def require_role(*allowed: str):
    def dep(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in allowed:
            raise HTTPException(status_code=403, detail="Permisos insuficientes")
        return caller
    return dep
