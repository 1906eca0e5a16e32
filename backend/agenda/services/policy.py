"""
Política por rol: rango máximo de días consultable y nivel de detalle.
"""
import enum
from dataclasses import dataclass


class Role(str, enum.Enum):
    CLIENTE = "cliente"
    BOT = "bot"
    EMPLEADO = "empleado"
    ADMIN = "admin"
    PROPIETARIO = "propietario"
    SUPER_ADMIN = "super_admin"


class DetailLevel(enum.IntEnum):
    """Ordenado: un nivel mayor incluye todo lo que muestra uno menor."""

    BASICO = 1
    COMPLETO = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class RolePolicy:
    max_range_days: int
    detail_level: DetailLevel


DEFAULT_POLICY = RolePolicy(max_range_days=7, detail_level=DetailLevel.BASICO)

_POLICIES: dict[Role, RolePolicy] = {
    Role.CLIENTE: RolePolicy(7, DetailLevel.BASICO),
    Role.BOT: RolePolicy(7, DetailLevel.COMPLETO),
    Role.EMPLEADO: RolePolicy(14, DetailLevel.ADMIN),
    Role.ADMIN: RolePolicy(30, DetailLevel.ADMIN),
    Role.PROPIETARIO: RolePolicy(30, DetailLevel.ADMIN),
    Role.SUPER_ADMIN: RolePolicy(90, DetailLevel.ADMIN),
}


def resolve_policy(role: Role | str | None) -> RolePolicy:
    """Rol desconocido (o ausente) -> política más restrictiva."""
    try:
        return _POLICIES[Role(role)]
    except ValueError:
        return DEFAULT_POLICY


def clamp_range(requested_days: int, policy: RolePolicy) -> tuple[int, bool]:
    """
    Reduce el rango pedido al máximo del rol. No es un error:
    devuelve (rango_aplicado, fue_reducido).
    """
    if requested_days > policy.max_range_days:
        return policy.max_range_days, True
    return requested_days, False
