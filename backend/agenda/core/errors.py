"""
Excepciones de dominio del motor de agenda.

Los routers no construyen HTTPException para estos casos: las excepciones
se traducen a respuestas HTTP en un solo lugar (handlers en main.py).
"""


class AgendaError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AgendaError):
    """Parámetro mal formado o fuera de rango. Identifica el campo."""

    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class NotFoundError(AgendaError):
    """
    Recurso inexistente o de otra organización.
    El mensaje es siempre genérico: no distingue entre ambos casos.
    """

    status_code = 404

    def __init__(self, message: str = "Recurso no encontrado"):
        super().__init__(message)


class ConflictError(AgendaError):
    """El horario pedido no supera la validación de escritura."""

    status_code = 409

    def __init__(self, errors: list[dict], message: str = "Horario no disponible"):
        super().__init__(message)
        self.errors = errors
