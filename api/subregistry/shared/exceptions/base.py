"""
Excepcion base de la aplicacion.

Toda excepcion que deba llegar al cliente como respuesta estructurada
hereda de AppException; el handler global la serializa como
{"error", "message", "details"}.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Excepcion base de la aplicacion.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            message: Mensaje legible para el cliente
            status_code: Codigo HTTP con el que se responde
            error_code: Codigo estable para clientes programaticos
            details: Contexto adicional serializable a JSON
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        """Cuerpo JSON de la respuesta de error."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }
