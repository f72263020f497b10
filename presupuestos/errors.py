"""Excepciones del núcleo de presupuestos."""


class PresupuestosError(Exception):
    """Base de todos los errores propios."""


class ParseError(PresupuestosError):
    """Contenido persistido que no es JSON válido (se recupera siempre en lectura)."""


class ValidationError(PresupuestosError):
    """Registro inválido (producto sin SKU, precio no numérico, etc.)."""


class FormatError(PresupuestosError):
    """El archivo a importar no tiene la forma esperada (se esperaba un arreglo)."""


class StorageUnavailable(PresupuestosError):
    """No se puede acceder a la persistencia subyacente."""
