"""
Excepciones del decodificador Furuno.

Todas son fatales para el archivo en curso: no existe recuperación parcial.
"""


class FurunoDecodeError(ValueError):
    """Error base de decodificación de un archivo .rhix."""
    pass


class TruncatedInputError(FurunoDecodeError):
    """El flujo terminó antes de completar un campo o bloque."""
    pass


class FormatError(FurunoDecodeError):
    """Un campo estructural no pasó la validación."""
    pass


class UnsupportedMomentError(KeyError):
    """Momento fuera de la tabla fija de momentos (no debería ocurrir)."""
    pass
