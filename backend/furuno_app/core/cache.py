from cachetools import LRUCache
import numpy as np

from .config import settings


def _nbytes_arr(a) -> int:
    """Calcula el tamaño en bytes de un array o MaskedArray."""
    if isinstance(a, np.ma.MaskedArray):
        base = a.data.nbytes
        m = np.ma.getmaskarray(a)
        return base + (m.nbytes if m is not np.ma.nomask else 0)
    return getattr(a, "nbytes", 0)


def _nbytes_radar_file(radar_file) -> int:
    """
    Tamaño aproximado de un RadarFile decodificado: suma de los arrays de
    momentos de todos los rayos. Cabecera y metadatos se ignoran.
    """
    n = 0
    for sweep in radar_file.sweeps:
        for ray in sweep.rays:
            for arr in ray.data.values():
                n += _nbytes_arr(arr)
    # Mínimo 1 byte para que un barrido vacío también ocupe lugar
    return max(n, 1)


DECODE_CACHE = LRUCache(
    maxsize=settings.DECODE_CACHE_MB * 1024 * 1024,
    getsizeof=_nbytes_radar_file,
)
