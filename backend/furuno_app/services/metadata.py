from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import numpy as np
import pandas as pd

from ..core.cache import DECODE_CACHE
from ..core.config import settings
from .furuno import RadarFile, read_furuno_file
from .radar_common import decode_cache_key

logger = logging.getLogger(__name__)


def load_furuno(path: str | Path, name: Optional[str] = None) -> RadarFile:
    """
    Decodifica un archivo Furuno usando la cache por md5 del contenido.
    Los errores de decodificación se propagan al llamador.
    """
    name = name or settings.RADAR_NAME
    key = decode_cache_key(path, name)
    radar_file = DECODE_CACHE.get(key)
    if radar_file is None:
        radar_file = read_furuno_file(path, name=name)
        if DECODE_CACHE.getsizeof(radar_file) <= DECODE_CACHE.maxsize:
            DECODE_CACHE[key] = radar_file
        else:
            logger.warning(
                "%s excede el tamaño de la cache (%d bytes), no se cachea",
                Path(path).name,
                DECODE_CACHE.maxsize,
            )
    else:
        logger.debug("Cache hit para %s", Path(path).name)
    return radar_file


def rays_dataframe(radar_file: RadarFile) -> pd.DataFrame:
    """
    Tabla con una fila por rayo: azimut y media por momento.
    """
    sweep = radar_file.sweep
    ngates = radar_file.context.gate_count
    df = pd.DataFrame({"azimuth": sweep.azimuths()})
    if ngates == 0:
        return df
    for name in radar_file.params:
        df[f"{name}_mean"] = sweep.moment_array(name, ngates).mean(axis=1)
    return df


def _moment_stats(values: np.ndarray) -> Dict[str, Optional[float]]:
    s = pd.Series(values.ravel(), dtype="float64").dropna()
    if s.empty:
        return {"min": None, "max": None, "mean": None}
    return {"min": float(s.min()), "max": float(s.max()), "mean": float(s.mean())}


def summarize_radar_file(radar_file: RadarFile) -> Dict[str, Any]:
    """
    Metadata básica de un RadarFile ya decodificado:
      - moments: momentos presentes (sin el canal de calidad)
      - ngates / gate_resolution_m / range_max_m
      - nrays y rango de azimuts
      - site: lat/lon/alt del radar
      - start_time, nyquist_velocity
      - stats: min/max/media por momento
    """
    ctx = radar_file.context
    sweep = radar_file.sweep
    df = rays_dataframe(radar_file)

    if df.empty:
        azimuth_range = None
    else:
        azimuth_range = [float(df["azimuth"].min()), float(df["azimuth"].max())]

    range_max_m: Optional[float] = None
    if ctx.gate_count > 0:
        range_max_m = float((ctx.gate_count - 1) * ctx.gate_resolution)

    return {
        "radar": radar_file.name,
        "moments": list(radar_file.params),
        "ngates": ctx.gate_count,
        "gate_resolution_m": ctx.gate_resolution,
        "range_max_m": range_max_m,
        "nrays": sweep.nrays,
        "azimuth_range": azimuth_range,
        "nyquist_velocity": ctx.nyquist_velocity,
        "site": {"lat": ctx.latitude, "lon": ctx.longitude, "alt_m": ctx.altitude},
        "start_time": ctx.start_time.isoformat() if ctx.start_time else None,
        "stats": {
            name: _moment_stats(sweep.moment_array(name, ctx.gate_count))
            for name in radar_file.params
        },
    }


def extract_furuno_metadata(path: str, name: Optional[str] = None) -> Dict[str, Any]:
    """
    Decodifica un archivo Furuno y devuelve su metadata básica, o un dict
    {"error": ...} si el archivo no existe o no se puede decodificar.
    """
    p = Path(path)
    if not p.exists():
        return {"error": f"file_not_found: {path}"}

    try:
        radar_file = load_furuno(p, name)
    except Exception as e:
        logger.warning("No se pudo decodificar %s: %s", p.name, e)
        return {"error": f"furuno_decode_failed: {e.__class__.__name__}: {e}"}

    return summarize_radar_file(radar_file)
