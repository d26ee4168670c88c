"""
Servicio para decodificar lotes de archivos Furuno (.rhix / .gz).

Expande un patrón glob, decodifica cada archivo de forma independiente y
opcionalmente lo convierte a un Radar PyART. Un archivo que falla se
registra en log y se omite; el resto del lote continúa.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

from furuno_app.services.furuno import (
    RadarFile,
    radar_file_to_pyart,
    read_furuno_file,
)

logger = logging.getLogger(__name__)


def expand_furuno_paths(pattern: str) -> List[Path]:
    """
    Expande un patrón glob (p.ej. 'data/*.rhix' o 'data/*') a paths ordenados.

    Solo se conservan archivos regulares.
    """
    paths = [Path(p) for p in sorted(glob.glob(pattern))]
    return [p for p in paths if p.is_file()]


def decode_furuno_glob(
    pattern: str,
    name: Optional[str] = None,
) -> List[Tuple[Path, RadarFile]]:
    """
    Decodifica todos los archivos que coinciden con *pattern*.

    Returns:
        Lista de (path, RadarFile) para cada archivo decodificado con éxito.
        Los archivos que fallan se registran en log y se omiten.
    """
    paths = expand_furuno_paths(pattern)
    if not paths:
        logger.warning("No se encontraron archivos para el patrón %s", pattern)
        return []

    logger.info("Decodificando %d archivos Furuno (%s)", len(paths), pattern)
    results: List[Tuple[Path, RadarFile]] = []
    for path in paths:
        try:
            results.append((path, read_furuno_file(path, name=name)))
        except Exception:
            logger.exception("Error decodificando Furuno %s", path.name)

    logger.info("✓ %d/%d archivos decodificados", len(results), len(paths))
    return results


def furuno_glob_to_pyart(
    pattern: str,
    name: Optional[str] = None,
) -> List[Tuple[Path, Any]]:
    """Decodifica los archivos del patrón y los convierte a Radar PyART."""
    radars: List[Tuple[Path, Any]] = []
    for path, radar_file in decode_furuno_glob(pattern, name=name):
        try:
            radars.append((path, radar_file_to_pyart(radar_file)))
        except Exception:
            logger.exception("Error creando Radar PyART para %s", path.name)
    return radars
