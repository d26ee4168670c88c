"""
Conversión de un RadarFile Furuno decodificado a un objeto PyART Radar.

El Radar resultante tiene un único barrido PPI de elevación fija 0.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from furuno_app.core.constants import PYART_FIELD_NAMES
from .data_structures import RadarFile

logger = logging.getLogger(__name__)


def _create_empty_radar(n_gates: int, n_rays: int, n_sweeps: int):
    """Crea un objeto Radar PPI vacío usando make_empty_ppi_radar de pyart."""
    import pyart

    return pyart.testing.make_empty_ppi_radar(n_gates, n_rays, n_sweeps)


def _time_units(radar_file: RadarFile) -> str:
    start = radar_file.context.start_time
    return "seconds since " + start.strftime("%Y-%m-%dT%H:%M:%SZ")


def radar_file_to_pyart(radar_file: RadarFile) -> Any:
    """
    Convierte un RadarFile en un Radar PyART.

    Cada momento con nombre se agrega como campo (nrays, ngates) con sus
    unidades; el rango sale de gate_resolution sin offset al primer gate.
    """
    from pyart.config import get_metadata

    context = radar_file.context
    sweep = radar_file.sweep
    if sweep.nrays == 0:
        raise ValueError(f"Sweep of {radar_file.name} has no rays")

    n_gates = context.gate_count
    n_rays = sweep.nrays
    radar = _create_empty_radar(n_gates, n_rays, 1)

    # Eje de rango
    gate_size = float(context.gate_resolution)
    radar.range["data"] = (gate_size * np.arange(n_gates)).astype(np.float32)
    radar.range["meters_between_gates"] = gate_size
    radar.range["meters_to_center_of_first_gate"] = 0.0

    # Tiempo: el formato no guarda tiempo por rayo
    radar.time["data"] = np.zeros(n_rays, dtype=np.float64)
    radar.time["units"] = _time_units(radar_file)

    # Azimut / elevación / fixed_angle
    radar.azimuth["data"] = sweep.azimuths().astype(np.float32)
    radar.elevation["data"] = np.full(n_rays, sweep.elevation, dtype=np.float32)
    radar.fixed_angle["data"] = np.array([sweep.elevation], dtype=np.float32)

    # Coordenadas geográficas
    radar.latitude["data"] = np.array([sweep.latitude], dtype=np.float64)
    radar.longitude["data"] = np.array([sweep.longitude], dtype=np.float64)
    radar.altitude["data"] = np.array([sweep.altitude], dtype=np.float64)

    radar.metadata["instrument_name"] = radar_file.name
    radar.metadata["source"] = "Furuno rhix"

    nyquist = get_metadata("nyquist_velocity")
    nyquist["data"] = np.full(n_rays, sweep.nyquist_velocity, dtype=np.float32)
    radar.instrument_parameters = {"nyquist_velocity": nyquist}

    for name, param in radar_file.params.items():
        field = {
            "data": np.ma.masked_invalid(
                sweep.moment_array(name, n_gates).astype(np.float32)
            ),
            "units": param.units,
            "long_name": param.description or name,
            "_FillValue": -9999.0,
        }
        standard_name = PYART_FIELD_NAMES.get(name)
        if standard_name:
            field["standard_name"] = standard_name
        radar.add_field(name, field, replace_existing=True)

    logger.debug(
        "Built pyart radar for %s: %d rays x %d gates, fields %s",
        radar_file.name,
        n_rays,
        n_gates,
        list(radar.fields),
    )
    return radar
