"""
Modelo de datos del decodificador Furuno: contexto de escaneo, rayos,
barrido y descripción de parámetros.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .structures import (
    RAY_SIZE_FIELD_BYTES,
    SAMPLE_BYTES,
    moments_in_mask,
)


@dataclass(frozen=True)
class ScanContext:
    """
    Parámetros de escaneo extraídos de la cabecera. Fijos para todo el archivo.

    :param start_time: Inicio nominal del escaneo (UTC), usado en cada rayo;
        None si la fecha de la cabecera es inválida
    :param latitude: Latitud del sitio [grados]
    :param longitude: Longitud del sitio [grados]
    :param nyquist_velocity: Velocidad de Nyquist [m/s]
    :param gate_count: Número de gates por rayo y por momento
    :param gate_resolution: Distancia entre gates [m]
    :param moment_mask: Valor crudo de record_item
    """

    start_time: Optional[datetime]
    latitude: float
    longitude: float
    nyquist_velocity: float
    gate_count: int
    gate_resolution: int
    moment_mask: int
    end_time: Optional[datetime] = None
    altitude: float = 0.0
    rotation_speed: float = 0.0
    ray_count: int = 0
    version: int = 0
    header: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def moments(self) -> List[Tuple[int, Optional[str]]]:
        return moments_in_mask(self.moment_mask)

    @property
    def named_moments(self) -> List[str]:
        return [name for _, name in self.moments if name is not None]

    @property
    def moment_count(self) -> int:
        return len(self.moments)

    @property
    def ray_block_size(self) -> int:
        """Tamaño esperado del bloque de datos de cada rayo, en bytes."""
        return RAY_SIZE_FIELD_BYTES + SAMPLE_BYTES * self.gate_count * self.moment_count


@dataclass
class Ray:
    azimuth: float
    time: datetime
    data: Dict[str, np.ndarray] = field(default_factory=dict)


@dataclass
class Sweep:
    latitude: float
    longitude: float
    nyquist_velocity: float
    altitude: float = 0.0
    elevation: float = 0.0
    rays: List[Ray] = field(default_factory=list)

    @property
    def nrays(self) -> int:
        return len(self.rays)

    def azimuths(self) -> np.ndarray:
        return np.array([ray.azimuth for ray in self.rays], dtype=np.float64)

    def moment_array(self, name: str, gate_count: int) -> np.ndarray:
        """Apila un momento de todos los rayos en un array (nrays, ngates)."""
        if not self.rays:
            return np.empty((0, gate_count), dtype=np.float64)
        return np.vstack([ray.data[name] for ray in self.rays])


@dataclass
class ParamDescription:
    description: str = ""
    units: str = ""
    meters_to_first_cell: float = 0.0
    meters_between_cells: float = 0.0


@dataclass
class RadarFile:
    """Resultado de decodificar un archivo: un barrido y su tabla de parámetros."""

    name: str
    context: ScanContext
    sweeps: List[Sweep] = field(default_factory=list)
    params: Dict[str, ParamDescription] = field(default_factory=dict)

    @property
    def sweep(self) -> Sweep:
        return self.sweeps[0]
