"""
Estructuras binarias del formato Furuno (.rhix) y primitivas de lectura.

Referencia del formato: manual Furuno WR2120, sección de datos de observación.
Todo el archivo es little-endian, sin alineación entre campos.

Las estructuras se describen como tuplas ``(nombre, formato_struct)``. Los
campos de relleno usan el código ``x`` y no producen valores.
"""

from __future__ import annotations

import struct
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .errors import TruncatedInputError

Structure = Sequence[Tuple[str, str]]

# Tamaño total de la cabecera soportada (incluye el propio campo de tamaño)
HEADER_SIZE = 156

# Bloque de ángulos al inicio de cada rayo: tamaño, azimut, elevación
ANGLE_BLOCK_SIZE = 6

# Bloque de datos de un rayo: tamaño (2 bytes) + gates * momentos * 2 bytes
RAY_SIZE_FIELD_BYTES = 2
SAMPLE_BYTES = 2

RAW_SAMPLE_FORMAT = "H"


def _timestamp(prefix: str) -> Structure:
    """Sexteto de fecha/hora seguido de un byte de relleno."""
    return (
        (f"{prefix}_year", "H"),
        (f"{prefix}_month", "B"),
        (f"{prefix}_day", "B"),
        (f"{prefix}_hour", "B"),
        (f"{prefix}_minute", "B"),
        (f"{prefix}_second", "B"),
        (f"{prefix}_padding", "x"),
    )


HEADER: Structure = (
    ("header_size", "H"),
    ("version", "H"),
    *_timestamp("start"),
    *_timestamp("end"),
    ("timezone", "h"),
    ("product_number", "H"),
    ("model_type", "H"),
    ("latitude", "i"),
    ("longitude", "i"),
    ("altitude", "i"),
    ("azimuth_offset", "H"),
    ("tx_frequency", "I"),
    ("polarization", "H"),
    ("gain_h", "H"),
    ("gain_v", "H"),
    ("half_width_h", "H"),
    ("half_width_v", "H"),
    ("tx_power_h", "H"),
    ("tx_power_v", "H"),
    ("radar_constant_h", "h"),
    ("radar_constant_v", "h"),
    ("noise_power_h_short", "h"),
    ("noise_power_h_long", "h"),
    ("threshold_power_short", "h"),
    ("threshold_power_long", "h"),
    ("tx_pulse_spec", "H"),
    ("prf_mode", "H"),
    ("prf1", "H"),
    ("prf2", "H"),
    ("prf3", "H"),
    ("nyquist", "H"),
    ("sample_number", "H"),
    ("tx_pulse_blind_length", "H"),
    ("short_pulse_width", "H"),
    ("short_pulse_modulation_bandwidth", "H"),
    ("long_pulse_width", "H"),
    ("long_pulse_modulation_bandwidth", "H"),
    ("pulse_switch_point", "H"),
    ("observation_mode", "H"),
    ("rotation_speed", "H"),
    ("ray_count", "H"),
    ("gate_count", "H"),
    ("gate_resolution", "H"),
    ("scan_number", "H"),
    ("total_scans", "H"),
    ("rain_intensity_estimation", "H"),
    ("zr_coefficient_b", "H"),
    ("zr_coefficient_beta", "H"),
    ("kdp_coefficient_a", "H"),
    ("kdp_coefficient_b", "H"),
    ("kdp_coefficient_c", "H"),
    ("zh_correction", "H"),
    ("zh_correction_b1", "H"),
    ("zh_correction_b2", "H"),
    ("zh_correction_d1", "H"),
    ("zh_correction_d2", "H"),
    ("air_attenuation", "H"),
    ("rain_threshold", "H"),
    ("record_item", "H"),
    ("signal_flag", "H"),
    *_timestamp("clutter_reference"),
    ("reserved", "8x"),
)

ANGLE_BLOCK: Structure = (
    ("azimuth", "H"),
    ("elevation", "H"),
)

# Orden fijo de bits de record_item -> momento. El bit 8 (calidad) no tiene
# nombre: se lee para mantener la alineación pero se descarta.
QUALITY_BIT = 8
MOMENT_TABLE: Tuple[Tuple[int, Optional[str]], ...] = (
    (0, "R"),
    (1, "REF"),
    (2, "VEL"),
    (3, "ZDR"),
    (4, "KDP"),
    (5, "PHI"),
    (6, "RHO"),
    (7, "SW"),
    (QUALITY_BIT, None),
)


def structure_format(structure: Structure) -> str:
    return "<" + "".join(fmt for _, fmt in structure)


def structure_size(structure: Structure) -> int:
    return struct.calcsize(structure_format(structure))


def _value_names(structure: Structure) -> list[str]:
    return [name for name, fmt in structure if not fmt.endswith("x")]


assert structure_size(HEADER) == HEADER_SIZE, "HEADER structure out of sync"
assert structure_size(ANGLE_BLOCK) + 2 == ANGLE_BLOCK_SIZE


def moments_in_mask(mask: int) -> list[Tuple[int, Optional[str]]]:
    """Entradas de MOMENT_TABLE presentes en la máscara, en orden de bits."""
    return [(bit, name) for bit, name in MOMENT_TABLE if mask >> bit & 1]


class ByteReader:
    """
    Cursor de lectura little-endian sobre un buffer en memoria.

    Cualquier lectura que exceda el final del buffer lanza
    TruncatedInputError sin avanzar el cursor.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._buffer = bytes(data)
        self.position = 0

    @property
    def size(self) -> int:
        return len(self._buffer)

    @property
    def remaining(self) -> int:
        return self.size - self.position

    def at_end(self) -> bool:
        return self.position >= self.size

    def _require(self, nbytes: int, what: str) -> None:
        if nbytes > self.remaining:
            raise TruncatedInputError(
                f"Unexpected end of input reading {what}: need {nbytes} bytes "
                f"at offset {self.position}, {self.remaining} available"
            )

    def read(self, fmt: str) -> Tuple[Any, ...]:
        """Lee y desempaqueta un formato struct (sin prefijo de endianness)."""
        full = "<" + fmt
        nbytes = struct.calcsize(full)
        self._require(nbytes, repr(fmt))
        values = struct.unpack_from(full, self._buffer, self.position)
        self.position += nbytes
        return values

    def read_value(self, fmt: str) -> Any:
        """Lee un único valor escalar de tipo ``fmt`` (p.ej. 'H', 'i')."""
        (value,) = self.read(fmt)
        return value

    def read_array(self, fmt: str, count: int) -> np.ndarray:
        """Lee ``count`` valores consecutivos de tipo ``fmt`` como array."""
        dtype = np.dtype("<" + fmt)
        nbytes = dtype.itemsize * count
        self._require(nbytes, f"{count} x {fmt!r}")
        arr = np.frombuffer(
            self._buffer, dtype=dtype, count=count, offset=self.position
        )
        self.position += nbytes
        return arr

    def read_structure(self, structure: Structure) -> Dict[str, Any]:
        """Lee una estructura completa y devuelve un dict nombre -> valor."""
        values = self.read(structure_format(structure)[1:])
        return dict(zip(_value_names(structure), values))
