"""
Módulo de decodificación de archivos de radar Furuno (.rhix).

Flujo: bytes → cabecera (ScanContext) → tabla de parámetros → rayos →
RadarFile, con conversión opcional a PyART Radar:
  - decode_furuno: decodifica un buffer o archivo abierto
  - read_furuno_file: lee (y descomprime .gz) un archivo y lo decodifica
  - radar_file_to_pyart: convierte el RadarFile en un Radar de PyART
"""

from furuno_app.services.furuno.data_structures import (
    ParamDescription,
    RadarFile,
    Ray,
    ScanContext,
    Sweep,
)
from furuno_app.services.furuno.errors import (
    FormatError,
    FurunoDecodeError,
    TruncatedInputError,
    UnsupportedMomentError,
)
from furuno_app.services.furuno.furuno_decoder import (
    build_param_table,
    decode_furuno,
    decode_header,
    iter_rays,
    read_furuno_bytes,
    read_furuno_file,
    scale_moment,
)
from furuno_app.services.furuno.furuno_to_pyart import radar_file_to_pyart

__all__ = [
    "ParamDescription",
    "RadarFile",
    "Ray",
    "ScanContext",
    "Sweep",
    "FormatError",
    "FurunoDecodeError",
    "TruncatedInputError",
    "UnsupportedMomentError",
    "build_param_table",
    "decode_furuno",
    "decode_header",
    "iter_rays",
    "read_furuno_bytes",
    "read_furuno_file",
    "scale_moment",
    "radar_file_to_pyart",
]
