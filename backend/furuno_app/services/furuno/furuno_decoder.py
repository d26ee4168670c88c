"""
Decodificador de archivos de radar Furuno (.rhix / .rhix.gz).

Un archivo contiene una cabecera fija de 156 bytes seguida de bloques por
rayo cuya disposición depende de la máscara de momentos (record_item).
Cada archivo produce exactamente un barrido.
"""

from __future__ import annotations

import gzip
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional, Union

import numpy as np

from furuno_app.core.constants import (
    DEFAULT_RADAR_NAME,
    MOMENT_DESCRIPTIONS,
    MOMENT_UNITS,
)
from .data_structures import ParamDescription, RadarFile, Ray, ScanContext, Sweep
from .errors import FormatError, UnsupportedMomentError
from .structures import (
    ANGLE_BLOCK,
    ANGLE_BLOCK_SIZE,
    HEADER,
    HEADER_SIZE,
    RAW_SAMPLE_FORMAT,
    ByteReader,
)

logger = logging.getLogger(__name__)

FurunoInput = Union[bytes, bytearray, memoryview, BinaryIO]


# ------------------------------
# Conversión a unidades físicas
# ------------------------------

def scale_moment(raw: Any, name: str) -> Any:
    """
    Convierte muestras crudas uint16 a valores físicos según el momento.

    Acepta un escalar o un array; un escalar devuelve float.
    Lanza UnsupportedMomentError si el momento no está en la tabla fija.
    """
    v = np.asarray(raw, dtype=np.float64)
    if name in ("R", "REF", "VEL", "ZDR", "KDP"):
        out = (v - 32768.0) / 100.0
    elif name == "PHI":
        out = 360.0 * (v - 32768.0) / 65535.0
    elif name == "RHO":
        out = 2.0 * (v - 1.0) / 65534.0
    elif name == "SW":
        out = (v - 1.0) / 100.0
    else:
        raise UnsupportedMomentError(f"Unknown moment type: {name!r}")
    if out.ndim == 0:
        return float(out)
    return out


# ------------------------------
# Cabecera
# ------------------------------

def _header_time(header: Dict[str, Any], prefix: str) -> datetime:
    try:
        return datetime(
            header[f"{prefix}_year"],
            header[f"{prefix}_month"],
            header[f"{prefix}_day"],
            header[f"{prefix}_hour"],
            header[f"{prefix}_minute"],
            header[f"{prefix}_second"],
            tzinfo=timezone.utc,
        )
    except ValueError as e:
        raise FormatError(f"Invalid {prefix} time in header: {e}") from e


def decode_header(reader: ByteReader) -> ScanContext:
    """
    Lee la cabecera fija y devuelve el ScanContext del archivo.

    El primer campo (tamaño de cabecera) debe valer HEADER_SIZE; otro valor
    indica una variante de formato no soportada.
    """
    start = reader.position
    header_size = reader.read_value("H")
    if header_size != HEADER_SIZE:
        raise FormatError(
            f"Header size is {header_size}, expected {HEADER_SIZE}; "
            "file may have a different format"
        )

    header: Dict[str, Any] = {"header_size": header_size}
    header.update(reader.read_structure(HEADER[1:]))
    assert reader.position - start == HEADER_SIZE, "header not fully consumed"

    # El inicio solo hace falta para los rayos: un archivo sin rayos no lo valida
    try:
        start_time: Optional[datetime] = _header_time(header, "start")
    except FormatError as e:
        logger.debug("Deferring start time check: %s", e)
        start_time = None

    try:
        end_time: Optional[datetime] = _header_time(header, "end")
    except FormatError as e:
        logger.warning("Ignoring end time: %s", e)
        end_time = None

    return ScanContext(
        start_time=start_time,
        latitude=header["latitude"] / 100000.0,
        longitude=header["longitude"] / 100000.0,
        nyquist_velocity=header["nyquist"] / 10.0,
        gate_count=header["gate_count"],
        gate_resolution=header["gate_resolution"],
        moment_mask=header["record_item"],
        end_time=end_time,
        altitude=header["altitude"] / 100.0,
        rotation_speed=header["rotation_speed"] / 10.0 / 60.0 * 360.0,
        ray_count=header["ray_count"],
        version=header["version"],
        header=header,
    )


def build_param_table(context: ScanContext) -> Dict[str, ParamDescription]:
    """Una ParamDescription por momento con nombre presente en la máscara."""
    return {
        name: ParamDescription(
            description=MOMENT_DESCRIPTIONS.get(name, ""),
            units=MOMENT_UNITS.get(name, ""),
            meters_to_first_cell=0.0,
            meters_between_cells=float(context.gate_resolution),
        )
        for name in context.named_moments
    }


# ------------------------------
# Rayos
# ------------------------------

def iter_rays(reader: ByteReader, context: ScanContext) -> Iterator[Ray]:
    """
    Decodifica bloques de rayo hasta agotar el buffer.

    El azimut emitido es ``90 - elevación``: en este modo de escaneo el campo
    de elevación lleva el ángulo azimutal y el campo de azimut no se usa.
    """
    expected_block = context.ray_block_size
    while not reader.at_end():
        offset = reader.position

        angle_block_size = reader.read_value("H")
        if angle_block_size != ANGLE_BLOCK_SIZE:
            raise FormatError(
                f"Angle information block size error at offset {offset}: "
                f"found {angle_block_size}, expected {ANGLE_BLOCK_SIZE}"
            )
        angles = reader.read_structure(ANGLE_BLOCK)
        elevation = angles["elevation"] / 100.0

        observed_block_size = reader.read_value("H")
        if observed_block_size != expected_block:
            raise FormatError(
                f"Observed block error at offset {offset}: block size "
                f"{observed_block_size}, expected {expected_block} "
                f"({context.gate_count} gates x {context.moment_count} moments)"
            )

        data: Dict[str, np.ndarray] = {}
        for _, name in context.moments:
            raw = reader.read_array(RAW_SAMPLE_FORMAT, context.gate_count)
            if name is None:
                continue
            data[name] = scale_moment(raw, name)

        if context.start_time is None:
            # Relanza el FormatError con el detalle de la fecha inválida
            _header_time(context.header, "start")
        yield Ray(azimuth=-elevation + 90.0, time=context.start_time, data=data)


def decode_furuno(data: FurunoInput, name: Optional[str] = None) -> RadarFile:
    """
    Decodifica el contenido completo de un archivo Furuno.

    Returns:
        RadarFile con un único barrido y la tabla de parámetros.
    Raises:
        TruncatedInputError, FormatError: el archivo está corrupto o no es
        de la variante soportada. Nunca se devuelve un barrido parcial.
    """
    if hasattr(data, "read"):
        data = data.read()
    reader = ByteReader(data)

    context = decode_header(reader)
    params = build_param_table(context)
    logger.debug(
        "Furuno header: %d gates x %d m, moments=%s, nyquist=%.1f m/s",
        context.gate_count,
        context.gate_resolution,
        context.named_moments,
        context.nyquist_velocity,
    )

    sweep = Sweep(
        latitude=context.latitude,
        longitude=context.longitude,
        nyquist_velocity=context.nyquist_velocity,
        altitude=context.altitude,
        elevation=0.0,
    )
    for ray in iter_rays(reader, context):
        sweep.rays.append(ray)

    return RadarFile(
        name=name or DEFAULT_RADAR_NAME,
        context=context,
        sweeps=[sweep],
        params=params,
    )


# ------------------------------
# Lectura de archivos
# ------------------------------

def read_furuno_bytes(path: str | Path) -> bytes:
    """
    Devuelve el contenido crudo de un archivo .rhix, descomprimiendo .gz.

    Los errores de descompresión se propagan tal cual al llamador.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".rhix", ".gz"):
        raise ValueError(f"Unknown file type: {path.name}")
    if not path.exists():
        raise FileNotFoundError(f"Furuno file not found: {path}")

    raw = path.read_bytes()
    if suffix == ".gz":
        return gzip.decompress(raw)
    return raw


def read_furuno_file(path: str | Path, name: Optional[str] = None) -> RadarFile:
    """Lee y decodifica un archivo Furuno desde disco."""
    path = Path(path)
    radar = decode_furuno(read_furuno_bytes(path), name=name)
    logger.info(
        "Decoded %s: %d rays, moments %s",
        path.name,
        radar.sweep.nrays,
        list(radar.params),
    )
    return radar
