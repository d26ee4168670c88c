"""
Orchestrator para la decodificación de archivos Furuno subidos.
Separa la lógica de negocio del router decode.py.
"""
from pathlib import Path
from typing import List, Optional

from werkzeug.utils import secure_filename

from ...core.config import settings
from ...models import (
    DecodeRequest,
    DecodeResponse,
    ParamDescriptionModel,
    RayModel,
    ScanContextModel,
)
from ..furuno import RadarFile
from ..metadata import load_furuno


class DecodeOrchestrator:
    """
    Coordina la lectura de un archivo Furuno subido y su conversión a la
    respuesta HTTP (contexto, parámetros y rayos).
    """

    @staticmethod
    def validate_request(payload: DecodeRequest) -> None:
        """
        Valida los parámetros de la solicitud.
        Raises: ValueError si hay problemas críticos
        """
        if getattr(payload, "filepath", None) in (None, "", "undefined"):
            raise ValueError("El campo 'filepath' es obligatorio.")

        ext = Path(payload.filepath).suffix.lower()
        if ext not in {e.lower() for e in settings.ALLOWED_EXTENSIONS}:
            raise ValueError(f"Extensión no soportada: {ext}")

    @staticmethod
    def get_filepath(payload: DecodeRequest) -> Path:
        """
        Construye el path completo del archivo desde el request.

        Returns:
            Path absoluto al archivo de radar
        """
        UPLOAD_DIR = Path(settings.UPLOAD_DIR)
        if payload.session_id:
            # Mismo nombre de carpeta que usa /upload
            UPLOAD_DIR = UPLOAD_DIR / secure_filename(payload.session_id)
        return UPLOAD_DIR / Path(payload.filepath).name

    @staticmethod
    def select_moments(radar_file: RadarFile, requested: Optional[List[str]]) -> tuple[list[str], list[str]]:
        """
        Devuelve (momentos_a_devolver, warnings). Los momentos pedidos que no
        están en el archivo generan un warning en lugar de un error.
        """
        available = list(radar_file.params)
        if not requested:
            return available, []

        selected: list[str] = []
        warnings: list[str] = []
        for m in requested:
            key = m.upper()
            if key in radar_file.params:
                if key not in selected:
                    selected.append(key)
            else:
                warnings.append(f"Momento '{m}' no presente en el archivo ({available})")
        return selected, warnings

    @staticmethod
    def build_response(
        radar_file: RadarFile,
        moments: List[str],
        include_data: bool,
        warnings: List[str],
    ) -> DecodeResponse:
        ctx = radar_file.context
        sweep = radar_file.sweep

        rays = [
            RayModel(
                azimuth=ray.azimuth,
                time=ray.time,
                data={m: ray.data[m].tolist() for m in moments} if include_data else {},
            )
            for ray in sweep.rays
        ]

        return DecodeResponse(
            name=radar_file.name,
            context=ScanContextModel(
                start_time=ctx.start_time,
                end_time=ctx.end_time,
                latitude=ctx.latitude,
                longitude=ctx.longitude,
                altitude=ctx.altitude,
                nyquist_velocity=ctx.nyquist_velocity,
                rotation_speed=ctx.rotation_speed,
                gate_count=ctx.gate_count,
                gate_resolution=ctx.gate_resolution,
                moment_mask=ctx.moment_mask,
            ),
            params={
                m: ParamDescriptionModel(**vars(radar_file.params[m]))
                for m in moments
            },
            elevation=sweep.elevation,
            nrays=sweep.nrays,
            rays=rays,
            warnings=warnings,
        )

    @staticmethod
    def process_decode_request(payload: DecodeRequest) -> DecodeResponse:
        """
        Flujo completo: validar, localizar el archivo, decodificar (con cache)
        y armar la respuesta.
        Raises: ValueError (request inválido o archivo corrupto),
                FileNotFoundError (archivo no subido)
        """
        DecodeOrchestrator.validate_request(payload)

        filepath = DecodeOrchestrator.get_filepath(payload)
        if not filepath.exists():
            raise FileNotFoundError(f"Archivo no encontrado: {payload.filepath}")

        radar_file = load_furuno(filepath)
        moments, warnings = DecodeOrchestrator.select_moments(radar_file, payload.moments)
        return DecodeOrchestrator.build_response(
            radar_file, moments, payload.include_data, warnings
        )
