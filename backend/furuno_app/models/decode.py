"""
Modelos para la decodificación de archivos Furuno.
"""
from pydantic import BaseModel, Field, field_serializer
from typing import Dict, List, Optional
from datetime import datetime


class DecodeRequest(BaseModel):
    """Request para decodificar un archivo Furuno previamente subido."""
    filepath: str = Field(..., description="Nombre del archivo subido (.rhix o .gz)")
    moments: Optional[List[str]] = Field(
        default=None,
        description="Momentos a devolver, ej ['REF', 'VEL']. Default: todos"
    )
    include_data: bool = Field(
        default=True,
        description="Si es False solo se devuelven azimuts y metadatos"
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Identificador único de sesión para aislar archivos"
    )


class ParamDescriptionModel(BaseModel):
    """Descripción de un momento presente en el archivo."""
    description: str = ""
    units: str = ""
    meters_to_first_cell: float = 0.0
    meters_between_cells: float


class ScanContextModel(BaseModel):
    """Parámetros de escaneo leídos de la cabecera."""
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    latitude: float
    longitude: float
    altitude: float
    nyquist_velocity: float
    rotation_speed: float
    gate_count: int
    gate_resolution: int
    moment_mask: int

    @field_serializer("start_time", "end_time", when_used="json")
    def _check_ts(self, v: Optional[datetime]) -> Optional[str]:
        return v.isoformat() if v else None


class RayModel(BaseModel):
    """Un rayo decodificado."""
    azimuth: float
    time: datetime
    data: Dict[str, List[float]] = {}

    @field_serializer("time", when_used="json")
    def _check_ts(self, v: datetime) -> str:
        return v.isoformat()


class DecodeResponse(BaseModel):
    """Respuesta final de la decodificación: un barrido."""
    name: str
    context: ScanContextModel
    params: Dict[str, ParamDescriptionModel]
    elevation: float = 0.0
    nrays: int
    rays: List[RayModel]
    warnings: Optional[List[str]] = []
