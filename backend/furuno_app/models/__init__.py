"""
Modelos de dominio de la aplicación.
Divididos por responsabilidad funcional.
"""
from .decode import (
    DecodeRequest,
    DecodeResponse,
    ParamDescriptionModel,
    RayModel,
    ScanContextModel,
)

__all__ = [
    # Decode
    'DecodeRequest',
    'DecodeResponse',
    'ParamDescriptionModel',
    'RayModel',
    'ScanContextModel',
]
