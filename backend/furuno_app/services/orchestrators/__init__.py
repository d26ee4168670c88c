"""
Orchestrators para coordinar lógica de negocio compleja.
Separan concerns entre routers (HTTP) y servicios (procesamiento).
"""
from .decode_orchestrator import DecodeOrchestrator

__all__ = [
    'DecodeOrchestrator',
]
