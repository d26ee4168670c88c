import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from ..models import DecodeRequest, DecodeResponse
from ..services.orchestrators import DecodeOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/decode", tags=["decode"])


@router.post("", response_model=DecodeResponse)
async def decode_file(payload: DecodeRequest):
    """
    Endpoint para decodificar un archivo Furuno previamente subido.
    Devuelve el contexto de escaneo, la tabla de parámetros y los rayos.
    """
    try:
        # Decodificación bloqueante: se ejecuta en threadpool
        return await run_in_threadpool(
            DecodeOrchestrator.process_decode_request,
            payload
        )
    except FileNotFoundError as e:
        # Archivos no encontrados se convierten en 404 Not Found
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except ValueError as e:
        # Archivo corrupto o request inválido: 400 Bad Request
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        # 500 Internal Server Error para cualquier otro error
        logger.exception("Error decodificando archivo %s", payload.filepath)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error decodificando archivo: {e}"
        )
