import logging
from pathlib import Path
from fastapi import FastAPI

from .core.config import settings
from .routers import decode, upload

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=settings.APP_NAME)

# Los archivos subidos quedan en UPLOAD_DIR[/session_id]
upload_dir = Path(settings.UPLOAD_DIR); upload_dir.mkdir(parents=True, exist_ok=True)

app.include_router(upload.router)
app.include_router(decode.router)

@app.get("/health")
def health():
    return {"status": "ok"}
