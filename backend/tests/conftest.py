import os
import tempfile
from pathlib import Path

import pytest

# Antes de importar la app: no crear storage/ dentro del repo
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="furuno_uploads_"))

from samples import pack_header, pack_ray  # noqa: E402


@pytest.fixture
def minimal_file_bytes() -> bytes:
    """Archivo mínimo: 2 gates, solo REF, un rayo a elevación 90.00."""
    return pack_header() + pack_ray(9000, [[32768, 32868]])


@pytest.fixture
def rhix_file(tmp_path: Path, minimal_file_bytes: bytes) -> Path:
    path = tmp_path / "0000_20220701_123015.rhix"
    path.write_bytes(minimal_file_bytes)
    return path
