from __future__ import annotations

import hashlib


# ------------------------------
# Hashes utilitarios
# ------------------------------

def md5_file(path, chunk=1024*1024):
    """
    Devuelve el hash MD5 (hexadecimal) de un archivo.
    """
    h = hashlib.md5()
    with open(path, "rb") as f:
        for b in iter(lambda: f.read(chunk), b""):
            h.update(b)
    return h.hexdigest()


def decode_cache_key(path, name=None) -> str:
    """Clave de cache para un archivo decodificado (contenido + nombre)."""
    return f"{md5_file(path)}:{name or ''}"
