# mesalink/services/qrcode_service.py
import io
from urllib.parse import urlencode
import uuid

import qrcode

from mesalink.core.config import settings


def build_table_url(
    restaurant_id: uuid.UUID, table_number: int, session_token: str, base_url: str = settings.PUBLIC_MENU_BASE_URL
) -> str:
    """URL do cardápio que o comensal abre ao escanear o QR da mesa."""
    query = urlencode({"token": session_token})
    return f"{base_url.rstrip('/')}/menu/{restaurant_id}/{table_number}?{query}"


def render_png(data: str) -> bytes:
    img = qrcode.make(data)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
