"""
config.py

Configuración central del bot. Carga variables de entorno (y un .env opcional)
y expone constantes tipadas para el resto de la aplicación.

Ninguna variable es obligatoria al arrancar: la falta de hoja de cálculo sólo
se advierte (falla al primer acceso), la falta de credenciales de Twilio
deshabilita el reenvío de fotos y la falta de Redis deshabilita el candado por
teléfono y la de-duplicación de webhooks.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).lower() in ("1", "true", "yes", "on")


def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    try:
        return int(v) if v is not None else default
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return str(v) if v is not None else default


# -------------------------
# App
# -------------------------
PORT = _get_int("PORT", 10000)
LOG_LEVEL = _get_str("LOG_LEVEL", "INFO").upper()
TIMEZONE = _get_str("TIMEZONE", "America/Mexico_City")
SESSION_TTL_HOURS = _get_int("SESSION_TTL_HOURS", 24)

# -------------------------
# Google Sheets
# -------------------------
SHEET_ID = _get_str("SHEET_ID", "")
GOOGLE_SERVICE_ACCOUNT_JSON = _get_str("GOOGLE_SERVICE_ACCOUNT_JSON", "")

# -------------------------
# Twilio
# -------------------------
TWILIO_ACCOUNT_SID = _get_str("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = _get_str("TWILIO_AUTH_TOKEN", "")
TWILIO_WHATSAPP_FROM = _get_str("TWILIO_WHATSAPP_FROM", "")
TWILIO_VALIDATE_SIGNATURE = _get_bool("TWILIO_VALIDATE_SIGNATURE", False)

# -------------------------
# Redis
# -------------------------
REDIS_HOST = _get_str("REDIS_HOST", "")
REDIS_PORT = _get_int("REDIS_PORT", 6379)
REDIS_PASSWORD = _get_str("REDIS_PASSWORD", "") or None


__all__ = [
    "PORT",
    "LOG_LEVEL",
    "TIMEZONE",
    "SESSION_TTL_HOURS",
    "SHEET_ID",
    "GOOGLE_SERVICE_ACCOUNT_JSON",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_WHATSAPP_FROM",
    "TWILIO_VALIDATE_SIGNATURE",
    "REDIS_HOST",
    "REDIS_PORT",
    "REDIS_PASSWORD",
]
