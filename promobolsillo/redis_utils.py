from contextlib import contextmanager

import redis

from promobolsillo.config import REDIS_HOST, REDIS_PASSWORD, REDIS_PORT
from promobolsillo.logger_utils import logger

# Tiempo máximo que un mensaje puede retener el candado de su teléfono
LOCK_TIMEOUT_SECONDS = 30
# Twilio reintenta el webhook durante unos minutos; una hora cubre de sobra
SEEN_TTL_SECONDS = 3600


def build_redis_conn():
    if not REDIS_HOST:
        logger.warning(
            "⚠️ REDIS_HOST no configurado: sin candado por teléfono ni de-duplicación de webhooks"
        )
        return None
    return redis.Redis(
        host=REDIS_HOST,
        port=REDIS_PORT,
        password=REDIS_PASSWORD,
        db=0)


redis_conn = build_redis_conn()


@contextmanager
def phone_lock(conn, phone_no):
    """Serializa el procesamiento de mensajes de un mismo teléfono."""
    if conn is None:
        yield
        return
    lock = conn.lock(
        f"promobolsillo_lock_{phone_no}",
        timeout=LOCK_TIMEOUT_SECONDS,
        blocking_timeout=LOCK_TIMEOUT_SECONDS,
    )
    with lock:
        yield


def seen_message(conn, message_sid) -> bool:
    """True si el MessageSid ya se procesó (reintento de Twilio); si no, lo marca."""
    if conn is None or not message_sid:
        return False
    first_time = conn.set(f"promobolsillo_sid_{message_sid}", 1, nx=True, ex=SEEN_TTL_SECONDS)
    return not first_time


def forget_message(conn, message_sid) -> None:
    """Libera el MessageSid para que un reintento de Twilio vuelva a procesarse."""
    if conn is None or not message_sid:
        return
    conn.delete(f"promobolsillo_sid_{message_sid}")
