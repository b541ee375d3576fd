"""Mensaje entrante, respuestas y utilidades para interpretar lo que escribe el usuario."""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from promobolsillo.sheets_utils import normalize_phone, to_number

# 1️⃣ = "1" + U+FE0F + U+20E3 (el selector de variante a veces no llega)
KEYCAP_RE = re.compile("([0-9])\ufe0f?\u20e3")


def normalize_token(text: str) -> str:
    """Recorta, pasa a minúsculas y convierte dígitos emoji (1️⃣) en dígitos."""
    return KEYCAP_RE.sub(r"\1", (text or "").strip()).casefold()


def parse_choice(token: str, count: int) -> Optional[int]:
    """Número de opción 1..count, o None si no es un número válido para la lista."""
    if not token or not token.isdecimal():
        return None
    n = int(token)
    return n if 1 <= n <= count else None


@dataclass
class InboundMessage:
    phone: str
    body: str = ""
    num_media: int = 0
    media_url: str = ""
    media_type: str = ""
    latitude: str = ""
    longitude: str = ""
    message_sid: str = ""

    @classmethod
    def from_form(cls, form) -> "InboundMessage":
        """Campos del webhook de Twilio; la ubicación puede llegar como Latitude o Latitude0."""
        def get(key):
            return (form.get(key) or "").strip()

        return cls(
            phone=normalize_phone(get("From")),
            body=get("Body"),
            num_media=int(to_number(get("NumMedia"))),
            media_url=get("MediaUrl0"),
            media_type=get("MediaContentType0"),
            latitude=get("Latitude") or get("Latitude0"),
            longitude=get("Longitude") or get("Longitude0"),
            message_sid=get("MessageSid"),
        )

    @property
    def text(self) -> str:
        return self.body.strip()

    @property
    def command(self) -> str:
        return normalize_token(self.body)

    @property
    def has_photo(self) -> bool:
        return self.num_media > 0 and bool(self.media_url)

    @property
    def has_location(self) -> bool:
        return bool(self.latitude and self.longitude)


@dataclass
class ReplyMessage:
    text: str
    media_url: Optional[str] = None


@dataclass
class Outcome:
    """
    Resultado de un handler. `state=None` deja la sesión como estaba (no se escribe);
    cualquier otro valor se guarda junto con `data` al terminar el mensaje.
    """

    replies: List[ReplyMessage] = field(default_factory=list)
    state: Optional[str] = None
    data: Any = None


def reply(text: str, state: Optional[str] = None, data: Any = None, media_url: Optional[str] = None) -> Outcome:
    return Outcome(replies=[ReplyMessage(text, media_url)], state=state, data=data)
