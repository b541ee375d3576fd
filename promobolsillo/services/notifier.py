"""
Reenvío de fotos de evidencia a los teléfonos de un grupo de cliente vía Twilio.

Un intento por destino; si un número falla se registra y se sigue con el resto.
"""

from typing import List, Optional

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from promobolsillo.logger_utils import logger
from promobolsillo.models import ClientGroup, Evidence, SendResult


def whatsapp_address(phone: str) -> str:
    phone = (phone or "").strip()
    return phone if phone.lower().startswith("whatsapp:") else f"whatsapp:{phone}"


def build_twilio_client(account_sid: str, auth_token: str) -> Optional[Client]:
    if not account_sid or not auth_token:
        logger.warning(
            "⚠️ No se encontraron TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN. "
            "El reenvío de fotos al cliente desde modo supervisor estará deshabilitado."
        )
        return None
    return Client(account_sid, auth_token)


class EvidenceNotifier:
    def __init__(self, twilio_client, from_number: str, catalog, attendance):
        self.client = twilio_client
        self.from_number = from_number
        self.catalog = catalog
        self.attendance = attendance

    @property
    def enabled(self) -> bool:
        return self.client is not None and bool(self.from_number)

    def _promoter_name(self, evidence: Evidence) -> str:
        promoter = self.catalog.get_promoter(evidence.phone)
        return promoter.name if promoter and promoter.name else evidence.phone

    def _store_label(self, evidence: Evidence) -> str:
        visit = self.attendance.get_visit(evidence.visit_id)
        if not visit:
            return ""
        store = self.catalog.get_store(visit.store_id)
        return store.label if store else ""

    def build_caption(self, evidence: Evidence, group: ClientGroup) -> str:
        store = self._store_label(evidence)
        caption = "🏪 *Evidencia en punto de venta*\n"
        if group.client_name:
            caption += f"👤 Cliente: {group.client_name}\n"
        if store:
            caption += f"🏬 Tienda: {store}\n"
        caption += f"🧑‍💼 Promotor: {self._promoter_name(evidence)}\n"
        if evidence.timestamp:
            caption += f"📅 Fecha: {evidence.timestamp}\n"
        caption += f"🎯 Tipo: {evidence.label}\n"
        caption += f"🧠 EVIDENCIA+ (demo) – Riesgo: {evidence.risk}\n"
        return caption

    def forward(self, evidence: Evidence, group: ClientGroup) -> List[SendResult]:
        if not self.enabled:
            logger.warning("⚠️ No hay cliente de Twilio o TWILIO_WHATSAPP_FROM. No se puede reenviar la foto.")
            return []

        caption = self.build_caption(evidence, group)
        results = []
        for destination in group.phones:
            try:
                kwargs = {
                    "from_": whatsapp_address(self.from_number),
                    "to": whatsapp_address(destination),
                    "body": caption,
                }
                if evidence.photo_url:
                    kwargs["media_url"] = [evidence.photo_url]
                message = self.client.messages.create(**kwargs)
                logger.info(f"Evidencia {evidence.evidence_id} enviada a {destination} (sid {getattr(message, 'sid', '')})")
                results.append(SendResult(destination=destination, ok=True))
            except TwilioException as e:
                logger.error(f"Error enviando evidencia {evidence.evidence_id} a {destination}: {e}")
                results.append(SendResult(destination=destination, ok=False, error=str(e)))
        return results
