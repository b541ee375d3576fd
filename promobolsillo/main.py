from typing import List

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, Response
from twilio.request_validator import RequestValidator
from twilio.twiml.messaging_response import MessagingResponse

from promobolsillo import redis_utils
from promobolsillo.bot import Bot
from promobolsillo.config import (
    GOOGLE_SERVICE_ACCOUNT_JSON,
    PORT,
    SESSION_TTL_HOURS,
    SHEET_ID,
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_VALIDATE_SIGNATURE,
    TWILIO_WHATSAPP_FROM,
)
from promobolsillo.logger_utils import logger
from promobolsillo.messages import InboundMessage, ReplyMessage
from promobolsillo.redis_utils import forget_message, phone_lock, seen_message
from promobolsillo.services.notifier import build_twilio_client
from promobolsillo.sheets_utils import SheetsClient
from promobolsillo.templates import TEMPLATES

LIVENESS_TEXT = "Promobolsillo+ demo está vivo ✅ (asistencia + evidencias + supervisor)"


def build_bot() -> Bot:
    sheets = SheetsClient(SHEET_ID, GOOGLE_SERVICE_ACCOUNT_JSON)
    twilio_client = build_twilio_client(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)
    return Bot(sheets, twilio_client, TWILIO_WHATSAPP_FROM, SESSION_TTL_HOURS)


def twiml_response(replies: List[ReplyMessage]) -> Response:
    """Un <Message> por respuesta, con <Media> cuando trae foto."""
    twiml = MessagingResponse()
    for r in replies:
        message = twiml.message(r.text)
        if r.media_url:
            message.media(r.media_url)
    return Response(content=str(twiml), media_type="application/xml")


def create_app(
    bot: Bot = None,
    redis_conn=None,
    validate_signature: bool = TWILIO_VALIDATE_SIGNATURE,
    auth_token: str = TWILIO_AUTH_TOKEN,
) -> FastAPI:
    bot = bot or build_bot()
    validator = RequestValidator(auth_token) if validate_signature and auth_token else None
    if validate_signature and not auth_token:
        logger.warning("⚠️ TWILIO_VALIDATE_SIGNATURE activo pero falta TWILIO_AUTH_TOKEN; no se valida la firma")

    app = FastAPI(
        title="Promobolsillo+",
        description="Bot de WhatsApp para promotores: asistencia, evidencias, operación en tienda y supervisión",
        version="0.1.0",
    )

    def process(msg: InboundMessage) -> List[ReplyMessage]:
        if seen_message(redis_conn, msg.message_sid):
            logger.info(f"MessageSid {msg.message_sid} repetido; se ignora")
            return []
        try:
            with phone_lock(redis_conn, msg.phone):
                return bot.handle(msg)
        except Exception:
            forget_message(redis_conn, msg.message_sid)
            raise

    @app.post("/whatsapp")
    async def whatsapp_endpoint(request: Request):
        form = await request.form()

        if validator is not None:
            signature = request.headers.get("X-Twilio-Signature", "")
            if not validator.validate(str(request.url), dict(form), signature):
                logger.warning("Firma de Twilio inválida; se rechaza el webhook")
                return PlainTextResponse("Invalid signature", status_code=403)

        msg = InboundMessage.from_form(form)
        if msg.media_url:
            logger.info("MediaUrl0 received: [URL_REDACTED]")

        try:
            replies = await run_in_threadpool(process, msg)
        except Exception:
            logger.exception(f"Error procesando mensaje de {msg.phone}")
            replies = [ReplyMessage(TEMPLATES["errors"]["generic_error"])]

        return twiml_response(replies)

    @app.get("/")
    async def liveness():
        return PlainTextResponse(LIVENESS_TEXT)

    return app


app = create_app(redis_conn=redis_utils.redis_conn)


if __name__ == "__main__":
    logger.info(f"🚀 Promobolsillo+ escuchando en puerto {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
