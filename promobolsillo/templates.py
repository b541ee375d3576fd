# templates.py

"""
Textos del bot. Los mensajes fijos viven en TEMPLATES; los que dependen de datos
(listas numeradas, resúmenes) se arman con las funciones de abajo.
"""

from typing import List

from promobolsillo.time_utils import hhmm

TEMPLATES = {
    "menu": {
        "main": (
            "👋 Hola, soy *Promobolsillo+*.\n\n"
            "¿Qué quieres hacer?\n"
            "1️⃣ Mi día de trabajo (asistencia: entrada/salida – foto + geo)\n"
            "2️⃣ Operación en tienda (inventario, ventas, competencia) 🏬\n"
            "3️⃣ Evidencias de marca 📸\n"
            "4️⃣ Academia de bolsillo 🎓\n"
            "5️⃣ Ver mis evidencias de hoy 📸\n"
            "6️⃣ Ver historial de mis asistencias 🕒\n\n"
            "También puedes enviar una *foto* en este menú para una auditoría directa.\n"
            "Puedes escribir *menu* en cualquier momento."
        ),
        "session_reset": "Reinicié tu sesión 🔄.\n\n",
        "points": (
            "📊 *Tus puntos actuales*\n"
            "🟦 Operación: {operacion}\n"
            "🟨 Capacitación: {capacitacion}\n"
            "🎯 Total: {total}\n\n"
            "Escribe *menu* para volver al inicio."
        ),
        "not_supervisor": (
            "⚠️ Tu número no está dado de alta como supervisor en la hoja SUPERVISORES.\n"
            "Verifica con administración."
        ),
    },
    "dia": {
        "no_shift": (
            "🕒 *Mi día de trabajo*\n"
            "No tengo registrada tu jornada de hoy.\n\n"
            "1️⃣ Registrar entrada al día (foto + ubicación)\n"
            "2️⃣ Volver al menú"
        ),
        "open_shift": (
            "🕒 *Mi día de trabajo*\n"
            "Tienes una jornada abierta hoy.\n\n"
            "1️⃣ Salida a comer (foto + ubicación)\n"
            "2️⃣ Regreso de comida (foto + ubicación)\n"
            "3️⃣ Salida del día (foto + ubicación)\n"
            "4️⃣ Ver detalles de mi jornada de hoy\n"
            "5️⃣ Volver al menú"
        ),
        "ask_photo": {
            "ENTRADA_DIA": "🕒 *Inicio de jornada*\n📸 Envía una *foto de entrada* (selfie en tienda / punto de venta).",
            "SALIDA_COMIDA": "🍽️ *Salida a comer*\n📸 Envía una *foto* antes de salir a comer.",
            "REGRESO_COMIDA": "🍽️ *Regreso de comida*\n📸 Envía una *foto* al regresar a piso / tienda.",
            "SALIDA_DIA": "🚪 *Salida del día*\n📸 Envía una *foto de salida* (frente de tienda / salida).",
        },
        "photo_missing": (
            "Necesito que me envíes una *foto* para este registro.\n"
            "Adjunta una foto y vuelve a enviar el mensaje."
        ),
        "ask_location": (
            "✅ Foto recibida.\n\n"
            "📍 Ahora comparte tu *ubicación* desde WhatsApp (mensaje de ubicación) "
            "o escribe una breve descripción del lugar."
        ),
        "location_missing": (
            "📍 No recibí tu ubicación.\n"
            "Comparte tu *ubicación* desde WhatsApp o escribe una breve descripción del lugar."
        ),
        "done": {
            "ENTRADA_DIA": (
                "✅ Entrada del día registrada (foto + ubicación).\n"
                "🎯 Ganaste *{points} puntos* por registrar tu entrada completa.\n\n"
                "Escribe *menu* para seguir con tu día."
            ),
            "SALIDA_COMIDA": (
                "✅ Salida a comer registrada (foto + ubicación).\n"
                "🎯 Ganaste *{points} puntos*.\n\n"
                "Escribe *menu* para seguir con tu día."
            ),
            "REGRESO_COMIDA": (
                "✅ Regreso de comida registrado (foto + ubicación).\n"
                "🎯 Ganaste *{points} puntos*.\n\n"
                "Escribe *menu* para seguir con tu día."
            ),
            "SALIDA_DIA": (
                "✅ Jornada cerrada correctamente (foto + ubicación).\n"
                "🎯 Ganaste *{points} puntos* por registrar tu salida.\n\n"
                "Escribe *menu* para volver al inicio."
            ),
        },
        "done_no_points": "✅ Registro guardado. Ya habías recibido los puntos de este evento.\n\nEscribe *menu* para continuar.",
        "already_closed": "ℹ️ Esta jornada ya estaba cerrada; no se registró de nuevo.\n\nEscribe *menu* para volver al inicio.",
    },
    "evidencias": {
        "none_today": (
            "📷 Hoy no tengo evidencias registradas con tu número.\n\n"
            "Cuando captures fotos de asistencia o piso, aparecerán aquí."
        ),
        "no_brands": (
            "⚠️ No hay marcas activas en la hoja MARCAS.\n"
            "Pide a administración que dé de alta al menos una marca."
        ),
        "pick_type": (
            "📸 *Evidencia de {brand}*\n\n"
            "¿Qué tipo de evidencia vas a capturar?\n"
            "1️⃣ Anaquel\n"
            "2️⃣ Exhibición adicional\n"
            "3️⃣ Precio\n"
            "4️⃣ Material POP\n"
            "5️⃣ Producto agotado\n\n"
            "O escribe *menu* para cancelar."
        ),
        "product_not_found": "⚠️ No encontré el producto *{code}* para esta marca.\n\n",
        "ask_photo": "📸 Envía la *foto* de la evidencia ({label}).",
        "photo_missing": (
            "Necesito que me envíes una *foto* para esta evidencia.\n"
            "Adjunta una foto y vuelve a enviar el mensaje."
        ),
        "ask_description": (
            "✅ Foto recibida.\n\n"
            "📝 Escribe un comentario breve (por ejemplo: \"faltan frentes en anaquel\") "
            "o *no* para omitirlo."
        ),
        "audit_photo_missing": (
            "Necesito que me envíes una *foto* para la auditoría.\n"
            "Adjunta una imagen y vuelve a enviar el mensaje."
        ),
        "audit_ask_photo": "📸 Envía la *foto* de la exhibición para la auditoría.",
        "result": (
            "🔎 *Resultado EVIDENCIA+ (demo)*\n"
            "✔️ Análisis: {analysis}\n"
            "📊 Confianza: {confidence}%\n"
            "⚠️ Riesgo: {risk}\n\n"
            "{points_line}"
            "Escribe *menu* para seguir usando el bot."
        ),
        "points_line": "🎯 Ganaste *{points} puntos* por enviar esta evidencia.\n\n",
    },
    "operacion": {
        "menu": (
            "🏬 *Operación en tienda*\n\n"
            "1️⃣ Iniciar visita a tienda\n"
            "2️⃣ Volver al menú"
        ),
        "menu_open_visit": (
            "🏬 *Operación en tienda*\n"
            "Tienes una visita abierta en *{store}*.\n\n"
            "1️⃣ Continuar visita\n"
            "2️⃣ Volver al menú"
        ),
        "no_stores": (
            "⚠️ No hay tiendas activas en la hoja TIENDAS.\n"
            "Pide a administración que dé de alta tus tiendas."
        ),
        "visit_menu": (
            "🏬 *Visita en {store}*\n\n"
            "1️⃣ Inventario de productos\n"
            "2️⃣ Registrar ventas\n"
            "3️⃣ Actividad de competencia\n"
            "4️⃣ Foto de exhibición 📸\n"
            "5️⃣ Cerrar visita\n"
            "6️⃣ Volver al menú"
        ),
        "no_products": (
            "⚠️ No hay productos en la hoja PRODUCTOS.\n"
            "Pide a administración que dé de alta el catálogo."
        ),
        "ask_quantity": {
            "INVENTARIO": "📦 ¿Cuántas piezas de *{product}* hay en anaquel? (número entero)",
            "VENTA": "💵 ¿Cuántas piezas de *{product}* se vendieron? (número entero)",
        },
        "bad_quantity": "⚠️ Escribe una cantidad válida (número entero, 0 o mayor).",
        "quantity_saved": "✅ Registrado: *{product}* – {quantity} pieza(s).\n\n",
        "loop_done": "✅ Captura terminada.\n\n",
        "no_competitors": (
            "⚠️ No hay actividades en la hoja ACTIVIDADES_COMPETENCIA.\n"
            "Pide a administración que dé de alta el catálogo de competencia."
        ),
        "competition_saved": (
            "✅ Actividad de competencia registrada: *{competitor}* – {activity}.\n"
            "🎯 Ganaste *{points} puntos*.\n\n"
        ),
        "competition_saved_no_points": (
            "✅ Actividad de competencia registrada: *{competitor}* – {activity}.\n\n"
        ),
        "confirm_close": (
            "🚪 ¿Cerrar la visita en *{store}*?\n"
            "Escribe *s* para confirmar o *no* para seguir en la visita."
        ),
        "visit_closed": "✅ Visita cerrada en *{store}*.\n\n",
    },
    "academia": {
        "menu": (
            "🎓 *Academia de bolsillo*\n\n"
            "1️⃣ Responder un reto\n"
            "2️⃣ Ver mis puntos de capacitación\n"
            "3️⃣ Volver al menú"
        ),
        "no_challenges": "🎉 No tienes retos pendientes por ahora. ¡Vuelve pronto!\n\n",
        "challenge": (
            "🧠 *Reto {challenge_id}*\n"
            "{question}\n\n"
            "1️⃣ {option_1}\n"
            "2️⃣ {option_2}\n"
            "3️⃣ {option_3}\n\n"
            "Responde con el número de tu respuesta."
        ),
        "correct": "✅ ¡Correcto! Ganaste *{points} puntos* de capacitación.\n\n",
        "incorrect": (
            "❌ Respuesta incorrecta. La correcta era la opción *{correct}*.\n"
            "Puntos de capacitación: {points}.\n\n"
        ),
        "training_points": "🟨 Tus puntos de capacitación: *{capacitacion}*\n\n",
    },
    "supervisor": {
        "menu": (
            "👋 Hola, *{name}* (Supervisor).\n\n"
            "¿Qué quieres hacer hoy?\n"
            "1️⃣ Ver fotos de *hoy* por promotor\n"
            "2️⃣ Ver fotos de *hoy* con riesgo MEDIO/ALTO 🧠📸\n"
            "3️⃣ Ver asistencia de mi equipo 🕒\n"
            "4️⃣ Resumen de evidencias de marca de hoy 🏷️\n"
            "5️⃣ Ver menú estándar de promotor (demo)\n\n"
            "Escribe el número de la opción o *menu* en cualquier momento."
        ),
        "no_longer": "⚠️ Tu número ya no aparece como supervisor. Escribe *menu* para usar el bot como promotor.",
        "no_team": (
            "⚠️ No hay promotores asociados a tu número en la hoja PROMOTORES.\n"
            "Pide que te asignen promotores con la columna *telefono_supervisor*."
        ),
        "no_risky": (
            "🧠📸 Hoy no hay fotos con riesgo MEDIO/ALTO para tu equipo.\n"
            "Escribe *menu* para otras opciones."
        ),
        "no_photos_promoter": (
            "⚠️ Hoy no hay fotos registradas para *{name}*.\n"
            "Escribe *menu* para volver al menú de supervisor."
        ),
        "no_attendance": (
            "⚠️ No tengo asistencias registradas para *{name}*.\n"
            "Escribe *menu* para volver al menú de supervisor."
        ),
        "no_brand_evidence": (
            "🏷️ Hoy no hay evidencias de marca de tu equipo.\n"
            "Escribe *menu* para otras opciones."
        ),
        "photo_commands": (
            "\nEscribe por ejemplo:\n"
            "• `ver {n}`  → para ver la foto {n}\n"
            "• `enviar {n}` → para reenviarla al cliente\n"
            "• `enviar todas` → para reenviar todas las de la lista\n"
            "• `menu` → volver al menú de supervisor"
        ),
        "invalid_number": "⚠️ Número inválido. Usa por ejemplo `ver 1` o `enviar 1`, o escribe *menu* para volver.",
        "not_understood": (
            "⚠️ No entendí tu respuesta.\n"
            "Usa por ejemplo `ver 1`, `enviar 1` o escribe *menu* para volver."
        ),
        "no_groups": (
            "⚠️ No hay grupos de cliente activos en la hoja GRUPOS_CLIENTE.\n"
            "Da de alta al menos un grupo antes de usar esta opción."
        ),
        "send_failed": (
            "⚠️ No se pudo enviar la foto al cliente. Revisa que las variables de entorno de Twilio estén configuradas.\n"
            "Escribe *menu* para volver al menú de supervisor."
        ),
        "sent": (
            "✅ {photos} foto(s) enviada(s) al grupo *{group}* ({sent} envío(s) correcto(s)).\n"
            "{failed}\n"
            "Escribe *menu* para volver al menú de supervisor."
        ),
        "back_to_promoter": "Has vuelto al menú estándar. Escribe *menu* para ver las opciones como promotor.",
    },
    "errors": {
        "generic_error": "Ocurrió un error procesando tu mensaje. Intenta de nuevo más tarde 🙏",
    },
}

EVIDENCE_LINE = "{n}) {hora} – {label} – riesgo {risk}"
PHOTO_CAPTION = "#{n} – {hora} – {label} – riesgo {risk}"


def main_menu() -> str:
    return TEMPLATES["menu"]["main"]


def supervisor_menu(supervisor) -> str:
    name = supervisor.name if supervisor and supervisor.name else "Supervisor"
    return TEMPLATES["supervisor"]["menu"].format(name=name)


def points_summary(summary) -> str:
    return TEMPLATES["menu"]["points"].format(
        operacion=summary.operacion,
        capacitacion=summary.capacitacion,
        total=summary.total,
    )


def numbered(items: List[str]) -> str:
    return "".join(f"{i}) {item}\n" for i, item in enumerate(items, start=1))


def option_list(header: str, items: List[str], footer: str = "\nO escribe *menu* para volver.") -> str:
    return f"{header}\n\n{numbered(items)}{footer}"


def shift_detail(shift) -> str:
    entrada = hhmm(shift.check_in_time)
    salida = hhmm(shift.check_out_time, "Pendiente")
    msg = "📋 *Detalle de tu jornada de hoy*\n"
    msg += f"📅 Fecha: *{shift.date or '(sin fecha)'}*\n"
    if entrada:
        msg += f"🕒 Entrada: *{entrada}*\n"
    msg += f"🚪 Salida: *{salida}*\n"
    if shift.check_in_lat and shift.check_in_lon:
        msg += f"📍 Entrada: lat {shift.check_in_lat}, lon {shift.check_in_lon}\n"
    if shift.check_out_lat and shift.check_out_lon:
        msg += f"📍 Salida: lat {shift.check_out_lat}, lon {shift.check_out_lon}\n"
    msg += "\nEscribe *menu* para volver al inicio."
    return msg


def shift_lines(shifts) -> str:
    lines = ""
    for s in shifts:
        entrada = hhmm(s.check_in_time, "--:--")
        salida = hhmm(s.check_out_time, "—")
        lines += f"• {s.date or '(sin fecha)'} – Entrada {entrada} – Salida {salida}\n"
    return lines


def attendance_history(shifts) -> str:
    if not shifts:
        return (
            "📚 Aún no tengo asistencias históricas registradas para ti.\n\n"
            "Escribe *menu* para volver al inicio."
        )
    return (
        f"📚 *Historial de asistencias (últimas {len(shifts)} jornadas)*\n\n"
        + shift_lines(shifts)
        + "\nEscribe *menu* para volver al inicio."
    )


def promoter_attendance_history(name: str, shifts) -> str:
    return (
        f"🕒 *Historial de asistencia de {name}* (últimas {len(shifts)} jornadas)\n\n"
        + shift_lines(shifts)
        + "\nEscribe *menu* para volver al menú de supervisor."
    )


def evidence_line(n: int, evidence) -> str:
    return EVIDENCE_LINE.format(n=n, hora=hhmm(evidence.timestamp), label=evidence.label, risk=evidence.risk)


def evidence_caption(n: int, evidence) -> str:
    return PHOTO_CAPTION.format(n=n, hora=hhmm(evidence.timestamp), label=evidence.label, risk=evidence.risk)


def evidence_result(evidence, points: int) -> str:
    points_line = TEMPLATES["evidencias"]["points_line"].format(points=points) if points else ""
    return TEMPLATES["evidencias"]["result"].format(
        analysis=evidence.analysis,
        confidence=round(evidence.confidence * 100),
        risk=evidence.risk,
        points_line=points_line,
    )


def evidence_detail(n: int, evidence, promoter_name: str = "") -> str:
    msg = f"🧾 *Detalle de foto {n}*\n"
    if promoter_name:
        msg += f"👤 Promotor: {promoter_name}\n"
    if evidence.timestamp:
        msg += f"📅 Fecha: {evidence.timestamp}\n"
    msg += f"🎯 Tipo: {evidence.label}\n"
    if evidence.description:
        msg += f"📝 Comentario: {evidence.description}\n"
    msg += f"🧠 EVIDENCIA+ (demo): {evidence.analysis or 'Evidencia registrada.'}\n"
    msg += f"⚠️ Riesgo: {evidence.risk}\n\n"
    msg += "Puedes escribir:\n"
    msg += f"• `enviar {n}` → para reenviar esta foto al cliente\n"
    msg += "• `menu` → volver al menú de supervisor"
    return msg


def group_options(groups) -> List[str]:
    return [f"{g.name} – {g.client_name}" if g.client_name else g.name for g in groups]


def challenge_text(challenge) -> str:
    options = list(challenge.options) + ["", "", ""]
    return TEMPLATES["academia"]["challenge"].format(
        challenge_id=challenge.challenge_id,
        question=challenge.question,
        option_1=options[0],
        option_2=options[1],
        option_3=options[2],
    )
