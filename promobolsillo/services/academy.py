from typing import List, Optional

from promobolsillo.logger_utils import logger
from promobolsillo.models import (
    POINTS_TRAINING,
    SHEET_CHALLENGE_RESPONSES,
    Challenge,
    ChallengeResult,
)
from promobolsillo.sheets_utils import cell, same_phone, sheet_range
from promobolsillo.time_utils import now_iso

# RESPUESTAS_RETOS: fecha_hora, telefono, reto_id, opcion_elegida, es_correcta, puntos
RESPONSES_WIDTH = 6


class Academy:
    """Retos tipo trivia (3 opciones) con puntos de capacitación."""

    def __init__(self, sheets, catalog, points):
        self.sheets = sheets
        self.catalog = catalog
        self.points = points

    def answered_ids(self, phone: str) -> List[str]:
        rows = self.sheets.get_values(sheet_range(SHEET_CHALLENGE_RESPONSES, 0, RESPONSES_WIDTH - 1))
        return [cell(r, 2) for r in rows if same_phone(cell(r, 1), phone)]

    def get_challenge(self, challenge_id: str) -> Optional[Challenge]:
        for c in self.catalog.get_active_challenges():
            if c.challenge_id == challenge_id:
                return c
        return None

    def next_challenge(self, phone: str) -> Optional[Challenge]:
        answered = set(self.answered_ids(phone))
        for c in self.catalog.get_active_challenges():
            if c.challenge_id not in answered:
                return c
        return None

    def answer(self, phone: str, challenge: Challenge, option: int) -> ChallengeResult:
        correct = option == challenge.correct_option
        points = challenge.points_correct if correct else challenge.points_incorrect
        self.sheets.append_values(
            sheet_range(SHEET_CHALLENGE_RESPONSES, 0, RESPONSES_WIDTH - 1),
            [[now_iso(), phone, challenge.challenge_id, option, "TRUE" if correct else "FALSE", points]],
        )
        self.points.add_points(phone, POINTS_TRAINING, f"RETO_{challenge.challenge_id}", points)
        logger.info(f"{phone} respondió reto {challenge.challenge_id}: {'correcta' if correct else 'incorrecta'}")
        return ChallengeResult(challenge=challenge, chosen=option, correct=correct, points=points)
