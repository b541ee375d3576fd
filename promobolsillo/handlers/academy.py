from promobolsillo.messages import parse_choice, reply
from promobolsillo.states import STATE_ACAD_MENU, STATE_ACAD_RETO, STATE_MENU, ChallengeWait
from promobolsillo.templates import TEMPLATES, challenge_text, main_menu

STATES = {STATE_ACAD_MENU, STATE_ACAD_RETO}

OPTION_COUNT = 3


def _menu(prefix: str = ""):
    return reply(prefix + TEMPLATES["academia"]["menu"], STATE_ACAD_MENU)


def enter(bot, session, msg):
    return _menu()


def _handle_menu(bot, session, msg):
    cmd = msg.command
    if cmd == "1":
        challenge = bot.academy.next_challenge(msg.phone)
        if challenge is None:
            return _menu(TEMPLATES["academia"]["no_challenges"])
        return reply(challenge_text(challenge), STATE_ACAD_RETO, ChallengeWait(challenge_id=challenge.challenge_id))
    if cmd == "2":
        summary = bot.points.summary(msg.phone)
        return _menu(TEMPLATES["academia"]["training_points"].format(capacitacion=summary.capacitacion))
    if cmd == "3":
        return reply(main_menu(), STATE_MENU)
    return _menu()


def _handle_challenge(bot, session, msg):
    data: ChallengeWait = session.data
    challenge = bot.academy.get_challenge(data.challenge_id)
    if challenge is None:
        # El reto se desactivó mientras el promotor respondía
        return _menu()

    option = parse_choice(msg.command, OPTION_COUNT)
    if option is None:
        return reply(challenge_text(challenge))

    result = bot.academy.answer(msg.phone, challenge, option)
    if result.correct:
        text = TEMPLATES["academia"]["correct"].format(points=result.points)
    else:
        text = TEMPLATES["academia"]["incorrect"].format(correct=challenge.correct_option, points=result.points)
    return _menu(text)


HANDLERS = {
    STATE_ACAD_MENU: _handle_menu,
    STATE_ACAD_RETO: _handle_challenge,
}


def handle(bot, session, msg):
    return HANDLERS[session.state](bot, session, msg)
