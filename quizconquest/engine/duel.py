"""
Duel coordinator.
Lifecycle of a contested-territory duel: challenge, answer collection,
winner determination and resolution.

Resolution runs from a snapshot of the duel taken when the last required
answer arrived, and only if the duel is still registered in
session.active_duels, so a duplicate trigger resolves nothing.
"""

import logging
from dataclasses import dataclass

from quizconquest.engine import GameRuleError
from quizconquest.engine.directory import require_player
from quizconquest.engine.events import (
    GameEvent,
    duel_complete,
    duel_result,
    duel_status_update,
    game_log,
    info_message,
    player_list_update,
    question_challenge,
    territory_update,
    turn_update,
)
from quizconquest.engine.ledger import borders_any, territories_owned_by, transfer
from quizconquest.engine.state import IN_PROGRESS, Duel, DuelAnswer, GameSession, Question
from quizconquest.engine.turns import advance, check_win_condition, eliminate, require_in_progress

logger = logging.getLogger(__name__)

ATTACKER = "attacker"
DEFENDER = "defender"
NOBODY = "none"


@dataclass
class DuelOutcome:
    winner: str  # ATTACKER | DEFENDER | NOBODY
    reason: str
    attacker_correct: bool
    defender_correct: bool | None  # None when nobody defended


def challenge(
    session: GameSession,
    attacker_id: str,
    territory_id: str,
    question: Question | None,
    issued_at: float,
) -> list[GameEvent]:
    """
    Open a duel for territory_id. Checks run in a fixed order and the first
    failure is reported; nothing is mutated unless all pass.
    """
    attacker = require_player(session, attacker_id)
    require_in_progress(session)

    if session.current_turn != attacker_id:
        raise GameRuleError("It's not your turn")
    target = session.territories.get(territory_id)
    if target is None:
        raise GameRuleError("Territory does not exist")
    owned = territories_owned_by(session, attacker_id)
    if not owned:
        raise GameRuleError("You don't have any territories")
    if target.owner == attacker_id:
        raise GameRuleError("You already own this territory")
    if not borders_any(session, territory_id, owned):
        raise GameRuleError("You can only attack adjacent territories")
    if territory_id in session.active_duels:
        raise GameRuleError("This territory is already being contested")
    # One attack per turn: every resolution advances the turn
    if any(d.attacker_id == attacker_id for d in session.active_duels.values()):
        raise GameRuleError("You already have a duel in progress")
    if question is None:
        logger.error("No questions available for duel on %s", territory_id)
        raise GameRuleError("No questions available")

    defender_id = target.owner
    duel = Duel(
        territory_id=territory_id,
        attacker_id=attacker_id,
        defender_id=defender_id,
        question=question,
        created_at=issued_at,
    )
    session.active_duels[territory_id] = duel
    logger.info(
        "Duel created: %s attacking %s%s, question %r",
        attacker.name,
        territory_id,
        f" owned by {session.player_name(defender_id)}" if defender_id else " (unowned)",
        question.question,
    )

    public_question = question.to_dict()
    events = [question_challenge(attacker_id, public_question, territory_id, ATTACKER)]
    if defender_id is None:
        logger.info("No defender for territory %s", territory_id)
    elif defender_id in session.players:
        events.append(question_challenge(defender_id, public_question, territory_id, DEFENDER))
    else:
        logger.warning("Defender %s unreachable, %s is undefended", defender_id, territory_id)
        duel.undefended = True
    return events


def submit_answer(
    session: GameSession,
    player_id: str,
    territory_id: str,
    answer: int,
    response_time: float,
    received_at: float,
    timing_tolerance: float,
) -> list[GameEvent]:
    """
    Record one participant's answer. The client-reported response_time is
    stored as given; the server-observed elapsed time is kept next to it and
    disagreement beyond timing_tolerance (ms) is flagged.
    """
    player = require_player(session, player_id)
    duel = session.active_duels.get(territory_id)
    if duel is None:
        raise GameRuleError("This territory isn't being contested")
    if player_id not in duel.required_answers():
        raise GameRuleError("You are not part of this duel")
    if player_id in duel.answers:
        raise GameRuleError("You've already answered this question")

    server_elapsed = received_at - duel.created_at
    suspect = response_time < 0 or response_time > server_elapsed + timing_tolerance
    if suspect:
        logger.warning(
            "Timing anomaly from %s on %s: claimed %sms, server observed %sms",
            player.name, territory_id, response_time, server_elapsed,
        )
    duel.answers[player_id] = DuelAnswer(
        answer=answer,
        response_time=response_time,
        received_at=received_at,
        server_elapsed=server_elapsed,
        timing_suspect=suspect,
    )

    role = duel.role_of(player_id)
    logger.info("%s (%s) answered in %sms", player.name, role, response_time)
    events = [duel_status_update(territory_id, player_id, player.name, role, response_time)]

    waiting = duel.waiting_for()
    if waiting:
        waiting_name = session.player_name(waiting[0])
        events.append(info_message(
            player_id,
            f"Your answer has been submitted. Waiting for {waiting_name} to answer.",
        ))
        return events

    participants = [duel.attacker_id]
    if duel.defender_id and duel.defender_id in session.players:
        participants.append(duel.defender_id)
    logger.info("All answers received for %s", territory_id)
    events.append(duel_complete(territory_id, participants))
    return events


def determine_winner(duel: Duel, trust_client_timing: bool = True) -> DuelOutcome:
    """
    Winner rule:
    - nobody defending: attacker correct takes the tile, otherwise no change
    - both correct: strictly faster attacker wins, a tie goes to the defender
    - only one correct: that side wins
    - both wrong: defender keeps the tile
    """
    correct = duel.question.correct_answer
    attacker_answer = duel.answers[duel.attacker_id]
    attacker_correct = attacker_answer.answer == correct

    if duel.defender_id is None or duel.undefended:
        if attacker_correct:
            return DuelOutcome(ATTACKER, "Attacker answered correctly and claimed undefended territory", True, None)
        if duel.defender_id is None:
            return DuelOutcome(NOBODY, "Attacker answered incorrectly, territory remains unclaimed", False, None)
        return DuelOutcome(NOBODY, "Attacker answered incorrectly, territory stays with its absent owner", False, None)

    defender_answer = duel.answers[duel.defender_id]
    defender_correct = defender_answer.answer == correct

    if attacker_correct and defender_correct:
        if trust_client_timing:
            attacker_time, defender_time = attacker_answer.response_time, defender_answer.response_time
        else:
            attacker_time, defender_time = attacker_answer.server_elapsed, defender_answer.server_elapsed
        if attacker_time < defender_time:
            return DuelOutcome(ATTACKER, "Both answered correctly, but attacker was faster", True, True)
        if attacker_time == defender_time:
            return DuelOutcome(DEFENDER, "Both answered correctly in the same time, defender holds", True, True)
        return DuelOutcome(DEFENDER, "Both answered correctly, but defender was faster", True, True)
    if attacker_correct:
        return DuelOutcome(ATTACKER, "Attacker answered correctly, defender did not", True, False)
    if defender_correct:
        return DuelOutcome(DEFENDER, "Defender answered correctly, attacker did not", False, True)
    return DuelOutcome(DEFENDER, "Neither answered correctly, territory stays with defender", False, False)


def resolve(
    session: GameSession,
    territory_id: str,
    snapshot: Duel,
    trust_client_timing: bool = True,
) -> list[GameEvent]:
    """
    Apply a completed duel: ownership change, capital capture, win check,
    result broadcast, duel removal, then turn advance.
    """
    if territory_id not in session.active_duels:
        logger.info("Duel %s already processed, skipping", territory_id)
        return []

    outcome = determine_winner(snapshot, trust_client_timing)
    logger.info("Duel result for %s: %s", territory_id, outcome.reason)

    consequences: list[GameEvent] = []
    if outcome.winner == ATTACKER:
        was_capital = transfer(session, territory_id, snapshot.defender_id, snapshot.attacker_id)
        if was_capital and snapshot.defender_id:
            logger.info(
                "%s captured the capital of %s",
                session.player_name(snapshot.attacker_id),
                session.player_name(snapshot.defender_id),
            )
            consequences.extend(eliminate(session, snapshot.defender_id, territory_id))
        consequences.extend(check_win_condition(session))

    attacker_answer = snapshot.answers[snapshot.attacker_id]
    defender_answer = snapshot.answers.get(snapshot.defender_id) if snapshot.defender_id else None
    events = [
        duel_result(
            territory_id=territory_id,
            winner=outcome.winner,
            reason=outcome.reason,
            attacker_id=snapshot.attacker_id,
            defender_id=snapshot.defender_id,
            attacker_correct=outcome.attacker_correct,
            defender_correct=outcome.defender_correct,
            attacker_time=attacker_answer.response_time,
            defender_time=defender_answer.response_time if defender_answer else None,
            correct_answer=snapshot.question.correct_answer,
            question=snapshot.question.question,
            answer_text=snapshot.question.answer_text,
        ),
        territory_update(session.territories_snapshot()),
        player_list_update(session.players_snapshot()),
    ]
    events.extend(consequences)

    # Must leave active_duels before the turn moves on
    session.active_duels.pop(territory_id, None)

    events.extend(advance(session))
    if session.status == IN_PROGRESS:
        events.append(turn_update(session.current_turn))
        events.append(game_log(f"It's now {session.player_name(session.current_turn)}'s turn."))
    return events


def abort_duels_for(session: GameSession, player_id: str) -> list[str]:
    """Drop every duel player_id takes part in. Returns the affected territory ids."""
    aborted = [
        tid for tid, duel in session.active_duels.items()
        if player_id in (duel.attacker_id, duel.defender_id)
    ]
    for tid in aborted:
        del session.active_duels[tid]
        logger.info("Duel for %s abandoned", tid)
    return aborted
