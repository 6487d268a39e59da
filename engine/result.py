"""
engine/result.py
================

Innings/match completion, phase transitions and the human-readable result
line shown by display layers.

Phases
------
    INNINGS1_IN_PROGRESS → INNINGS_BREAK → INNINGS2_IN_PROGRESS
                                               ├→ MATCH_COMPLETE
                                               └→ MATCH_TIED

The phase is recomputed from the innings flags by update_match_result(), so
undoing the ball that ended an innings walks the phase back as well.
"""

import logging
import uuid

from engine.errors import InningsInProgress, SecondInningsStarted
from engine.format_config import get_format
from engine.match import Innings, Match, MatchPhase

logger = logging.getLogger(__name__)

ALL_OUT = 10

INTERVAL_LABELS = {
    "drinks": "Drinks break",
    "innings": "Innings break",
    "lunch": "Lunch",
    "tea": "Tea",
    "custom": "Interval",
}


def _plural(n, word):
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

def is_innings_complete(match):
    """All out, overs exhausted, or (second innings) target reached."""
    innings = match.innings
    team = match.batting_team(innings)

    if team.wickets >= ALL_OUT:
        return True
    if innings.max_overs and innings.over_number >= innings.max_overs:
        return True
    if match.current_innings == 2 and innings.target and team.score >= innings.target:
        return True
    return False


def derive_phase(match):
    if match.innings2 is None:
        if match.innings1.is_complete:
            return MatchPhase.INNINGS_BREAK
        return MatchPhase.INNINGS1_IN_PROGRESS
    if not match.innings2.is_complete:
        return MatchPhase.INNINGS2_IN_PROGRESS
    first = match.batting_team(match.innings1)
    second = match.batting_team(match.innings2)
    if first.score == second.score:
        return MatchPhase.MATCH_TIED
    return MatchPhase.MATCH_COMPLETE


def reopen_if_incomplete(match):
    """Clear a completion flag whose condition no longer holds (after undo)."""
    innings = match.innings
    if innings.closed_manually:
        return
    if innings.is_complete and not is_innings_complete(match):
        innings.is_complete = False
        match.phase = derive_phase(match)
        logger.info("Innings %d reopened", match.current_innings)


# ---------------------------------------------------------------------------
# Result text
# ---------------------------------------------------------------------------

def get_match_result(match):
    innings1 = match.innings1
    innings2 = match.innings2
    first = match.batting_team(innings1)
    second = match.team(innings1.bowling_team)

    if innings2 is not None:
        if innings1.is_complete and innings2.is_complete and first.score > second.score:
            return f"{first.name} won by {_plural(first.score - second.score, 'run')}"
        if second.score > first.score:
            return f"{second.name} won by {_plural(ALL_OUT - second.wickets, 'wicket')}"
        if innings2.is_complete and first.score == second.score:
            return "Match tied"

    current = match.innings
    if current.is_interval:
        return current.interval_message or INTERVAL_LABELS.get(current.interval_type, "Interval")

    if innings2 is None:
        if innings1.is_complete:
            return f"{second.name} need {first.score + 1} to win"
        return f"{first.name} {first.score}/{first.wickets} ({innings1.overs_display} ov)"

    needed = (innings2.target or first.score + 1) - second.score
    if innings2.max_overs:
        balls_left = innings2.max_overs * innings2.balls_per_over - innings2.legal_balls_bowled
        return (
            f"{second.name} need {_plural(needed, 'run')} "
            f"from {_plural(balls_left, 'ball')}"
        )
    return f"{second.name} need {_plural(needed, 'run')} to win"


def update_match_result(match):
    """
    Run after every operation: flag the current innings complete when its
    condition holds, recompute the phase and refresh match.result.
    """
    innings = match.innings
    if not innings.is_complete and is_innings_complete(match):
        innings.is_complete = True
        logger.info("Innings %d complete", match.current_innings)

    phase = derive_phase(match)
    if phase != match.phase:
        logger.info("Match %s phase %s -> %s", match.id, match.phase.value, phase.value)
    match.phase = phase
    match.result = get_match_result(match)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def _open_innings(match, innings):
    batting = match.team(innings.batting_team)
    bowling = match.team(innings.bowling_team)
    if len(batting.players) >= 2:
        innings.striker_id = batting.players[0].id
        innings.non_striker_id = batting.players[1].id
    bowlers = [p for p in bowling.players if p.can_bowl]
    if bowlers:
        innings.bowler_id = bowlers[0].id


def start_match(team_a, team_b, toss_winner=None, elected=None, match_format=None,
                max_overs=None, balls_per_over=None, match_id=None):
    """
    Build a new Match ready for the first ball.

    Team A bats first when A won the toss and chose to bat or B won and chose
    to bowl; otherwise B bats first.  Openers are the first two listed
    players, the opening bowler the first player able to bowl.
    """
    fmt = get_format(match_format).with_overs(max_overs, balls_per_over)
    batting_first = "A"
    if toss_winner and elected:
        batting_first = "A" if (toss_winner == "A") == (elected == "bat") else "B"

    innings1 = Innings(
        batting_team=batting_first,
        bowling_team="B" if batting_first == "A" else "A",
        balls_per_over=fmt.balls_per_over,
        max_overs=fmt.overs,
    )
    match = Match(
        id=match_id or str(uuid.uuid4()),
        team_a=team_a,
        team_b=team_b,
        innings1=innings1,
        toss_winner=toss_winner,
        elected=elected,
        match_format=fmt.name,
    )
    _open_innings(match, innings1)
    match.result = get_match_result(match)
    logger.info("Match %s started: %s vs %s (%s)", match.id, team_a.name, team_b.name, fmt.name)
    return match


def end_innings(match):
    """Close the current innings regardless of its completion condition."""
    innings = match.innings
    if not innings.is_complete and not is_innings_complete(match):
        innings.closed_manually = True
        logger.info("Innings %d closed manually", match.current_innings)
    innings.is_complete = True
    update_match_result(match)


def start_second_innings(match):
    innings1 = match.innings1
    if match.innings2 is not None:
        raise SecondInningsStarted()
    if not innings1.is_complete:
        raise InningsInProgress()

    innings2 = Innings(
        batting_team=innings1.bowling_team,
        bowling_team=innings1.batting_team,
        balls_per_over=innings1.balls_per_over,
        max_overs=innings1.max_overs,
        target=match.batting_team(innings1).score + 1,
    )
    match.innings2 = innings2
    _open_innings(match, innings2)
    update_match_result(match)
    logger.info("Second innings started, target %d", innings2.target)
    return innings2

