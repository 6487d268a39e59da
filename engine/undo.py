"""
engine/undo.py
==============

Undo engine: pop the last event of the current innings and apply the exact
inverse of the operation that created it.

Counters are reversed arithmetically from the event's own payload; strike,
bowler, free hit and the over/ball counters are restored from the event's
BeforeSnapshot; stat objects and dismissals the event created are removed.
apply(op) followed by undo_last_event() therefore leaves the Match exactly
as it was, provided nothing else mutated it in between.
"""

import logging

from engine.errors import EmptyEventLog
from engine.events import (
    BoundaryFourEvent,
    BoundarySixEvent,
    ByeEvent,
    DeadBallEvent,
    LegByeEvent,
    NoBallEvent,
    PenaltyEvent,
    RunEvent,
    WicketEvent,
    WideEvent,
)
from engine.result import reopen_if_incomplete

logger = logging.getLogger(__name__)


def _restore_snapshot(innings, before):
    innings.striker_id = before.striker_id
    innings.non_striker_id = before.non_striker_id
    innings.bowler_id = before.bowler_id
    innings.free_hit = before.free_hit
    innings.over_number = before.over_number
    innings.legal_balls_in_current_over = before.legal_balls
    innings.last_over_bowler_id = before.last_over_bowler_id


def _reverse_bowler(match, innings, event):
    bowler = match.bowling_team(innings).get_player(event.before.bowler_id)
    if event.effects.created_bowling_stats:
        bowler.bowling_stats = None
        return
    stats = bowler.bowling_stats
    stats.runs -= event.bowler_runs
    if event.legal:
        stats.balls -= 1
        stats.overs = stats.balls // innings.balls_per_over
    if event.effects.bowler_wicket:
        stats.wickets -= 1
    if event.effects.maiden:
        stats.maidens -= 1


def _reverse_striker(match, innings, event, balls):
    striker = match.batting_team(innings).get_player(event.before.striker_id)
    if event.effects.created_batting_stats:
        striker.batting_stats = None
        return
    stats = striker.batting_stats
    if stats is None:
        return
    stats.runs -= event.runs_bat
    stats.balls -= balls
    if event.runs_bat == 4 and isinstance(event, (BoundaryFourEvent, NoBallEvent)):
        stats.fours -= 1
    if event.runs_bat == 6 and isinstance(event, (BoundarySixEvent, NoBallEvent)):
        stats.sixes -= 1


def undo_last_event(match):
    """Reverse the last event of the current innings.  False if there is none."""
    innings = match.innings
    if not innings.events:
        return False

    event = innings.events.pop()
    team = match.batting_team(innings)
    team.score -= event.total_runs

    if isinstance(event, (RunEvent, BoundaryFourEvent, BoundarySixEvent)):
        _reverse_striker(match, innings, event, balls=1 if event.legal else 0)
        _reverse_bowler(match, innings, event)
    elif isinstance(event, WideEvent):
        team.extras.wides -= event.runs
        _reverse_bowler(match, innings, event)
    elif isinstance(event, NoBallEvent):
        team.extras.noballs -= 1
        _reverse_striker(match, innings, event, balls=0)
        _reverse_bowler(match, innings, event)
    elif isinstance(event, ByeEvent):
        team.extras.byes -= event.runs
        _reverse_striker(match, innings, event, balls=1)
        _reverse_bowler(match, innings, event)
    elif isinstance(event, LegByeEvent):
        team.extras.legbyes -= event.runs
        _reverse_striker(match, innings, event, balls=1)
        _reverse_bowler(match, innings, event)
    elif isinstance(event, WicketEvent):
        dismissed = team.get_player(event.dismissed_id)
        dismissed.is_out = False
        dismissed.dismissal = None
        team.wickets -= 1
        _reverse_striker(match, innings, event, balls=1)
        _reverse_bowler(match, innings, event)
    elif isinstance(event, PenaltyEvent):
        team.extras.penalties -= event.runs
    elif isinstance(event, DeadBallEvent):
        pass
    else:
        raise TypeError(f"Cannot undo unknown event type {type(event).__name__}")

    _restore_snapshot(innings, event.before)
    reopen_if_incomplete(match)
    logger.info("Undid %s at %d.%d", event.kind, event.over_number, event.before.legal_balls)
    return True


def undo_or_raise(match):
    if not undo_last_event(match):
        raise EmptyEventLog()
