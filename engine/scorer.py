"""
engine/scorer.py
================

Scoring operations: one function per delivery kind, plus the non-delivery
actions a scorer takes between balls.

Every delivery operation takes the match and the delivery's parameters and,
in one call:

  1. snapshots the innings fields it may change (BeforeSnapshot)
  2. updates the batting team's score/extras and the striker's aggregates
  3. updates the bowler's aggregates, counting a ball only when the
     delivery is legal (the flag is passed explicitly, never inferred)
  4. rotates strike on an odd number of runs
  5. for legal deliveries: counts the ball, consumes an active free hit and
     closes the over when it reaches balls_per_over
  6. appends exactly one event recording what it did

The functions assume single-writer usage; the caller is responsible for
running the completion/result checks afterwards (engine.result) and for
persisting the match.
"""

import logging

from engine import over_control
from engine.bowler_manager import BowlerManager
from engine.errors import (
    InningsComplete,
    InvalidBatter,
    InvalidDelivery,
    InvalidDismissalOnFreeHit,
    NoActiveBowler,
    NoActiveStriker,
    OverNotComplete,
)
from engine.events import (
    BeforeSnapshot,
    BoundaryFourEvent,
    BoundarySixEvent,
    ByeEvent,
    DeadBallEvent,
    Effects,
    LegByeEvent,
    NoBallEvent,
    PenaltyEvent,
    RunEvent,
    WicketEvent,
    WideEvent,
    new_event_id,
    now,
)
from engine.format_config import get_format
from engine.match import INTERVAL_TYPES
from engine.player import (
    BOWLER_CREDITED_DISMISSALS,
    DISMISSAL_TYPES,
    FREE_HIT_DISMISSALS,
    Dismissal,
)
from engine.result import is_innings_complete

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _check_runs(runs, label="runs"):
    if isinstance(runs, bool) or not isinstance(runs, int) or runs < 0:
        raise InvalidDelivery(f"{label} must be a non-negative integer, got {runs!r}")
    return runs


def _require_open_innings(match):
    innings = match.innings
    if innings.is_complete or is_innings_complete(match):
        raise InningsComplete()
    return innings


def _resolve_batters(match, innings):
    team = match.batting_team(innings)
    if not innings.striker_id or not innings.non_striker_id:
        raise NoActiveStriker()
    striker = team.find_player(innings.striker_id)
    non_striker = team.find_player(innings.non_striker_id)
    if striker is None or non_striker is None:
        raise NoActiveStriker()
    if striker.is_out or non_striker.is_out:
        raise NoActiveStriker("A dismissed batter has not been replaced yet")
    return striker


def _resolve_bowler(match, innings):
    if not innings.bowler_id:
        raise NoActiveBowler()
    bowler = match.bowling_team(innings).find_player(innings.bowler_id)
    if bowler is None:
        raise NoActiveBowler()
    return bowler


def _snapshot(innings):
    return BeforeSnapshot(
        striker_id=innings.striker_id,
        non_striker_id=innings.non_striker_id,
        bowler_id=innings.bowler_id,
        free_hit=innings.free_hit,
        over_number=innings.over_number,
        legal_balls=innings.legal_balls_in_current_over,
        last_over_bowler_id=innings.last_over_bowler_id,
    )


def _is_maiden(innings, over_number, bowler_id, this_ball_runs):
    """All of the over bowled by one bowler, with nothing charged to them."""
    if this_ball_runs:
        return False
    for event in innings.events:
        if event.over_number != over_number:
            continue
        if event.before.bowler_id != bowler_id or event.bowler_runs:
            return False
    return True


def _finish_delivery(
    match,
    innings,
    before,
    event_cls,
    *,
    legal,
    bowler,
    bowler_runs,
    rotate_runs,
    created_batting_stats=False,
    bowler_wicket=False,
    sets_free_hit=False,
    **payload
):
    """Shared tail of every bowled delivery: bowler, strike, ball count, over, log."""
    legal_ball = over_control.advance_legal_ball(innings) if legal else None

    created_bowling_stats = bowler.bowling_stats is None
    stats = bowler.ensure_bowling_stats()
    stats.runs += bowler_runs
    if legal:
        stats.balls += 1
        stats.overs = stats.balls // innings.balls_per_over
    if bowler_wicket:
        stats.wickets += 1

    over_control.rotate_strike_if_odd(rotate_runs, innings)
    over_control.consume_free_hit(innings, legal)
    if sets_free_hit:
        innings.free_hit = True

    over_completed = legal and over_control.over_is_complete(innings)
    maiden = False
    if over_completed:
        maiden = _is_maiden(innings, before.over_number, bowler.id, bowler_runs)
        if maiden:
            stats.maidens += 1
        over_control.complete_over(innings)

    event = event_cls(
        id=new_event_id(),
        timestamp=now(),
        over_number=before.over_number,
        legal_ball_in_over=legal_ball,
        legal=legal,
        before=before,
        effects=Effects(
            created_batting_stats=created_batting_stats,
            created_bowling_stats=created_bowling_stats,
            over_completed=over_completed,
            maiden=maiden,
            bowler_wicket=bowler_wicket,
        ),
        **payload
    )
    innings.events.append(event)
    logger.debug(
        "%s %s.%s %s -> %d/%d",
        event.kind, before.over_number, legal_ball or "-", payload,
        match.batting_team(innings).score, match.batting_team(innings).wickets,
    )
    return event


# ---------------------------------------------------------------------------
# Delivery operations
# ---------------------------------------------------------------------------

def apply_run(match, runs):
    """Runs off the bat.  4 and 6 are logged as boundaries."""
    _check_runs(runs)
    innings = _require_open_innings(match)
    striker = _resolve_batters(match, innings)
    bowler = _resolve_bowler(match, innings)
    before = _snapshot(innings)
    team = match.batting_team(innings)

    team.score += runs
    created = striker.batting_stats is None
    stats = striker.ensure_batting_stats()
    stats.runs += runs
    stats.balls += 1

    if runs == 4:
        stats.fours += 1
        event_cls, payload = BoundaryFourEvent, {}
    elif runs == 6:
        stats.sixes += 1
        event_cls, payload = BoundarySixEvent, {}
    else:
        event_cls, payload = RunEvent, {"runs": runs}

    return _finish_delivery(
        match, innings, before, event_cls,
        legal=True,
        bowler=bowler,
        bowler_runs=runs,
        rotate_runs=runs,
        created_batting_stats=created,
        **payload
    )


def apply_wide(match, additional_runs=0):
    """A wide: one extra plus any runs taken, none of it to the batter."""
    _check_runs(additional_runs, "additional_runs")
    innings = _require_open_innings(match)
    _resolve_batters(match, innings)
    bowler = _resolve_bowler(match, innings)
    before = _snapshot(innings)
    team = match.batting_team(innings)

    total = 1 + additional_runs
    team.score += total
    team.extras.wides += total

    return _finish_delivery(
        match, innings, before, WideEvent,
        legal=False,
        bowler=bowler,
        bowler_runs=total,
        rotate_runs=total,
        runs=total,
    )


def apply_no_ball(match, bat_runs=0):
    """A no-ball: one extra, bat runs to the striker, and a free hit next ball."""
    _check_runs(bat_runs, "bat_runs")
    innings = _require_open_innings(match)
    striker = _resolve_batters(match, innings)
    bowler = _resolve_bowler(match, innings)
    before = _snapshot(innings)
    team = match.batting_team(innings)

    team.score += 1 + bat_runs
    team.extras.noballs += 1

    created = False
    if bat_runs > 0:
        created = striker.batting_stats is None
        stats = striker.ensure_batting_stats()
        stats.runs += bat_runs
        if bat_runs == 4:
            stats.fours += 1
        if bat_runs == 6:
            stats.sixes += 1

    return _finish_delivery(
        match, innings, before, NoBallEvent,
        legal=False,
        bowler=bowler,
        bowler_runs=1 + bat_runs,
        rotate_runs=1 + bat_runs,
        created_batting_stats=created,
        sets_free_hit=True,
        bat_runs=bat_runs,
    )


def _apply_bye_kind(match, runs, event_cls, bucket):
    _check_runs(runs)
    innings = _require_open_innings(match)
    striker = _resolve_batters(match, innings)
    bowler = _resolve_bowler(match, innings)
    before = _snapshot(innings)
    team = match.batting_team(innings)

    team.score += runs
    setattr(team.extras, bucket, getattr(team.extras, bucket) + runs)

    created = striker.batting_stats is None
    striker.ensure_batting_stats().balls += 1

    return _finish_delivery(
        match, innings, before, event_cls,
        legal=True,
        bowler=bowler,
        bowler_runs=0,
        rotate_runs=runs,
        created_batting_stats=created,
        runs=runs,
    )


def apply_bye(match, runs):
    return _apply_bye_kind(match, runs, ByeEvent, "byes")


def apply_leg_bye(match, runs):
    return _apply_bye_kind(match, runs, LegByeEvent, "legbyes")


def apply_wicket(match, wicket_type, fielder=None, runs_completed=0):
    """
    Dismiss a batter.  Returns False, changing nothing, when a free hit is
    active and the dismissal is not one of FREE_HIT_DISMISSALS.

    The delivery is always treated as legal, even if the scorer meant it to
    be a wide or no-ball; the free-hit allow-list is the only restriction.
    The striker is the batter dismissed for every type, runout-nonstriker
    included.  runs_completed go to the score and to the striker.
    """
    if wicket_type not in DISMISSAL_TYPES:
        raise InvalidDelivery(f"wicket_type must be one of {DISMISSAL_TYPES}")
    _check_runs(runs_completed, "runs_completed")
    innings = _require_open_innings(match)
    striker = _resolve_batters(match, innings)
    bowler = _resolve_bowler(match, innings)

    if innings.free_hit and wicket_type not in FREE_HIT_DISMISSALS:
        logger.warning("Rejected %s dismissal on a free hit", wicket_type)
        return False

    before = _snapshot(innings)
    team = match.batting_team(innings)

    striker.is_out = True
    striker.dismissal = Dismissal(
        type=wicket_type,
        fielder=fielder,
        over=innings.over_number,
        ball=innings.legal_balls_in_current_over + 1,
    )
    team.wickets += 1

    created = striker.batting_stats is None
    stats = striker.ensure_batting_stats()
    if runs_completed > 0:
        team.score += runs_completed
        stats.runs += runs_completed
    stats.balls += 1

    _finish_delivery(
        match, innings, before, WicketEvent,
        legal=True,
        bowler=bowler,
        bowler_runs=runs_completed,
        rotate_runs=runs_completed,
        created_batting_stats=created,
        bowler_wicket=wicket_type in BOWLER_CREDITED_DISMISSALS,
        wicket_type=wicket_type,
        dismissed_id=striker.id,
        runs_completed=runs_completed,
        fielder=fielder,
    )
    logger.info("Wicket: %s %s (%d/%d)", striker.name, wicket_type, team.score, team.wickets)
    return True


def apply_wicket_or_raise(match, wicket_type, fielder=None, runs_completed=0):
    if not apply_wicket(match, wicket_type, fielder, runs_completed):
        raise InvalidDismissalOnFreeHit()


def apply_penalty(match, runs=5):
    """Penalty runs awarded to the batting side.  Not a delivery."""
    _check_runs(runs)
    if runs == 0:
        raise InvalidDelivery("penalty runs must be positive")
    innings = _require_open_innings(match)
    before = _snapshot(innings)
    team = match.batting_team(innings)

    team.score += runs
    team.extras.penalties += runs

    event = PenaltyEvent(
        id=new_event_id(),
        timestamp=now(),
        over_number=innings.over_number,
        legal_ball_in_over=None,
        legal=False,
        before=before,
        effects=Effects(),
        runs=runs,
    )
    innings.events.append(event)
    logger.info("Penalty: %d runs to %s", runs, team.name)
    return event


def apply_dead_ball(match):
    """A ball called dead: logged, nothing scored, not counted."""
    innings = _require_open_innings(match)
    event = DeadBallEvent(
        id=new_event_id(),
        timestamp=now(),
        over_number=innings.over_number,
        legal_ball_in_over=None,
        legal=False,
        before=_snapshot(innings),
        effects=Effects(),
    )
    innings.events.append(event)
    return event


# ---------------------------------------------------------------------------
# Between-ball actions (not logged, not undoable)
# ---------------------------------------------------------------------------

def set_next_batter(match, player_id):
    """
    Put a new batter in whichever crease slot holds a dismissed batter.
    Silently does nothing when neither current batter is out.
    """
    innings = match.innings
    team = match.batting_team(innings)

    slot = None
    for player in team.players:
        if player.is_out and player.id == innings.striker_id:
            slot = "striker_id"
            break
        if player.is_out and player.id == innings.non_striker_id:
            slot = "non_striker_id"
            break
    if slot is None:
        logger.debug("set_next_batter(%s): no dismissed batter at the crease", player_id)
        return False

    incoming = team.get_player(player_id)
    if incoming.is_out:
        raise InvalidBatter(f"{incoming.name} is already out")
    if player_id in (innings.striker_id, innings.non_striker_id):
        raise InvalidBatter(f"{incoming.name} is already batting")

    setattr(innings, slot, player_id)
    logger.info("New batter: %s", incoming.name)
    return True


def available_batters(match):
    innings = match.innings
    return [
        p for p in match.batting_team(innings).players
        if not p.is_out and p.id not in (innings.striker_id, innings.non_striker_id)
    ]


def bowler_manager(match, innings=None):
    innings = innings or match.innings
    fmt = get_format(match.match_format).with_overs(innings.max_overs, innings.balls_per_over)
    return BowlerManager(innings, match.bowling_team(innings), fmt)


def change_bowler(match, bowler_id):
    """Replace the bowler at any point, mid-over included."""
    innings = match.innings
    bowler_manager(match, innings).validate_bowler(bowler_id)
    innings.bowler_id = bowler_id
    logger.info("Bowler changed to %s at %s", bowler_id, innings.overs_display)


def end_over_and_change_bowler(match, bowler_id):
    """
    Install the bowler for the next over.  Only valid at an over break, and
    subject to the format's quota and consecutive-over rules.
    """
    innings = match.innings
    if innings.legal_balls_in_current_over != 0 or innings.over_number == 0:
        raise OverNotComplete(
            f"Cannot change over at {innings.overs_display}: "
            f"{innings.balls_per_over} legal balls not yet bowled"
        )
    bowler_manager(match, innings).validate_next_over_bowler(bowler_id)
    innings.bowler_id = bowler_id
    logger.info("Over %d to be bowled by %s", innings.over_number + 1, bowler_id)


def switch_strike(match):
    over_control.swap_strike(match.innings)


def toggle_free_hit(match):
    innings = match.innings
    innings.free_hit = not innings.free_hit
    return innings.free_hit


def start_interval(match, interval_type="drinks", message=None):
    if interval_type not in INTERVAL_TYPES:
        raise InvalidDelivery(f"interval_type must be one of {INTERVAL_TYPES}")
    innings = match.innings
    innings.is_interval = True
    innings.interval_type = interval_type
    innings.interval_message = message or None


def end_interval(match):
    innings = match.innings
    innings.is_interval = False
    innings.interval_type = None
    innings.interval_message = None
