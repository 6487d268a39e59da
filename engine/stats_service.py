# -*- coding: utf-8 -*-
"""
Statistics Service Module
Read-only projections over a Match for display layers: run rates, ball
display strings, run-rate progression, fall of wickets, player ratios and
team comparison with top performers.

Nothing here mutates the match.  Over arithmetic uses the innings' own
balls_per_over rather than assuming six.
"""

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

DOT = "•"


# ---------------------------------------------------------------------------
# Run rates
# ---------------------------------------------------------------------------

def current_run_rate(score, overs, balls, balls_per_over=6):
    """
    Runs per over so far.

    Args:
        score (int): Runs scored
        overs (int): Completed overs
        balls (int): Legal balls in the current over
        balls_per_over (int): Legal deliveries per over

    Returns:
        float: 0.0 before the first legal ball
    """
    total_balls = overs * balls_per_over + balls
    if total_balls == 0:
        return 0.0
    return score / total_balls * balls_per_over


def required_run_rate(target, scored, remaining_overs, remaining_balls, balls_per_over=6):
    """Runs per over still needed; never negative, 0.0 when no balls remain."""
    total_remaining = remaining_overs * balls_per_over + remaining_balls
    if total_remaining <= 0:
        return 0.0
    return max(0.0, (target - scored) / total_remaining * balls_per_over)


def remaining_balls_in_innings(innings):
    """Legal balls left, or None for an innings without an over limit."""
    if not innings.max_overs:
        return None
    return max(0, innings.max_overs * innings.balls_per_over - innings.legal_balls_bowled)


def innings_run_rate(match, innings):
    team = match.batting_team(innings)
    return current_run_rate(
        team.score, innings.over_number, innings.legal_balls_in_current_over,
        innings.balls_per_over,
    )


def innings_required_run_rate(match):
    """Required rate for the chase in progress, 0.0 outside a second innings."""
    innings = match.innings2
    if innings is None or not innings.target:
        return 0.0
    remaining = remaining_balls_in_innings(innings)
    if remaining is None:
        return 0.0
    bpo = innings.balls_per_over
    return required_run_rate(
        innings.target, match.batting_team(innings).score,
        remaining // bpo, remaining % bpo, bpo,
    )


def projected_score(match, innings=None):
    """Current score plus the current rate over the overs still to come."""
    innings = innings or match.innings
    team = match.batting_team(innings)
    remaining = remaining_balls_in_innings(innings)
    if remaining is None:
        return float(team.score)
    rate = innings_run_rate(match, innings)
    return team.score + rate * remaining / innings.balls_per_over


# ---------------------------------------------------------------------------
# Ball display
# ---------------------------------------------------------------------------

def format_ball(event):
    if isinstance(event, WicketEvent):
        return "W"
    if isinstance(event, BoundaryFourEvent):
        return "4"
    if isinstance(event, BoundarySixEvent):
        return "6"
    if isinstance(event, RunEvent):
        return str(event.runs) if event.runs else DOT
    if isinstance(event, WideEvent):
        return "Wd" if event.runs == 1 else f"{event.runs}Wd"
    if isinstance(event, NoBallEvent):
        return f"Nb+{event.bat_runs}" if event.bat_runs else "Nb"
    if isinstance(event, ByeEvent):
        return f"{event.runs}B"
    if isinstance(event, LegByeEvent):
        return f"{event.runs}Lb"
    if isinstance(event, PenaltyEvent):
        return f"{event.runs}P"
    if isinstance(event, DeadBallEvent):
        return "D"
    raise TypeError(f"Cannot format unknown event type {type(event).__name__}")


def last_six_balls(innings):
    """Display strings for the last six legal deliveries."""
    legal = [e for e in innings.events if e.legal]
    return [format_ball(e) for e in legal[-6:]]


def current_over_balls(innings):
    """Every event of the over in progress, or of the over just completed."""
    if not innings.events:
        return []
    over = innings.over_number
    if innings.legal_balls_in_current_over == 0 and innings.events[-1].over_number < over:
        over = innings.events[-1].over_number
    return [format_ball(e) for e in innings.events if e.over_number == over]


# ---------------------------------------------------------------------------
# Replays
# ---------------------------------------------------------------------------

def run_rate_progression(innings):
    """
    Replay the log in windows of balls_per_over legal balls.

    Returns:
        list[dict]: one {over, score, run_rate, runs_in_over} per completed
        over, plus a trailing entry with a fractional over for a partial one.
        Runs logged after the last completed over without a legal ball yet
        (wides, no-balls, penalties) also get a trailing entry, so the last
        score always equals the innings total.
    """
    bpo = innings.balls_per_over
    progression = []
    running = 0
    overs = 0
    balls = 0

    for event in innings.events:
        running += event.total_runs
        if event.legal:
            balls += 1
            if balls == bpo:
                overs += 1
                balls = 0
                progression.append({
                    "over": overs,
                    "score": running,
                    "run_rate": current_run_rate(running, overs, 0, bpo),
                })

    last_score = progression[-1]["score"] if progression else 0
    if balls > 0 or running != last_score:
        progression.append({
            "over": round(overs + balls / bpo, 2),
            "score": running,
            "run_rate": current_run_rate(running, overs, balls, bpo),
        })

    previous = 0
    for point in progression:
        point["runs_in_over"] = point["score"] - previous
        previous = point["score"]
    return progression


def wicket_falls(match):
    """
    Fall-of-wicket series for both innings, in order.  The score is the
    running total before the bat runs completed on the wicket ball.
    """
    falls = []
    for number, innings in enumerate(match.all_innings(), start=1):
        team = match.batting_team(innings)
        running = 0
        count = 0
        for event in innings.events:
            running += event.total_runs
            if not isinstance(event, WicketEvent):
                continue
            count += 1
            player = team.find_player(event.dismissed_id)
            falls.append({
                "innings": number,
                "team_id": team.id,
                "team_name": team.name,
                "wicket_number": count,
                "score": running - event.runs_bat,
                "over_number": event.over_number,
                "ball_in_over": event.legal_ball_in_over or 0,
                "player_id": event.dismissed_id,
                "player_name": player.name if player else "Unknown",
                "dismissal_type": event.wicket_type,
            })
    return falls


def innings_total(innings):
    """Sum of every run recorded in the log (bat plus extras)."""
    return sum(e.total_runs for e in innings.events)


# ---------------------------------------------------------------------------
# Player ratios
# ---------------------------------------------------------------------------

def strike_rate(batting_stats):
    if batting_stats is None or batting_stats.balls == 0:
        return 0.0
    return batting_stats.runs / batting_stats.balls * 100


def economy_rate(bowling_stats, balls_per_over=6):
    if bowling_stats is None or bowling_stats.balls == 0:
        return 0.0
    return bowling_stats.runs / bowling_stats.balls * balls_per_over



def batting_average(player):
    """
    Runs per dismissal.

    Returns:
        float | None: None while the player has not been dismissed; a
        retired-notout does not count as a dismissal
    """
    if not player.is_out:
        return None
    if player.dismissal is not None and player.dismissal.type == "retired-notout":
        return None
    stats = player.batting_stats
    return float(stats.runs if stats else 0)


# ---------------------------------------------------------------------------
# Team comparison and top performers
# ---------------------------------------------------------------------------

def team_batting_summary(team):
    """
    Aggregate batting of every player on the side who has faced a ball.

    Args:
        team (Team): The batting side

    Returns:
        dict | None: {runs, balls, strike_rate, boundaries, boundary_percentage},
        or None before anyone has faced a ball.  Runs are bat runs only.
    """
    batters = [p for p in team.players if p.batting_stats and p.batting_stats.balls > 0]
    if not batters:
        return None
    runs = sum(p.batting_stats.runs for p in batters)
    balls = sum(p.batting_stats.balls for p in batters)
    fours = sum(p.batting_stats.fours for p in batters)
    sixes = sum(p.batting_stats.sixes for p in batters)
    boundary_runs = fours * 4 + sixes * 6
    return {
        "runs": runs,
        "balls": balls,
        "strike_rate": runs / balls * 100,
        "boundaries": fours + sixes,
        "boundary_percentage": boundary_runs / runs * 100 if runs else 0.0,
    }


def team_bowling_summary(team, balls_per_over=6):
    """Wickets, runs conceded and economy over everyone on the side who has bowled."""
    bowlers = [p for p in team.players if p.bowling_stats and p.bowling_stats.balls > 0]
    if not bowlers:
        return None
    runs = sum(p.bowling_stats.runs for p in bowlers)
    balls = sum(p.bowling_stats.balls for p in bowlers)
    return {
        "wickets": sum(p.bowling_stats.wickets for p in bowlers),
        "runs": runs,
        "balls": balls,
        "economy": runs / balls * balls_per_over,
    }


def top_batters(team, count=3):
    """Players who have faced a ball, most runs first; ties keep batting order."""
    batters = [p for p in team.players if p.batting_stats and p.batting_stats.balls > 0]
    return sorted(batters, key=lambda p: -p.batting_stats.runs)[:count]


def top_bowlers(team, count=3):
    """Players who have bowled a legal ball, most wickets first."""
    bowlers = [p for p in team.players if p.bowling_stats and p.bowling_stats.balls > 0]
    return sorted(bowlers, key=lambda p: -p.bowling_stats.wickets)[:count]
