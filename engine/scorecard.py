"""
engine/scorecard.py
===================

Batting and bowling cards, the JSON match summary for display layers, and a
plain-text scorecard rendered with tabulate.
"""

from tabulate import tabulate

from engine import stats_service

DISMISSAL_LABELS = {
    "bowled": "b",
    "lbw": "lbw",
    "caught": "c",
    "runout-striker": "run out",
    "runout-nonstriker": "run out",
    "hitwicket": "hit wicket",
    "stumped": "st",
    "obstructing": "obstructing the field",
    "hit-ball-twice": "hit the ball twice",
    "retired-out": "retired out",
    "retired-notout": "retired not out",
}


def _status(player, innings):
    if player.is_out and player.dismissal:
        label = DISMISSAL_LABELS.get(player.dismissal.type, player.dismissal.type)
        if player.dismissal.fielder:
            return f"{label} ({player.dismissal.fielder})"
        return label
    if player.id in (innings.striker_id, innings.non_striker_id):
        return "not out*" if player.id == innings.striker_id else "not out"
    return "not out"


def batting_card(match, innings):
    rows = []
    for player in match.batting_team(innings).players:
        at_crease = player.id in (innings.striker_id, innings.non_striker_id)
        if player.batting_stats is None and not player.is_out and not at_crease:
            continue
        stats = player.batting_stats
        rows.append({
            "player_id": player.id,
            "name": player.name,
            "status": _status(player, innings),
            "runs": stats.runs if stats else 0,
            "balls": stats.balls if stats else 0,
            "fours": stats.fours if stats else 0,
            "sixes": stats.sixes if stats else 0,
            "strike_rate": round(stats_service.strike_rate(stats), 2),
        })
    return rows


def bowling_card(match, innings):
    bpo = innings.balls_per_over
    rows = []
    for player in match.bowling_team(innings).players:
        stats = player.bowling_stats
        if stats is None:
            continue
        rows.append({
            "player_id": player.id,
            "name": player.name,
            "overs": f"{stats.balls // bpo}.{stats.balls % bpo}",
            "maidens": stats.maidens,
            "runs": stats.runs,
            "wickets": stats.wickets,
            "economy": round(stats_service.economy_rate(stats, bpo), 2),
        })
    return rows


def _innings_summary(match, innings, number):
    team = match.batting_team(innings)
    extras = team.extras
    return {
        "number": number,
        "batting_team": team.id,
        "bowling_team": innings.bowling_team,
        "score": team.score,
        "wickets": team.wickets,
        "overs": innings.overs_display,
        "max_overs": innings.max_overs,
        "target": innings.target,
        "extras": {
            "wides": extras.wides,
            "noballs": extras.noballs,
            "byes": extras.byes,
            "legbyes": extras.legbyes,
            "penalties": extras.penalties,
            "total": extras.total,
        },
        "run_rate": round(stats_service.innings_run_rate(match, innings), 2),
        "projected_score": round(stats_service.projected_score(match, innings), 1),
        "last_six_balls": stats_service.last_six_balls(innings),
        "current_over": stats_service.current_over_balls(innings),
        "progression": stats_service.run_rate_progression(innings),
        "batting": batting_card(match, innings),
        "bowling": bowling_card(match, innings),
        "is_complete": innings.is_complete,
    }


def _rounded(summary):
    if summary is None:
        return None
    return {k: round(v, 2) if isinstance(v, float) else v for k, v in summary.items()}


def _team_comparison(match, bpo):
    return {
        team.id: {
            "name": team.name,
            "batting": _rounded(stats_service.team_batting_summary(team)),
            "bowling": _rounded(stats_service.team_bowling_summary(team, bpo)),
        }
        for team in (match.team_a, match.team_b)
    }


def _top_performers(match, bpo, count=3):
    performers = {}
    for team in (match.team_a, match.team_b):
        batters = []
        for player in stats_service.top_batters(team, count):
            stats = player.batting_stats
            average = stats_service.batting_average(player)
            batters.append({
                "player_id": player.id,
                "name": player.name,
                "runs": stats.runs,
                "balls": stats.balls,
                "strike_rate": round(stats_service.strike_rate(stats), 2),
                "average": round(average, 2) if average is not None else None,
            })
        bowlers = []
        for player in stats_service.top_bowlers(team, count):
            stats = player.bowling_stats
            bowlers.append({
                "player_id": player.id,
                "name": player.name,
                "overs": f"{stats.balls // bpo}.{stats.balls % bpo}",
                "runs": stats.runs,
                "wickets": stats.wickets,
                "economy": round(stats_service.economy_rate(stats, bpo), 2),
            })
        performers[team.id] = {"batters": batters, "bowlers": bowlers}
    return performers


def match_summary(match):
    """Everything a display layer needs in one JSON-ready dict."""
    innings = match.innings
    return {
        "match_id": match.id,
        "phase": match.phase.value,
        "result": match.result,
        "current_innings": match.current_innings,
        "striker_id": innings.striker_id,
        "non_striker_id": innings.non_striker_id,
        "bowler_id": innings.bowler_id,
        "free_hit": innings.free_hit,
        "required_run_rate": round(stats_service.innings_required_run_rate(match), 2),
        "remaining_balls": stats_service.remaining_balls_in_innings(innings),
        "innings": [
            _innings_summary(match, inn, n)
            for n, inn in enumerate(match.all_innings(), start=1)
        ],
        "wicket_falls": stats_service.wicket_falls(match),
        "team_comparison": _team_comparison(match, innings.balls_per_over),
        "top_performers": _top_performers(match, innings.balls_per_over),
    }


def render_scorecard(match):
    """Plain-text scorecard for both innings."""
    blocks = [f"{match.team_a.name} vs {match.team_b.name}", match.result or ""]
    for number, innings in enumerate(match.all_innings(), start=1):
        team = match.batting_team(innings)
        blocks.append(
            f"\nInnings {number}: {team.name} {team.score}/{team.wickets} "
            f"({innings.overs_display} ov)"
        )
        batting = [
            [r["name"], r["status"], r["runs"], r["balls"], r["fours"], r["sixes"], r["strike_rate"]]
            for r in batting_card(match, innings)
        ]
        blocks.append(tabulate(
            batting,
            headers=["Batter", "", "R", "B", "4s", "6s", "SR"],
            tablefmt="simple",
        ))
        blocks.append(f"Extras: {team.extras.total} (wd {team.extras.wides}, nb {team.extras.noballs}, "
                      f"b {team.extras.byes}, lb {team.extras.legbyes}, pen {team.extras.penalties})")
        bowling = [
            [r["name"], r["overs"], r["maidens"], r["runs"], r["wickets"], r["economy"]]
            for r in bowling_card(match, innings)
        ]
        blocks.append(tabulate(
            bowling,
            headers=["Bowler", "O", "M", "R", "W", "Econ"],
            tablefmt="simple",
        ))
    return "\n".join(blocks) + "\n"
