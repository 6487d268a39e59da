"""
Test suite for derived queries and the scorecard
Tests engine/stats_service.py and engine/scorecard.py
"""

import pytest

from engine import scorer, stats_service
from engine.player import BattingStats, BowlingStats
from engine.result import update_match_result
from engine.scorecard import batting_card, bowling_card, match_summary, render_scorecard


class TestRunRates:
    """Pure run-rate helpers."""

    def test_current_run_rate(self):
        """Runs per six-ball over."""
        assert stats_service.current_run_rate(30, 5, 0) == pytest.approx(6.0)
        assert stats_service.current_run_rate(10, 1, 3) == pytest.approx(6.6667, rel=1e-3)

    def test_current_run_rate_before_first_ball(self):
        """No balls bowled gives zero, not a division error."""
        assert stats_service.current_run_rate(0, 0, 0) == 0.0

    def test_current_run_rate_eight_ball_overs(self):
        """Overs follow the innings' balls per over."""
        assert stats_service.current_run_rate(10, 1, 0, 8) == pytest.approx(10.0)

    def test_required_run_rate(self):
        """Runs still needed per over."""
        assert stats_service.required_run_rate(150, 100, 5, 0) == pytest.approx(10.0)

    def test_required_run_rate_never_negative(self):
        """Target already passed gives zero."""
        assert stats_service.required_run_rate(100, 120, 2, 0) == 0.0

    def test_required_run_rate_no_balls_left(self):
        """Nothing remaining gives zero."""
        assert stats_service.required_run_rate(150, 100, 0, 0) == 0.0

    def test_remaining_balls(self, match, match_factory):
        """T20 innings starts with 120 balls; unlimited has none."""
        assert stats_service.remaining_balls_in_innings(match.innings) == 120
        scorer.apply_run(match, 0)
        scorer.apply_wide(match)
        assert stats_service.remaining_balls_in_innings(match.innings) == 119
        unlimited = match_factory("Custom")
        assert stats_service.remaining_balls_in_innings(unlimited.innings) is None

    def test_projected_score(self, match):
        """Current rate carried over the remaining overs."""
        for _ in range(6):
            scorer.apply_run(match, 1)
        assert stats_service.projected_score(match) == pytest.approx(120.0)

    def test_innings_required_run_rate(self, chase_match):
        """150 needed off 20 overs is 7.5 an over."""
        assert stats_service.innings_required_run_rate(chase_match) == pytest.approx(7.5)

    def test_innings_required_run_rate_first_innings(self, match):
        """Zero while batting first."""
        assert stats_service.innings_required_run_rate(match) == 0.0


class TestBallDisplay:
    """Display strings for events."""

    @pytest.mark.parametrize("operation,expected", [
        (lambda m: scorer.apply_run(m, 0), "•"),
        (lambda m: scorer.apply_run(m, 2), "2"),
        (lambda m: scorer.apply_run(m, 4), "4"),
        (lambda m: scorer.apply_run(m, 6), "6"),
        (lambda m: scorer.apply_wide(m), "Wd"),
        (lambda m: scorer.apply_wide(m, 2), "3Wd"),
        (lambda m: scorer.apply_no_ball(m), "Nb"),
        (lambda m: scorer.apply_no_ball(m, 4), "Nb+4"),
        (lambda m: scorer.apply_bye(m, 2), "2B"),
        (lambda m: scorer.apply_leg_bye(m, 1), "1Lb"),
        (lambda m: scorer.apply_wicket(m, "lbw"), "W"),
        (lambda m: scorer.apply_penalty(m), "5P"),
        (lambda m: scorer.apply_dead_ball(m), "D"),
    ])
    def test_format_ball(self, match, operation, expected):
        """Each event kind has its own short form."""
        operation(match)
        assert stats_service.format_ball(match.innings.events[-1]) == expected

    def test_format_unknown_event(self):
        """Anything that is not a ball event is rejected."""
        with pytest.raises(TypeError):
            stats_service.format_ball(object())

    def test_last_six_balls_skip_illegal(self, match):
        """Only legal deliveries appear."""
        for runs in (1, 2, 3):
            scorer.apply_run(match, runs)
        scorer.apply_wide(match)
        for runs in (4, 0, 6, 2):
            scorer.apply_run(match, runs)
        assert stats_service.last_six_balls(match.innings) == ["2", "3", "4", "•", "6", "2"]

    def test_current_over_balls(self, match):
        """Every event of the over in progress, extras included."""
        scorer.apply_run(match, 1)
        scorer.apply_wide(match)
        scorer.apply_run(match, 0)
        assert stats_service.current_over_balls(match.innings) == ["1", "Wd", "•"]

    def test_current_over_balls_after_over(self, match):
        """Right after the over ends the completed over is shown."""
        for _ in range(6):
            scorer.apply_run(match, 0)
        assert len(stats_service.current_over_balls(match.innings)) == 6


class TestReplays:
    """Progression and wicket falls rebuilt from the log."""

    def test_run_rate_progression(self, match):
        """One entry per over plus the partial over."""
        for _ in range(6):
            scorer.apply_run(match, 1)
        for _ in range(3):
            scorer.apply_run(match, 2)
        progression = stats_service.run_rate_progression(match.innings)

        assert progression[0] == {"over": 1, "score": 6, "run_rate": 6.0, "runs_in_over": 6}
        assert progression[1]["over"] == pytest.approx(1.5)
        assert progression[1]["score"] == 12
        assert progression[1]["run_rate"] == pytest.approx(8.0)
        assert progression[1]["runs_in_over"] == 6

    def test_progression_counts_extras(self, match):
        """Wides add runs without adding balls."""
        scorer.apply_wide(match, 4)
        scorer.apply_run(match, 0)
        progression = stats_service.run_rate_progression(match.innings)
        assert progression[-1]["score"] == 5

    def test_progression_trailing_extras_after_over(self, match):
        """A wide straight after an over closes still reaches the series."""
        for _ in range(6):
            scorer.apply_run(match, 0)
        scorer.apply_wide(match, 2)
        progression = stats_service.run_rate_progression(match.innings)

        assert len(progression) == 2
        assert progression[-1]["score"] == match.team_a.score == 3
        assert progression[-1]["over"] == pytest.approx(1.0)
        assert progression[-1]["runs_in_over"] == 3
        assert progression[-1]["run_rate"] == pytest.approx(3.0)

    def test_progression_penalty_only(self, match):
        """Penalty runs before the first ball give a single zero-over point."""
        scorer.apply_penalty(match)
        progression = stats_service.run_rate_progression(match.innings)
        assert progression == [{"over": 0, "score": 5, "run_rate": 0.0, "runs_in_over": 5}]

    def test_progression_empty_log(self, match):
        """No events, no points."""
        assert stats_service.run_rate_progression(match.innings) == []

    def test_wicket_falls(self, match):
        """Score at the fall excludes the bat runs of the wicket ball."""
        scorer.apply_run(match, 1)
        scorer.apply_run(match, 2)
        scorer.apply_wicket(match, "runout-striker", runs_completed=1)
        falls = stats_service.wicket_falls(match)

        assert len(falls) == 1
        fall = falls[0]
        assert fall["innings"] == 1
        assert fall["team_id"] == "A"
        assert fall["wicket_number"] == 1
        assert fall["score"] == 3
        assert fall["over_number"] == 0
        assert fall["ball_in_over"] == 3
        assert fall["player_id"] == "a2"
        assert fall["dismissal_type"] == "runout-striker"

    def test_innings_total_matches_score(self, match):
        """The team score always equals the sum of the log."""
        scorer.apply_run(match, 3)
        scorer.apply_wide(match, 1)
        scorer.apply_no_ball(match, 2)
        scorer.apply_bye(match, 4)
        scorer.apply_penalty(match)
        scorer.apply_wicket(match, "caught", fielder="b2")
        assert stats_service.innings_total(match.innings) == match.team_a.score


class TestPlayerRatios:
    """Strike rate and economy."""

    def test_strike_rate(self):
        """Runs per hundred balls."""
        assert stats_service.strike_rate(BattingStats(runs=50, balls=25)) == pytest.approx(200.0)
        assert stats_service.strike_rate(None) == 0.0

    def test_economy_rate(self):
        """Runs per over."""
        assert stats_service.economy_rate(BowlingStats(balls=12, runs=18)) == pytest.approx(9.0)
        assert stats_service.economy_rate(BowlingStats()) == 0.0


def play_opening_balls(match):
    """a1 hits 4, 6, 1; a2 plays a dot; then a wide."""
    scorer.apply_run(match, 4)
    scorer.apply_run(match, 6)
    scorer.apply_run(match, 1)
    scorer.apply_run(match, 0)
    scorer.apply_wide(match)


class TestTeamComparison:
    """Side-level aggregates, batting average and top performers."""

    def test_team_batting_summary(self, match):
        """Bat runs, strike rate and share of runs in boundaries."""
        play_opening_balls(match)
        summary = stats_service.team_batting_summary(match.team_a)
        assert summary["runs"] == 11
        assert summary["balls"] == 4
        assert summary["strike_rate"] == pytest.approx(275.0)
        assert summary["boundaries"] == 2
        assert summary["boundary_percentage"] == pytest.approx(1000 / 11)

    def test_team_batting_summary_before_first_ball(self, match):
        """Nobody has batted yet."""
        assert stats_service.team_batting_summary(match.team_a) is None

    def test_team_bowling_summary(self, match):
        """The wide is charged to the bowler but adds no ball."""
        play_opening_balls(match)
        summary = stats_service.team_bowling_summary(match.team_b)
        assert summary == {"wickets": 0, "runs": 12, "balls": 4, "economy": pytest.approx(18.0)}
        assert stats_service.team_bowling_summary(match.team_a) is None

    def test_top_batters(self, match):
        """Most runs first, only those who have faced a ball."""
        play_opening_balls(match)
        assert [p.id for p in stats_service.top_batters(match.team_a)] == ["a1", "a2"]
        assert [p.id for p in stats_service.top_batters(match.team_a, 1)] == ["a1"]

    def test_top_bowlers(self, match):
        """Most wickets first."""
        scorer.apply_run(match, 0)
        scorer.change_bowler(match, "b6")
        scorer.apply_wicket(match, "bowled")
        ids = [p.id for p in stats_service.top_bowlers(match.team_b)]
        assert ids == ["b6", "b1"]

    def test_batting_average(self, match):
        """Runs per dismissal; not out has no average."""
        scorer.apply_run(match, 2)
        scorer.apply_wicket(match, "bowled")
        assert stats_service.batting_average(match.team_a.get_player("a1")) == 2.0
        assert stats_service.batting_average(match.team_a.get_player("a2")) is None

    def test_batting_average_retired_not_out(self, match):
        """Retiring not out is not a dismissal."""
        scorer.apply_run(match, 3)
        scorer.apply_wicket(match, "retired-notout")
        assert stats_service.batting_average(match.team_a.get_player("a2")) is None


class TestScorecard:
    """Cards, summary and the text rendering."""

    def test_batting_card(self, match):
        """Batters who have come in, with status."""
        scorer.apply_run(match, 4)
        scorer.apply_wicket(match, "caught", fielder="Tiger 4")
        rows = batting_card(match, match.innings1)
        assert [r["player_id"] for r in rows] == ["a1", "a2"]
        assert rows[0]["runs"] == 4
        assert rows[0]["balls"] == 2
        assert rows[0]["status"] == "c (Tiger 4)"
        assert rows[1]["status"] == "not out"

    def test_bowling_card(self, match):
        """Only players who have bowled."""
        for _ in range(7):
            scorer.apply_run(match, 0)
        rows = bowling_card(match, match.innings1)
        assert len(rows) == 1
        assert rows[0]["overs"] == "1.1"
        assert rows[0]["maidens"] == 1

    def test_match_summary(self, match):
        """Summary carries the live state and both cards."""
        scorer.apply_run(match, 1)
        update_match_result(match)
        summary = match_summary(match)
        assert summary["phase"] == "innings1_in_progress"
        assert summary["current_innings"] == 1
        assert summary["striker_id"] == "a2"
        assert summary["remaining_balls"] == 119
        innings = summary["innings"][0]
        assert innings["score"] == 1
        assert innings["overs"] == "0.1"
        assert innings["extras"]["total"] == 0
        assert innings["current_over"] == ["1"]

    def test_match_summary_team_comparison(self, match):
        """Side aggregates and top performers for both teams."""
        play_opening_balls(match)
        update_match_result(match)
        summary = match_summary(match)

        comparison = summary["team_comparison"]
        assert comparison["A"]["batting"]["boundary_percentage"] == 90.91
        assert comparison["A"]["bowling"] is None
        assert comparison["B"]["batting"] is None
        assert comparison["B"]["bowling"]["economy"] == 18.0

        top = summary["top_performers"]
        assert [b["player_id"] for b in top["A"]["batters"]] == ["a1", "a2"]
        assert top["A"]["batters"][0]["average"] is None
        assert top["B"]["bowlers"] == [{
            "player_id": "b1",
            "name": "Tigers 1",
            "overs": "0.4",
            "runs": 12,
            "wickets": 0,
            "economy": 18.0,
        }]

    def test_render_scorecard(self, match):
        """Text card names both sides and the batters."""
        scorer.apply_run(match, 6)
        update_match_result(match)
        text = render_scorecard(match)
        assert "Lions vs Tigers" in text
        assert "Lions 6/0" in text
        assert "Batter" in text
        assert "Bowler" in text
