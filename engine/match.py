"""
engine/match.py
===============

Match and Innings state for a scored limited-overs match.

The objects here are plain mutable containers.  All rule logic lives in the
scoring operations (engine/scorer.py), the undo engine (engine/undo.py) and
the completion/result logic (engine/result.py), which read and mutate a
Match passed to them explicitly.
"""

import time
from enum import Enum

from engine.events import event_from_dict
from engine.team import Team

INTERVAL_TYPES = ("drinks", "innings", "lunch", "tea", "custom")


class MatchPhase(str, Enum):
    INNINGS1_IN_PROGRESS = "innings1_in_progress"
    INNINGS_BREAK = "innings_break"
    INNINGS2_IN_PROGRESS = "innings2_in_progress"
    MATCH_TIED = "match_tied"
    MATCH_COMPLETE = "match_complete"


class Innings:
    def __init__(
        self,
        batting_team,
        bowling_team,
        striker_id="",
        non_striker_id="",
        bowler_id="",
        over_number=0,
        legal_balls_in_current_over=0,
        free_hit=False,
        balls_per_over=6,
        max_overs=None,
        target=None,
        is_complete=False,
        closed_manually=False,
        is_interval=False,
        interval_type=None,
        interval_message=None,
        last_over_bowler_id=None,
        events=None,
    ):
        self.batting_team = batting_team
        self.bowling_team = bowling_team
        self.striker_id = striker_id
        self.non_striker_id = non_striker_id
        self.bowler_id = bowler_id
        self.over_number = over_number
        self.legal_balls_in_current_over = legal_balls_in_current_over
        self.free_hit = free_hit
        self.balls_per_over = balls_per_over
        self.max_overs = max_overs
        self.target = target
        self.is_complete = is_complete
        # Set by end_innings; undo never reopens such an innings
        self.closed_manually = closed_manually
        self.is_interval = is_interval
        self.interval_type = interval_type
        self.interval_message = interval_message
        # Bowler of the last completed over, for the consecutive-overs rule
        self.last_over_bowler_id = last_over_bowler_id
        self.events = list(events or [])

    @property
    def legal_balls_bowled(self):
        return self.over_number * self.balls_per_over + self.legal_balls_in_current_over

    @property
    def overs_display(self):
        return f"{self.over_number}.{self.legal_balls_in_current_over}"

    def to_dict(self):
        return {
            "batting_team": self.batting_team,
            "bowling_team": self.bowling_team,
            "striker_id": self.striker_id,
            "non_striker_id": self.non_striker_id,
            "bowler_id": self.bowler_id,
            "over_number": self.over_number,
            "legal_balls_in_current_over": self.legal_balls_in_current_over,
            "free_hit": self.free_hit,
            "balls_per_over": self.balls_per_over,
            "max_overs": self.max_overs,
            "target": self.target,
            "is_complete": self.is_complete,
            "closed_manually": self.closed_manually,
            "is_interval": self.is_interval,
            "interval_type": self.interval_type,
            "interval_message": self.interval_message,
            "last_over_bowler_id": self.last_over_bowler_id,
            "events": [e.to_dict() for e in self.events],
        }

    @staticmethod
    def from_dict(data):
        kwargs = dict(data)
        kwargs["events"] = [event_from_dict(e) for e in data.get("events", [])]
        return Innings(**kwargs)


class Match:
    def __init__(
        self,
        id,
        team_a,
        team_b,
        innings1,
        innings2=None,
        toss_winner=None,
        elected=None,
        match_format="T20",
        phase=MatchPhase.INNINGS1_IN_PROGRESS,
        result="",
        created_at=None,
        updated_at=None,
    ):
        self.id = id
        self.team_a = team_a
        self.team_b = team_b
        self.innings1 = innings1
        self.innings2 = innings2
        self.toss_winner = toss_winner
        self.elected = elected
        self.match_format = match_format
        self.phase = MatchPhase(phase)
        self.result = result
        self.created_at = created_at or time.time()
        self.updated_at = updated_at or self.created_at

    # ------------------------------------------------------------------ #
    # Navigation helpers                                                   #
    # ------------------------------------------------------------------ #

    @property
    def current_innings(self):
        return 1 if self.innings2 is None else 2

    @property
    def innings(self):
        """The innings currently receiving deliveries."""
        return self.innings1 if self.innings2 is None else self.innings2

    @property
    def is_complete(self):
        return self.phase in (MatchPhase.MATCH_TIED, MatchPhase.MATCH_COMPLETE)

    def team(self, team_id):
        return self.team_a if team_id == "A" else self.team_b

    def batting_team(self, innings=None):
        return self.team((innings or self.innings).batting_team)

    def bowling_team(self, innings=None):
        return self.team((innings or self.innings).bowling_team)

    def all_innings(self):
        return [i for i in (self.innings1, self.innings2) if i is not None]

    # ------------------------------------------------------------------ #
    # Serialization                                                        #
    # ------------------------------------------------------------------ #

    def to_dict(self):
        return {
            "id": self.id,
            "team_a": self.team_a.to_dict(),
            "team_b": self.team_b.to_dict(),
            "toss_winner": self.toss_winner,
            "elected": self.elected,
            "match_format": self.match_format,
            "current_innings": self.current_innings,
            "innings1": self.innings1.to_dict(),
            "innings2": self.innings2.to_dict() if self.innings2 else None,
            "phase": self.phase.value,
            "is_complete": self.is_complete,
            "result": self.result,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @staticmethod
    def from_dict(data):
        return Match(
            id=data["id"],
            team_a=Team.from_dict(data["team_a"]),
            team_b=Team.from_dict(data["team_b"]),
            innings1=Innings.from_dict(data["innings1"]),
            innings2=Innings.from_dict(data["innings2"]) if data.get("innings2") else None,
            toss_winner=data.get("toss_winner"),
            elected=data.get("elected"),
            match_format=data.get("match_format", "T20"),
            phase=data.get("phase", MatchPhase.INNINGS1_IN_PROGRESS),
            result=data.get("result", ""),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def __repr__(self):
        return f"Match(id={self.id!r}, phase={self.phase.value}, result={self.result!r})"
