"""
engine/events.py
================

The ball-event log entries.

Each delivery kind is its own frozen dataclass carrying only the payload
relevant to it.  All of them share:

  • where the ball fell  : over_number, legal_ball_in_over (None if illegal)
  • legality             : explicit `legal` flag, set by the operation that
                           created the event
  • before               : BeforeSnapshot of the innings fields the forward
                           operation may change (strike, bowler, free hit,
                           over/ball counters)
  • effects              : Effects record of the conditional side effects
                           the forward operation performed

Undo restores from `before` and reverses `effects`; it never re-derives
either through the rotation or over-completion logic.

Every variant exposes `runs_bat` and `runs_extra` so that replay code can
total the log without caring about the variant.  Code that needs to
interpret a variant dispatches over EVENT_TYPES and raises on anything it
does not know.
"""

import time
import uuid
from dataclasses import asdict, dataclass, fields
from typing import ClassVar, Dict, Optional, Type


@dataclass(frozen=True)
class BeforeSnapshot:
    striker_id: str
    non_striker_id: str
    bowler_id: str
    free_hit: bool
    over_number: int
    legal_balls: int
    last_over_bowler_id: Optional[str] = None


@dataclass(frozen=True)
class Effects:
    created_batting_stats: bool = False
    created_bowling_stats: bool = False
    over_completed: bool = False
    maiden: bool = False
    bowler_wicket: bool = False


@dataclass(frozen=True)
class BallEvent:
    id: str
    timestamp: float
    over_number: int
    legal_ball_in_over: Optional[int]
    legal: bool
    before: BeforeSnapshot
    effects: Effects

    kind: ClassVar[str] = ""

    @property
    def runs_bat(self) -> int:
        return 0

    @property
    def runs_extra(self) -> int:
        return 0

    @property
    def total_runs(self) -> int:
        return self.runs_bat + self.runs_extra

    @property
    def bowler_runs(self) -> int:
        """Runs charged to the bowler's analysis for this event."""
        return self.runs_bat

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind
        return data


@dataclass(frozen=True)
class RunEvent(BallEvent):
    runs: int
    kind: ClassVar[str] = "run"

    @property
    def runs_bat(self) -> int:
        return self.runs


@dataclass(frozen=True)
class BoundaryFourEvent(BallEvent):
    kind: ClassVar[str] = "boundary4"

    @property
    def runs_bat(self) -> int:
        return 4


@dataclass(frozen=True)
class BoundarySixEvent(BallEvent):
    kind: ClassVar[str] = "boundary6"

    @property
    def runs_bat(self) -> int:
        return 6


@dataclass(frozen=True)
class WideEvent(BallEvent):
    runs: int  # includes the one-run wide penalty
    kind: ClassVar[str] = "wide"

    @property
    def runs_extra(self) -> int:
        return self.runs

    @property
    def bowler_runs(self) -> int:
        return self.runs


@dataclass(frozen=True)
class NoBallEvent(BallEvent):
    bat_runs: int
    kind: ClassVar[str] = "noball"

    @property
    def runs_bat(self) -> int:
        return self.bat_runs

    @property
    def runs_extra(self) -> int:
        return 1

    @property
    def bowler_runs(self) -> int:
        return 1 + self.bat_runs


@dataclass(frozen=True)
class ByeEvent(BallEvent):
    runs: int
    kind: ClassVar[str] = "bye"

    @property
    def runs_extra(self) -> int:
        return self.runs

    @property
    def bowler_runs(self) -> int:
        return 0


@dataclass(frozen=True)
class LegByeEvent(BallEvent):
    runs: int
    kind: ClassVar[str] = "legbye"

    @property
    def runs_extra(self) -> int:
        return self.runs

    @property
    def bowler_runs(self) -> int:
        return 0


@dataclass(frozen=True)
class WicketEvent(BallEvent):
    wicket_type: str
    dismissed_id: str
    runs_completed: int
    fielder: Optional[str] = None
    kind: ClassVar[str] = "wicket"

    @property
    def runs_bat(self) -> int:
        return self.runs_completed


@dataclass(frozen=True)
class PenaltyEvent(BallEvent):
    runs: int
    kind: ClassVar[str] = "penalty"

    @property
    def runs_extra(self) -> int:
        return self.runs

    @property
    def bowler_runs(self) -> int:
        return 0


@dataclass(frozen=True)
class DeadBallEvent(BallEvent):
    kind: ClassVar[str] = "dead"


EVENT_TYPES: Dict[str, Type[BallEvent]] = {
    cls.kind: cls
    for cls in (
        RunEvent,
        BoundaryFourEvent,
        BoundarySixEvent,
        WideEvent,
        NoBallEvent,
        ByeEvent,
        LegByeEvent,
        WicketEvent,
        PenaltyEvent,
        DeadBallEvent,
    )
}


def new_event_id() -> str:
    return uuid.uuid4().hex


def now() -> float:
    return time.time()


def event_from_dict(data: dict) -> BallEvent:
    """Rebuild a BallEvent from the dict produced by BallEvent.to_dict()."""
    kind = data.get("kind")
    cls = EVENT_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"Unknown ball event kind: {kind!r}")
    kwargs = {f.name: data[f.name] for f in fields(cls) if f.name in data}
    kwargs["before"] = BeforeSnapshot(**data["before"])
    kwargs["effects"] = Effects(**data.get("effects", {}))
    return cls(**kwargs)
