"""
player.py

Defines the Player class, representing a cricketer in a scored match, plus
the lazily-created batting and bowling aggregates the scoring engine updates
ball by ball.

Stat objects start out as None and are created on a player's first
contribution.  They are updated in place (never recomputed from the event
log), so the undo engine has to reverse every change exactly, including
removing a stat object that the undone event created.

PLAYER_ROLES and DISMISSAL_TYPES are exposed so that the scoring operations can
validate their inputs against them directly.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# 0) Constants
# -----------------------------------------------------------------------------

PLAYER_ROLES: List[str] = [
    "Captain",
    "Wicketkeeper",
    "Batter",
    "Bowler",
]

DISMISSAL_TYPES: List[str] = [
    "bowled",
    "lbw",
    "caught",
    "runout-striker",
    "runout-nonstriker",
    "hitwicket",
    "stumped",
    "obstructing",
    "hit-ball-twice",
    "retired-out",
    "retired-notout",
]

# Dismissals still possible off a free hit
FREE_HIT_DISMISSALS = frozenset({
    "runout-striker",
    "runout-nonstriker",
    "obstructing",
    "hit-ball-twice",
})

# Dismissals credited to the bowler's wicket tally
BOWLER_CREDITED_DISMISSALS = frozenset({
    "bowled",
    "lbw",
    "caught",
    "stumped",
    "hitwicket",
})


# -----------------------------------------------------------------------------
# 1) Aggregates
# -----------------------------------------------------------------------------

@dataclass
class BattingStats:
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0


@dataclass
class BowlingStats:
    overs: int = 0
    balls: int = 0
    maidens: int = 0
    runs: int = 0
    wickets: int = 0


@dataclass
class Dismissal:
    type: str
    fielder: Optional[str] = None
    over: Optional[int] = None
    ball: Optional[int] = None


# -----------------------------------------------------------------------------
# 2) Player class definition
# -----------------------------------------------------------------------------

class Player:
    """
    Represents a single cricketer taking part in a scored match.

    Attributes:
        id (str): Identifier, unique within the match.
        name (str): Display name of the player.
        roles (list[str]): Zero or more of PLAYER_ROLES.
        can_bowl (bool): Whether the player may be given the ball.
        batting_stats (BattingStats | None): Created on first ball faced or run scored.
        bowling_stats (BowlingStats | None): Created on first delivery bowled.
        is_out (bool): Whether the player has been dismissed this match.
        dismissal (Dismissal | None): How the player was dismissed.
    """

    def __init__(
        self,
        id: str,
        name: str,
        roles: Optional[List[str]] = None,
        can_bowl: bool = True,
        batting_stats: Optional[BattingStats] = None,
        bowling_stats: Optional[BowlingStats] = None,
        is_out: bool = False,
        dismissal: Optional[Dismissal] = None,
    ) -> None:
        # 2a) Identity
        self.id = str(id).strip()
        if not self.id:
            raise ValueError("player id must not be empty")
        self.name = name.strip()
        if not self.name:
            raise ValueError("player name must not be empty")

        # 2b) Roles validation
        roles = list(roles or [])
        for role in roles:
            if role not in PLAYER_ROLES:
                raise ValueError(f"role must be one of {PLAYER_ROLES}")
        self.roles = roles
        self.can_bowl = bool(can_bowl)

        # 2c) Match state
        self.batting_stats = batting_stats
        self.bowling_stats = bowling_stats
        self.is_out = bool(is_out)
        self.dismissal = dismissal

    def ensure_batting_stats(self) -> BattingStats:
        if self.batting_stats is None:
            self.batting_stats = BattingStats()
        return self.batting_stats

    def ensure_bowling_stats(self) -> BowlingStats:
        if self.bowling_stats is None:
            self.bowling_stats = BowlingStats()
        return self.bowling_stats

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes this Player to a dictionary for JSON transport or storage.
        """
        return {
            "id": self.id,
            "name": self.name,
            "roles": list(self.roles),
            "can_bowl": self.can_bowl,
            "batting_stats": asdict(self.batting_stats) if self.batting_stats else None,
            "bowling_stats": asdict(self.bowling_stats) if self.bowling_stats else None,
            "is_out": self.is_out,
            "dismissal": asdict(self.dismissal) if self.dismissal else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """
        Constructs a Player instance from a dictionary. Only "id" and "name"
        are required; everything else falls back to a fresh player.
        """
        missing = {"id", "name"} - set(data.keys())
        if missing:
            raise KeyError(f"Missing keys for Player.from_dict: {missing}")

        batting = data.get("batting_stats")
        bowling = data.get("bowling_stats")
        dismissal = data.get("dismissal")
        return cls(
            id=data["id"],
            name=data["name"],
            roles=data.get("roles") or [],
            can_bowl=data.get("can_bowl", True),
            batting_stats=BattingStats(**batting) if batting else None,
            bowling_stats=BowlingStats(**bowling) if bowling else None,
            is_out=data.get("is_out", False),
            dismissal=Dismissal(**dismissal) if dismissal else None,
        )

    def __repr__(self) -> str:
        return (
            f"Player(id={self.id!r}, name={self.name!r}, roles={self.roles!r}, "
            f"is_out={self.is_out})"
        )
