"""
engine/bowler_manager.py
========================

Centralises bowler constraint enforcement for any limited-overs format.

Rules enforced
--------------
1. Bowling quota   : a bowler may not exceed format_config.max_bowler_overs
                     per innings (4 for T20, 10 for ListA, 2 for T10).
2. No-consecutive  : when format_config.allow_consecutive_overs is False, the
                     bowler of the last completed over may not bowl the next.
3. Eligibility     : the bowler must belong to the fielding side and must
                     not be flagged can_bowl=False.

Usage (in scorer.py)
--------------------
    manager = BowlerManager(innings, bowling_team, fmt)
    manager.validate_next_over_bowler(new_bowler_id)   # raises on violation
    manager.eligible_bowlers()                          # for UI prompts

Usage counts come from the live BowlingStats aggregates, so the manager
holds no state of its own and is rebuilt whenever it is needed.
"""

import logging
from typing import Dict, List, Optional

from engine.errors import BowlerQuotaExceeded, ConsecutiveOvers, UnknownPlayer
from engine.format_config import FormatConfig

logger = logging.getLogger(__name__)


class BowlerManager:
    """
    Answers bowling-quota and consecutive-over questions for one innings.

    Parameters
    ----------
    innings      : Innings being bowled.
    bowling_team : Team in the field for that innings.
    format_config: FormatConfig for the match, already sized to the innings.
    """

    def __init__(self, innings, bowling_team, format_config: FormatConfig):
        self.innings = innings
        self.team = bowling_team
        self.fmt = format_config

    # ------------------------------------------------------------------ #
    # Public query interface                                               #
    # ------------------------------------------------------------------ #

    def overs_bowled(self, bowler_id: str) -> int:
        """Complete overs' worth of legal balls this bowler has delivered."""
        player = self.team.find_player(bowler_id)
        if player is None or player.bowling_stats is None:
            return 0
        return player.bowling_stats.balls // self.innings.balls_per_over

    def overs_remaining(self, bowler_id: str) -> Optional[int]:
        """Overs this bowler can still bowl, or None when the format has no quota."""
        if self.fmt.max_bowler_overs is None:
            return None
        return max(0, self.fmt.max_bowler_overs - self.overs_bowled(bowler_id))

    def at_quota(self, bowler_id: str) -> bool:
        remaining = self.overs_remaining(bowler_id)
        return remaining is not None and remaining <= 0

    def is_consecutive(self, bowler_id: str) -> bool:
        """True if this bowler bowled the previous (completed) over."""
        return (
            not self.fmt.allow_consecutive_overs
            and self.innings.last_over_bowler_id is not None
            and bowler_id == self.innings.last_over_bowler_id
        )

    def eligible_bowlers(self) -> List:
        """
        Return players who may bowl the next over: able to bowl, under
        quota, and not the bowler of the over just completed.
        """
        return [
            p for p in self.team.players
            if p.can_bowl and not self.at_quota(p.id) and not self.is_consecutive(p.id)
        ]

    def quota_summary(self) -> Dict[str, Dict]:
        """
        Returns {bowler_id: {bowled, remaining, at_quota}} for every player
        who has bowled this innings.  Used for UI display and debug logging.
        """
        return {
            p.id: {
                "bowled":    self.overs_bowled(p.id),
                "remaining": self.overs_remaining(p.id),
                "at_quota":  self.at_quota(p.id),
            }
            for p in self.team.players
            if p.bowling_stats is not None
        }

    # ------------------------------------------------------------------ #
    # Validation                                                           #
    # ------------------------------------------------------------------ #

    def validate_bowler(self, bowler_id: str):
        player = self.team.get_player(bowler_id)
        if not player.can_bowl:
            raise UnknownPlayer(f"{player.name} is not available to bowl")
        return player

    def validate_next_over_bowler(self, bowler_id: str):
        """
        Check a bowler for the over about to start.  Raises a retryable
        ScoringError so the caller can re-prompt for someone else.
        """
        player = self.validate_bowler(bowler_id)
        if self.is_consecutive(bowler_id):
            logger.warning(
                "BowlerManager: %s bowled the previous over (over %d)",
                bowler_id, self.innings.over_number,
            )
            raise ConsecutiveOvers(f"{player.name} bowled the previous over")
        if self.at_quota(bowler_id):
            logger.warning(
                "BowlerManager: %s has reached the quota of %s overs",
                bowler_id, self.fmt.max_bowler_overs,
            )
            raise BowlerQuotaExceeded(
                f"{player.name} has bowled {self.fmt.max_bowler_overs} overs"
            )
        return player
