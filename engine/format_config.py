"""
engine/format_config.py
=======================

Single source of truth for all format-specific parameters in CreaseScore.

Every engine component that has a format-sensitive value (overs per innings,
balls per over, bowling quota) reads it from a FormatConfig instance rather
than hardcoding T20 constants.  Adding a new format requires only a new entry
in FORMAT_REGISTRY.

Usage
-----
    from engine.format_config import get_format

    fmt = get_format(payload.get("match_format"))
    fmt.overs             # 20, 50, 10 or None (Custom)
    fmt.max_bowler_overs  # 4, 10, 2 or None (no quota)
    fmt.balls_per_over    # 6
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional


# ---------------------------------------------------------------------------
# FormatConfig
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormatConfig:
    """
    Complete parameterisation of a limited-overs format.

    Attributes
    ----------
    name                    : canonical format name ("T20", "ListA", ...)
    overs                   : overs per innings, None for an open innings
    balls_per_over          : legal deliveries per over
    max_bowler_overs        : bowling quota per bowler per innings, None = no quota
    allow_consecutive_overs : whether a bowler may bowl back-to-back overs
    """
    name: str
    overs: Optional[int]
    balls_per_over: int = 6
    max_bowler_overs: Optional[int] = None
    allow_consecutive_overs: bool = False

    def with_overs(self, overs: Optional[int], balls_per_over: Optional[int] = None) -> "FormatConfig":
        """
        Return a copy with a different innings length.

        The bowling quota of a fixed format scales with the new length
        (one fifth of the overs, rounded up), matching the T20/ListA ratio.
        """
        bpo = balls_per_over or self.balls_per_over
        if overs is None or overs == self.overs:
            return replace(self, balls_per_over=bpo)
        quota = None
        if self.max_bowler_overs is not None:
            quota = max(1, -(-overs // 5))
        return replace(self, overs=overs, balls_per_over=bpo, max_bowler_overs=quota)


# ---------------------------------------------------------------------------
# Public registry: look up by match_format string
# ---------------------------------------------------------------------------

FORMAT_REGISTRY: Dict[str, FormatConfig] = {
    "T20":    FormatConfig(name="T20", overs=20, max_bowler_overs=4),
    "ListA":  FormatConfig(name="ListA", overs=50, max_bowler_overs=10),
    "T10":    FormatConfig(name="T10", overs=10, max_bowler_overs=2),
    "Custom": FormatConfig(name="Custom", overs=None),
}

DEFAULT_FORMAT = "T20"


def get_format(match_format: Optional[str]) -> FormatConfig:
    """
    Return the FormatConfig for the given match_format string.
    Defaults to T20 for None or unrecognised values.
    """
    return FORMAT_REGISTRY.get(match_format or DEFAULT_FORMAT, FORMAT_REGISTRY[DEFAULT_FORMAT])
