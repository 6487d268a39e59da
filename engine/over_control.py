"""
Over/strike controller shared by every delivery operation.

Strike rotates on an odd number of runs run between the wickets, and again,
unconditionally, when the over ends.  Only legal deliveries advance the ball
counter or consume an active free hit.
"""

import logging

logger = logging.getLogger(__name__)


def swap_strike(innings):
    innings.striker_id, innings.non_striker_id = innings.non_striker_id, innings.striker_id


def rotate_strike_if_odd(runs, innings):
    if runs % 2 == 1:
        swap_strike(innings)


def rotate_strike_for_over_end(innings):
    swap_strike(innings)


def advance_legal_ball(innings):
    """Count one legal delivery and return its 1-based number within the over."""
    innings.legal_balls_in_current_over += 1
    return innings.legal_balls_in_current_over


def consume_free_hit(innings, legal):
    if legal and innings.free_hit:
        innings.free_hit = False


def over_is_complete(innings):
    return innings.legal_balls_in_current_over >= innings.balls_per_over


def complete_over(innings):
    """Close the current over: next over number, fresh ball count, change ends."""
    logger.debug(
        "Over %d complete (bowler=%s)", innings.over_number + 1, innings.bowler_id
    )
    innings.last_over_bowler_id = innings.bowler_id
    innings.over_number += 1
    innings.legal_balls_in_current_over = 0
    rotate_strike_for_over_end(innings)
