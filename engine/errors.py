"""
engine/errors.py
================

Exception taxonomy for the scoring engine.

Every error raised by an engine operation derives from ScoringError and
carries the HTTP status the JSON layer answers with.  Errors marked
retryable are the ones a scorer can fix by re-submitting (e.g. picking a
different bowler); the route layer reports them with 409.
"""


class ScoringError(Exception):
    """Base class for all engine errors."""
    status_code = 400
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)
        self.message = message or self.__doc__

    def to_dict(self):
        return {"error": type(self).__name__, "message": self.message}


class NoActiveStriker(ScoringError):
    """No striker (or non-striker) is set for the current innings."""
    status_code = 409
    retryable = True


class NoActiveBowler(ScoringError):
    """No bowler is set for the current innings."""
    status_code = 409
    retryable = True


class OverNotComplete(ScoringError):
    """The current over has not been completed yet."""
    status_code = 409


# Name used by display-layer callers for the same condition.
OverAlreadyComplete = OverNotComplete


class InvalidDismissalOnFreeHit(ScoringError):
    """Only run-outs, obstruction and hitting the ball twice are allowed on a free hit."""
    status_code = 409


class EmptyEventLog(ScoringError):
    """There is nothing to undo in the current innings."""
    status_code = 409


class InningsComplete(ScoringError):
    """The current innings is already complete."""
    status_code = 409


class InningsInProgress(ScoringError):
    """The first innings is still in progress."""
    status_code = 409


class SecondInningsStarted(ScoringError):
    """The second innings has already been started."""
    status_code = 409


class InvalidDelivery(ScoringError):
    """The delivery parameters are invalid."""
    status_code = 400


class UnknownPlayer(ScoringError):
    """The player does not belong to the expected team."""
    status_code = 404


class InvalidBatter(ScoringError):
    """The player cannot come in to bat."""
    status_code = 409
    retryable = True


class BowlerQuotaExceeded(ScoringError):
    """The bowler has used up the format's bowling quota."""
    status_code = 409
    retryable = True


class ConsecutiveOvers(ScoringError):
    """A bowler may not bowl two overs in a row."""
    status_code = 409
    retryable = True
