import json
from datetime import datetime

from database import db
from engine.match import Match as ScoredMatch


class Match(db.Model):
    """Scored match snapshot

    The whole engine Match is stored as one JSON document in state_json.
    The remaining columns are copies for listing and filtering; state_json is
    authoritative.
    """
    __tablename__ = 'matches'

    id = db.Column(db.String(36), primary_key=True)  # UUID

    # Listing copies
    team_a_name = db.Column(db.String(100))
    team_b_name = db.Column(db.String(100))
    match_format = db.Column(db.String(20), default='T20')
    phase = db.Column(db.String(30), index=True)
    result_description = db.Column(db.String(200))  # e.g., "Lions won by 4 wickets"

    state_json = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def load(self):
        """Rebuild the engine Match from the stored snapshot."""
        return ScoredMatch.from_dict(json.loads(self.state_json))

    def store(self, match):
        """Overwrite the snapshot (last write wins) and refresh listing columns."""
        self.state_json = json.dumps(match.to_dict())
        self.team_a_name = match.team_a.name
        self.team_b_name = match.team_b.name
        self.match_format = match.match_format
        self.phase = match.phase.value
        self.result_description = (match.result or "")[:200]

    @classmethod
    def from_scored(cls, match):
        record = cls(id=match.id)
        record.store(match)
        return record

    def to_listing(self):
        return {
            "id": self.id,
            "team_a": self.team_a_name,
            "team_b": self.team_b_name,
            "match_format": self.match_format,
            "phase": self.phase,
            "result": self.result_description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
