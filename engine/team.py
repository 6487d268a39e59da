# ── engine/team.py ──

from dataclasses import asdict, dataclass

from .errors import UnknownPlayer
from .player import Player

TEAM_IDS = ("A", "B")


@dataclass
class Extras:
    wides: int = 0
    noballs: int = 0
    byes: int = 0
    legbyes: int = 0
    penalties: int = 0

    @property
    def total(self):
        return self.wides + self.noballs + self.byes + self.legbyes + self.penalties


class Team:
    def __init__(self, id, name, players=None, score=0, wickets=0, extras=None):
        if id not in TEAM_IDS:
            raise ValueError(f"team id must be one of {TEAM_IDS}")
        self.id = id
        self.name = name
        self.players = list(players or [])
        self.score = score
        self.wickets = wickets
        self.extras = extras or Extras()

    def find_player(self, player_id):
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def get_player(self, player_id):
        player = self.find_player(player_id)
        if player is None:
            raise UnknownPlayer(f"Player {player_id!r} is not in team {self.name!r}")
        return player

    def add_player(self, player):
        if self.find_player(player.id) is not None:
            raise ValueError(f"Duplicate player id {player.id!r} in team {self.name!r}")
        self.players.append(player)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "players": [p.to_dict() for p in self.players],
            "score": self.score,
            "wickets": self.wickets,
            "extras": asdict(self.extras),
        }

    @staticmethod
    def from_dict(data):
        players = [Player.from_dict(p) for p in data.get("players", [])]
        return Team(
            id=data["id"],
            name=data["name"],
            players=players,
            score=data.get("score", 0),
            wickets=data.get("wickets", 0),
            extras=Extras(**data.get("extras", {})),
        )

    def __repr__(self):
        return f"Team(id={self.id!r}, name={self.name!r}, score={self.score}/{self.wickets})"
