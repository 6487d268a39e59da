"""
Pytest fixtures for CreaseScore testing.
Provides reusable fixtures for the app, client, and engine-level matches.
"""

import os
import sys

import pytest
import yaml

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app import create_app
from database import db
from engine.player import Player
from engine.result import end_innings, start_match, start_second_innings
from engine.team import Team


# ==================== Application Fixtures ====================

@pytest.fixture(scope="function")
def test_config(tmp_path):
    """Create a temporary config file for testing."""
    config_path = tmp_path / "config.yaml"
    config_data = {
        "app": {
            "secret_key": "test-secret-key-for-testing-only-12345",
            "log_dir": str(tmp_path / "logs"),
            "log_level": "DEBUG",
        },
        "database": {
            "uri": f"sqlite:///{(tmp_path / 'config_default.db').as_posix()}",
        },
        "match": {
            "default_format": "T20",
            "default_overs": None,
            "balls_per_over": 6,
        },
    }

    config_path.write_text(yaml.safe_dump(config_data, sort_keys=False), encoding="utf-8")
    return config_path


@pytest.fixture(scope="function")
def app(test_config, tmp_path, monkeypatch):
    """Create and configure a test Flask application instance."""
    monkeypatch.setenv("CREASESCORE_CONFIG_PATH", str(test_config))
    test_db_file = tmp_path / "pytest_app.db"
    monkeypatch.setenv("CREASESCORE_DB_URI", f"sqlite:///{test_db_file.as_posix()}")

    app = create_app()
    app.config.update({
        "TESTING": True,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """Create a test client for the app."""
    return app.test_client()


# ==================== Team / Match Fixtures ====================

def build_team(team_id, name, size=11):
    """Team whose player ids are the lower-cased team id plus 1..size."""
    prefix = team_id.lower()
    players = [
        Player(id=f"{prefix}{i}", name=f"{name} {i}", can_bowl=(i >= 6 or i == 1))
        for i in range(1, size + 1)
    ]
    return Team(id=team_id, name=name, players=players)


@pytest.fixture(scope="function")
def make_team():
    """Factory fixture: make_team("A", "Lions") -> Team with players a1..a11."""
    return build_team


@pytest.fixture(scope="function")
def match_factory(make_team):
    """Factory fixture building an engine Match with A batting first."""
    def _factory(match_format="T20", max_overs=None, balls_per_over=None, **kwargs):
        return start_match(
            make_team("A", "Lions"),
            make_team("B", "Tigers"),
            match_format=match_format,
            max_overs=max_overs,
            balls_per_over=balls_per_over,
            match_id="test-match",
            **kwargs
        )
    return _factory


@pytest.fixture(scope="function")
def match(match_factory):
    """Fresh T20 match: a1 on strike, a2 non-striker, b1 bowling."""
    return match_factory()


@pytest.fixture(scope="function")
def chase_match(match):
    """
    Match in the second innings chasing 150: innings 1 closed on 149 with no
    balls bowled, so the B side needs 150.
    """
    match.team_a.score = 149
    end_innings(match)
    start_second_innings(match)
    return match


@pytest.fixture(scope="function")
def sample_match_payload():
    """JSON body for POST /api/matches."""
    return {
        "team_a": {
            "name": "Lions",
            "players": [{"id": f"a{i}", "name": f"Lion {i}"} for i in range(1, 12)],
        },
        "team_b": {
            "name": "Tigers",
            "players": [{"id": f"b{i}", "name": f"Tiger {i}"} for i in range(1, 12)],
        },
        "toss_winner": "A",
        "elected": "bat",
        "match_format": "T20",
    }


@pytest.fixture(scope="function")
def created_match(client, sample_match_payload):
    """Create a match through the API and return its JSON snapshot."""
    response = client.post("/api/matches", json=sample_match_payload)
    assert response.status_code == 201
    return response.get_json()


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
