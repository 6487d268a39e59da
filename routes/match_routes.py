"""Match scoring API route registration."""

import time

from flask import Response, jsonify, request

from engine import scorer
from engine.errors import InvalidDelivery
from engine.format_config import FORMAT_REGISTRY
from engine.player import Player
from engine.result import end_innings, start_match, start_second_innings, update_match_result
from engine.scorecard import match_summary, render_scorecard
from engine.team import TEAM_IDS, Team
from engine.undo import undo_or_raise

DELIVERY_KINDS = ("run", "wide", "noball", "bye", "legbye", "wicket", "penalty", "dead")


def register_match_routes(
    app,
    *,
    db,
    DBMatch,
    match_defaults,
):
    def _json_body(required=True):
        data = request.get_json(silent=True)
        if data is None and not required:
            return {}, None
        if not isinstance(data, dict):
            return None, (jsonify({"error": "BadRequest", "message": "Invalid or missing JSON body"}), 400)
        return data, None

    def _load_record(match_id):
        record = db.session.get(DBMatch, match_id)
        if record is None:
            return None, (jsonify({"error": "MatchNotFound", "message": f"Match {match_id} not found"}), 404)
        return record, None

    def _save(record, match):
        match.updated_at = time.time()
        record.store(match)
        db.session.commit()

    def _mutate(match_id, action):
        """
        Load the snapshot, run one engine call, re-evaluate completion and
        persist.  Returns (match, action result, error response).
        """
        record, err = _load_record(match_id)
        if err:
            return None, None, err
        match = record.load()
        outcome = action(match)
        update_match_result(match)
        _save(record, match)
        return match, outcome, None

    def _build_team(team_id, data):
        if not isinstance(data, dict) or not str(data.get("name") or "").strip():
            raise ValueError(f"team_{team_id.lower()} needs a name")
        raw_players = data.get("players") or []
        if len(raw_players) < 2:
            raise ValueError(f"team_{team_id.lower()} needs at least two players")
        team = Team(id=team_id, name=str(data["name"]).strip())
        for i, raw in enumerate(raw_players, start=1):
            if isinstance(raw, str):
                raw = {"name": raw}
            team.add_player(Player(
                id=raw.get("id") or f"{team_id.lower()}{i}",
                name=str(raw.get("name") or ""),
                roles=raw.get("roles") or [],
                can_bowl=raw.get("can_bowl", True),
            ))
        return team

    @app.route("/api/matches", methods=["GET"])
    def list_matches():
        records = DBMatch.query.order_by(DBMatch.updated_at.desc()).all()
        return jsonify({"matches": [r.to_listing() for r in records]}), 200

    @app.route("/api/matches", methods=["POST"])
    def create_match():
        data, err = _json_body()
        if err:
            return err

        match_format = data.get("match_format") or match_defaults.get("default_format") or "T20"
        if match_format not in FORMAT_REGISTRY:
            return jsonify({"error": "BadRequest", "message": "Invalid or unsupported match format"}), 400

        toss_winner = data.get("toss_winner")
        elected = data.get("elected")
        if toss_winner is not None and toss_winner not in TEAM_IDS:
            return jsonify({"error": "BadRequest", "message": "toss_winner must be A or B"}), 400
        if elected is not None and elected not in ("bat", "bowl"):
            return jsonify({"error": "BadRequest", "message": "elected must be bat or bowl"}), 400

        max_overs = data.get("max_overs", match_defaults.get("default_overs"))
        balls_per_over = data.get("balls_per_over", match_defaults.get("balls_per_over"))
        for label, value in (("max_overs", max_overs), ("balls_per_over", balls_per_over)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                return jsonify({"error": "BadRequest", "message": f"{label} must be a positive integer"}), 400

        try:
            team_a = _build_team("A", data.get("team_a"))
            team_b = _build_team("B", data.get("team_b"))
        except ValueError as e:
            return jsonify({"error": "BadRequest", "message": str(e)}), 400

        match = start_match(
            team_a,
            team_b,
            toss_winner=toss_winner,
            elected=elected,
            match_format=match_format,
            max_overs=max_overs,
            balls_per_over=balls_per_over,
        )
        db.session.add(DBMatch.from_scored(match))
        db.session.commit()
        app.logger.info(f"[Match] Created {match.id}: {team_a.name} vs {team_b.name} ({match.match_format})")
        return jsonify(match.to_dict()), 201

    @app.route("/api/matches/<match_id>", methods=["GET"])
    def get_match(match_id):
        record, err = _load_record(match_id)
        if err:
            return err
        return jsonify(record.load().to_dict()), 200

    @app.route("/api/matches/<match_id>", methods=["DELETE"])
    def delete_match(match_id):
        record, err = _load_record(match_id)
        if err:
            return err
        db.session.delete(record)
        db.session.commit()
        app.logger.info(f"[Match] Deleted {match_id}")
        return jsonify({"deleted": match_id}), 200

    @app.route("/api/matches/<match_id>/deliveries", methods=["POST"])
    def record_delivery(match_id):
        data, err = _json_body()
        if err:
            return err
        kind = data.get("kind")
        if kind not in DELIVERY_KINDS:
            raise InvalidDelivery(f"kind must be one of {DELIVERY_KINDS}")
        runs = data.get("runs", 0)

        def action(match):
            before = len(match.innings.events)
            if kind == "run":
                scorer.apply_run(match, runs)
            elif kind == "wide":
                scorer.apply_wide(match, runs)
            elif kind == "noball":
                scorer.apply_no_ball(match, runs)
            elif kind == "bye":
                scorer.apply_bye(match, runs)
            elif kind == "legbye":
                scorer.apply_leg_bye(match, runs)
            elif kind == "wicket":
                scorer.apply_wicket_or_raise(match, data.get("wicket_type"), data.get("fielder"), runs)
            elif kind == "penalty":
                scorer.apply_penalty(match, data.get("runs", 5))
            else:
                scorer.apply_dead_ball(match)
            events = match.innings.events
            return events[-1] if len(events) > before else None

        match, event, err = _mutate(match_id, action)
        if err:
            return err
        return jsonify({
            "event": event.to_dict() if event else None,
            "summary": match_summary(match),
        }), 200

    @app.route("/api/matches/<match_id>/undo", methods=["POST"])
    def undo(match_id):
        match, _, err = _mutate(match_id, undo_or_raise)
        if err:
            return err
        return jsonify({"undone": True, "summary": match_summary(match)}), 200

    @app.route("/api/matches/<match_id>/next-batter", methods=["POST"])
    def next_batter(match_id):
        data, err = _json_body()
        if err:
            return err
        player_id = data.get("player_id")
        if not player_id:
            raise InvalidDelivery("player_id is required")
        match, replaced, err = _mutate(match_id, lambda m: scorer.set_next_batter(m, player_id))
        if err:
            return err
        return jsonify({"replaced": replaced, "summary": match_summary(match)}), 200

    @app.route("/api/matches/<match_id>/bowler", methods=["POST"])
    def set_bowler(match_id):
        data, err = _json_body()
        if err:
            return err
        player_id = data.get("player_id")
        if not player_id:
            raise InvalidDelivery("player_id is required")

        def action(match):
            if data.get("end_over"):
                scorer.end_over_and_change_bowler(match, player_id)
            else:
                scorer.change_bowler(match, player_id)

        match, _, err = _mutate(match_id, action)
        if err:
            return err
        return jsonify({
            "bowler_id": match.innings.bowler_id,
            "quota": scorer.bowler_manager(match).quota_summary(),
        }), 200

    @app.route("/api/matches/<match_id>/strike/switch", methods=["POST"])
    def switch_strike(match_id):
        match, _, err = _mutate(match_id, scorer.switch_strike)
        if err:
            return err
        innings = match.innings
        return jsonify({"striker_id": innings.striker_id, "non_striker_id": innings.non_striker_id}), 200

    @app.route("/api/matches/<match_id>/free-hit/toggle", methods=["POST"])
    def toggle_free_hit(match_id):
        match, free_hit, err = _mutate(match_id, scorer.toggle_free_hit)
        if err:
            return err
        return jsonify({"free_hit": free_hit}), 200

    @app.route("/api/matches/<match_id>/interval", methods=["POST"])
    def start_interval(match_id):
        data, err = _json_body(required=False)
        if err:
            return err
        interval_type = data.get("interval_type", "drinks")
        message = data.get("message")
        match, _, err = _mutate(match_id, lambda m: scorer.start_interval(m, interval_type, message))
        if err:
            return err
        return jsonify({"is_interval": True, "result": match.result}), 200

    @app.route("/api/matches/<match_id>/interval", methods=["DELETE"])
    def end_interval(match_id):
        match, _, err = _mutate(match_id, scorer.end_interval)
        if err:
            return err
        return jsonify({"is_interval": False, "result": match.result}), 200

    @app.route("/api/matches/<match_id>/innings/end", methods=["POST"])
    def finish_innings(match_id):
        def action(match):
            end_innings(match)
            if match.current_innings == 1:
                start_second_innings(match)

        match, _, err = _mutate(match_id, action)
        if err:
            return err
        app.logger.info(f"[Match] {match_id} innings ended, now {match.phase.value}")
        return jsonify(match_summary(match)), 200

    @app.route("/api/matches/<match_id>/summary", methods=["GET"])
    def summary(match_id):
        record, err = _load_record(match_id)
        if err:
            return err
        return jsonify(match_summary(record.load())), 200

    @app.route("/api/matches/<match_id>/scorecard", methods=["GET"])
    def scorecard(match_id):
        record, err = _load_record(match_id)
        if err:
            return err
        return Response(render_scorecard(record.load()), mimetype="text/plain")
