"""
Flask admin server for the kubedeck alerter.

  GET|POST /telegram/config     - View or hot-update the alerting settings
  GET|POST /analyze/resources   - Run one resource check now (?notify=true to alert)
  GET      /health              - Scheduler and dedup status

Started via: python main.py run [--port 8080] [--host 0.0.0.0]
"""
import logging

from flask import Flask, jsonify, request

from models.settings import SettingsUpdate, SettingsUpdateError
from monitor.collector import CollectorError
from monitor.recommender import RecommendationError
from utils.formatters import mask_token

logger = logging.getLogger("kubedeck.web.app")

_TRUTHY = {"1", "true", "yes", "on"}


def create_app(config: dict, engines: dict) -> Flask:
    """
    Factory function. Receives the wired components from service.components.

    Args:
        config: Application config dict
        engines: dict with settings, tracker, check_cycle and scheduler
    """
    app = Flask(__name__)

    settings = engines["settings"]

    def settings_view():
        current = settings.get()
        return {
            "currentInterval": current.check_interval,
            "currentChatIDs": current.chat_ids,
            "responseStyle": current.response_style,
            "token": mask_token(current.token),
            "running": current.running,
        }

    # ─── Settings ────────────────────────────────────────

    @app.route("/telegram/config", methods=["GET"])
    def telegram_config_get():
        return jsonify({"success": True, "settings": settings_view()})

    @app.route("/telegram/config", methods=["POST"])
    def telegram_config_update():
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({"success": False, "error": "Invalid JSON body"}), 400

        try:
            update = SettingsUpdate.from_dict(payload)
        except SettingsUpdateError as e:
            return jsonify({"success": False, "error": str(e)}), 400

        if update.is_empty():
            return jsonify({
                "success": False,
                "error": "No valid settings supplied (token, checkInterval, chatIDs, responseStyle)",
            }), 400

        changed = settings.apply_update(update)
        logger.info(f"Settings update via admin endpoint (changed={changed}, "
                    f"token={mask_token(update.token) if update.has_token else 'unchanged'})")

        view = settings_view()
        view.update({
            "tokenUpdated": update.has_token,
            "intervalUpdated": update.has_interval,
            "chatIDsUpdated": update.has_chat_ids,
            "styleUpdated": update.has_style,
        })
        return jsonify({
            "success": True,
            "message": "Telegram bot settings updated successfully" if changed
                       else "Settings unchanged",
            "changed": changed,
            "settings": view,
        })

    # ─── Analysis ────────────────────────────────────────

    @app.route("/analyze/resources", methods=["GET", "POST"])
    def analyze_resources():
        check_cycle = engines["check_cycle"]
        notify = request.args.get("notify", "").lower() in _TRUTHY
        try:
            if notify:
                result = check_cycle.run()
                body = result.recommendation.to_dict()
                body.update({
                    "flagged": result.flagged,
                    "announced": result.announced,
                    "deliveries": {str(k): v for k, v in result.deliveries.items()},
                })
                return jsonify(body)
            return jsonify(check_cycle.analyze().to_dict())
        except (CollectorError, RecommendationError) as e:
            logger.error(f"Resource analysis failed: {e}")
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            logger.error(f"Resource analysis error: {e}", exc_info=True)
            return jsonify({"error": "Resource analysis failed"}), 500

    # ─── Health ──────────────────────────────────────────

    @app.route("/health")
    def health():
        scheduler = engines.get("scheduler")
        tracker = engines.get("tracker")
        return jsonify({
            "status": "ok",
            "scheduler_running": bool(scheduler and scheduler.is_running),
            "generations": scheduler.generations if scheduler else 0,
            "dedup_records": len(tracker) if tracker is not None else 0,
            "check_interval": settings.get_check_interval(),
        })

    return app
