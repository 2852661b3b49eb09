"""
HTTP boundary for profile lookups.

    POST /scrape   {searchQuery, company?, contactId?, email?}
    GET  /health   quota status
    GET  /test     readiness check
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .database import get_session, init_database, record_lookup
from .errors import BlockedByChallenge, QuotaExceeded
from .identity import Identity
from .logger import get_logger
from .quota import DailyQuota
from .resolver import ProfileResolver
from .schema import validate_scrape_request

logger = get_logger()


def _save(history_path: Optional[Path], **fields) -> None:
    if history_path is None:
        return
    if fields.get("contact_id") is not None:
        fields["contact_id"] = str(fields["contact_id"])
    session = get_session(history_path)
    try:
        record_lookup(session, **fields)
    finally:
        session.close()


def create_app(
    resolver: ProfileResolver,
    quota: DailyQuota,
    history_path: Optional[Path] = None,
    enable_cors: bool = True,
) -> Flask:
    """Create the Flask app around a resolver and the shared quota."""
    app = Flask(__name__)
    mode = "+".join(p.name for p in resolver.providers) + "-search"
    if enable_cors:
        CORS(app)
    if history_path is not None:
        init_database(history_path)

    @app.post("/scrape")
    def scrape():
        body = request.get_json(silent=True)
        contact_id = body.get("contactId") if isinstance(body, dict) else None
        errors = validate_scrape_request(body)
        if errors:
            return jsonify({"success": False, "error": "; ".join(errors), "contactId": contact_id}), 400

        identity = Identity.create(body["searchQuery"], body.get("company"), body.get("email"))
        logger.info(
            f"Contact: {identity.display_name} | Company: {identity.employer or 'N/A'} | ID: {contact_id or 'N/A'}"
        )

        try:
            result = resolver.resolve(identity)
        except QuotaExceeded as e:
            _save(history_path, name=identity.display_name, company=identity.employer,
                  contact_id=contact_id, reason="quota_exceeded")
            return jsonify({
                "success": False,
                "name": identity.display_name,
                "contactId": contact_id,
                "error": str(e),
                "reason": "quota_exceeded",
            }), 429
        except BlockedByChallenge as e:
            logger.error(f"API Error: {e}")
            _save(history_path, name=identity.display_name, company=identity.employer,
                  contact_id=contact_id, reason="blocked_by_challenge")
            return jsonify({
                "success": False,
                "name": identity.display_name,
                "contactId": contact_id,
                "error": str(e),
                "reason": "blocked_by_challenge",
            }), 503
        except Exception as e:
            logger.error(f"API Error: {e}", error_type=type(e).__name__)
            return jsonify({
                "success": False,
                "name": identity.display_name,
                "contactId": contact_id,
                "error": str(e),
                "reason": "API error occurred during search",
            }), 500

        payload = result.to_dict(contact_id=contact_id, scraped_at=datetime.now())
        _save(
            history_path,
            name=result.identity.display_name,
            company=identity.employer,
            contact_id=contact_id,
            profile_url=result.canonical_url,
            reason=result.reason,
            provenance=result.winner.provenance.value if result.winner else None,
        )
        status = 502 if result.reason == "acquisition_failed" else 200
        return jsonify(payload), status

    @app.get("/health")
    def health():
        snapshot = quota.snapshot()
        return jsonify({
            "status": "ok",
            "mode": mode,
            "dailyCount": snapshot["count"],
            "maxDaily": snapshot["limit"],
            "date": snapshot["date"],
        })

    @app.get("/test")
    def test():
        return jsonify({
            "success": True,
            "message": "LinkedIn URL Finder is ready",
            "mode": "Search engine results - no LinkedIn login required",
        })

    return app
