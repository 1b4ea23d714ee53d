"""
Flask API routes shared across services.

Endpoints:
  GET  /api/services             - list registered services
  GET  /api/services/<id>        - get single service metadata
  GET  /api/constants            - configuration constants

Service-owned endpoints (e.g. /api/berg/residual) are mounted by each
service through register_routes().
"""

from flask import Blueprint, jsonify

from headmodel import constants


def create_api_blueprint(registry):
    """
    Build the /api blueprint for a populated registry.

    Parameters
    ----------
    registry : HeadModelRegistry
        Registry whose services mount their own routes.

    Returns
    -------
    flask.Blueprint
    """
    api = Blueprint("api", __name__, url_prefix="/api")

    @api.route("/services", methods=["GET"])
    def list_services():
        """Return metadata for all registered services."""
        return jsonify({"services": registry.list_all()})

    @api.route("/services/<service_id>", methods=["GET"])
    def get_service(service_id):
        """Return a single service by id."""
        service = registry.get(service_id)
        if service is None:
            return jsonify({"error": "Service not found"}), 404
        return jsonify(service.metadata())

    @api.route("/constants", methods=["GET"])
    def get_constants():
        """Return the configuration constants used by the services."""
        return jsonify({
            "BERG_ANCHOR_MAGNITUDE": constants.BERG_ANCHOR_MAGNITUDE,
            "DEFAULT_RADII": list(constants.DEFAULT_RADII),
            "MAX_SERIES_TERMS": constants.MAX_SERIES_TERMS,
            "MAX_BERG_DIPOLES": constants.MAX_BERG_DIPOLES,
            "MAX_BATCH_CANDIDATES": constants.MAX_BATCH_CANDIDATES,
        })

    for service in registry.services():
        service.register_routes(api)

    return api
