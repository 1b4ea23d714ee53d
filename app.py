"""
BERGFIT - Berg parameter residuals for multilayer-sphere EEG models.
Flask application factory.

Serves the REST API for the residual computations via registered
HeadModelService instances. The minimizer that drives the fit lives
outside this application and calls the API (or headmodel.berg directly).

Usage:
    python app.py              # Development server on http://localhost:5000
    flask run                  # Same, via Flask CLI
"""

__version__ = "0.1.0"

from flask import Flask, jsonify

from headmodel.services import HeadModelRegistry
from headmodel.services.berg import BergService


def create_registry():
    """Build and populate the service registry."""
    registry = HeadModelRegistry()
    registry.register(BergService())
    return registry


def create_app():
    """Application factory for the BERGFIT Flask app."""
    app = Flask(__name__)

    # Build service registry
    registry = create_registry()

    # Create and register API blueprint (shared + service-owned routes)
    from api.routes import create_api_blueprint
    api = create_api_blueprint(registry)
    app.register_blueprint(api)

    @app.route("/")
    def root():
        return jsonify({
            "name": "bergfit",
            "version": __version__,
            "services": registry.list_all(),
        })

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="127.0.0.1", port=5000)
