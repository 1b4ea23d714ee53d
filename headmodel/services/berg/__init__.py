"""
Berg Service: residual of a Berg parameter candidate over HTTP.

Exposes the Berg residual (headmodel.berg) to external minimizers and
tools that drive the fit from outside the process. Request payloads are
validated here; the evaluator itself accepts whatever it is given.

Endpoints:
  POST /api/berg/residual        -> { delta, terms, mu, lam, n_dipoles, ... }
  POST /api/berg/residual-batch  -> { deltas, best_index, best_delta, ... }

Radii default to DEFAULT_RADII (normalized three-shell sphere) when omitted.
Non-finite results are returned as null.

IMPORTANT: No unicode in code or messages (Windows charmap).
"""

import logging
import math

from flask import jsonify, request

from headmodel.services import HeadModelService
from headmodel.constants import (
    DEFAULT_RADII,
    MAX_SERIES_TERMS,
    MAX_BERG_DIPOLES,
    MAX_BATCH_CANDIDATES,
)
from headmodel.berg import (
    berg_residual_batch,
    n_berg_dipoles,
    residual_terms,
    split_berg,
    sum_of_squares,
)

log = logging.getLogger(__name__)


def _finite_or_none(x):
    x = float(x)
    return x if math.isfinite(x) else None


def _number_list(value, field, min_len=1, max_len=None):
    """Coerce a JSON array of numbers to a list of finite floats. Raises ValueError."""
    if not isinstance(value, (list, tuple)):
        raise ValueError("{} must be a list of numbers".format(field))
    if len(value) < min_len:
        raise ValueError("{} must have at least {} value(s)".format(field, min_len))
    if max_len is not None and len(value) > max_len:
        raise ValueError("{} must have at most {} values".format(field, max_len))
    out = []
    for i, v in enumerate(value):
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("{}[{}] is not a number".format(field, i))
        v = float(v)
        if not math.isfinite(v):
            raise ValueError("{}[{}] must be finite".format(field, i))
        out.append(v)
    return out


def _berg_vector(value, field="berg"):
    """Validate one packed Berg vector: odd length, at most MAX_BERG_DIPOLES dipoles."""
    berg = _number_list(value, field, min_len=1, max_len=2 * MAX_BERG_DIPOLES - 1)
    if len(berg) % 2 != 1:
        raise ValueError(
            "{} must have odd length 2J-1 (got {})".format(field, len(berg)))
    return berg


def _sphere(config):
    """Validate radii and weights shared by both endpoints."""
    radii = config.get("radii")
    if radii is None:
        radii = list(DEFAULT_RADII)
    radii = _number_list(radii, "radii")
    if any(r <= 0 for r in radii):
        raise ValueError("radii must be positive")

    if "weights" not in config:
        raise ValueError("weights is required")
    weights = _number_list(config["weights"], "weights", max_len=MAX_SERIES_TERMS)
    return radii, weights


class BergService(HeadModelService):
    """Berg eccentricity/magnitude residual for the multilayer sphere."""

    id = "berg"
    name = "Berg Residual"
    description = "Misfit of Berg dipole parameters against multilayer sphere series weights"
    category = "forward_model"
    route = "/api/berg"

    def validate(self, config):
        if not config or not isinstance(config, dict):
            raise ValueError("Request body must be JSON")
        if "berg" not in config:
            raise ValueError("berg is required")
        berg = _berg_vector(config["berg"])
        radii, weights = _sphere(config)
        return {"berg": berg, "radii": radii, "weights": weights}

    def compute(self, config):
        berg = config["berg"]
        radii = config["radii"]
        weights = config["weights"]

        terms = residual_terms(berg, radii, weights)
        delta = sum_of_squares(terms)

        mu, lam = split_berg(berg)
        if not math.isfinite(delta):
            log.warning("Berg residual is not finite: berg=%s radii=%s", berg, radii)
        log.info("Berg residual J=%d nmax=%d delta=%r",
                 len(mu), len(weights), delta)

        return {
            "delta": _finite_or_none(delta),
            "terms": [_finite_or_none(t) for t in terms],
            "mu": mu.tolist(),
            "lam": lam.tolist(),
            "n_dipoles": len(mu),
            "n_terms": len(weights),
            "n_layers": len(radii),
        }

    def validate_batch(self, config):
        if not config or not isinstance(config, dict):
            raise ValueError("Request body must be JSON")
        candidates = config.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise ValueError("candidates must be a non-empty list of Berg vectors")
        if len(candidates) > MAX_BATCH_CANDIDATES:
            raise ValueError(
                "at most {} candidates per request".format(MAX_BATCH_CANDIDATES))
        rows = [_berg_vector(c, "candidates[{}]".format(i))
                for i, c in enumerate(candidates)]
        if any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("all candidates must have the same length")
        radii, weights = _sphere(config)
        return {"candidates": rows, "radii": radii, "weights": weights}

    def compute_batch(self, config):
        deltas = berg_residual_batch(
            config["candidates"], config["radii"], config["weights"])

        best_index = None
        best_delta = None
        for i, d in enumerate(deltas):
            if math.isfinite(d) and (best_delta is None or d < best_delta):
                best_index, best_delta = i, float(d)

        n_bad = sum(1 for d in deltas if not math.isfinite(d))
        if n_bad:
            log.warning("Berg batch: %d of %d residuals not finite",
                        n_bad, len(deltas))

        return {
            "deltas": [_finite_or_none(d) for d in deltas],
            "best_index": best_index,
            "best_delta": best_delta,
            "n_candidates": len(deltas),
            "n_dipoles": n_berg_dipoles(config["candidates"][0]),
        }

    def register_routes(self, bp):
        """Mount /berg/residual and /berg/residual-batch."""
        service = self

        @bp.route("/berg/residual", methods=["POST"])
        def berg_residual_endpoint():
            data = request.get_json(silent=True)
            try:
                config = service.validate(data)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            try:
                result = service.compute(config)
            except Exception as e:
                log.error("Berg residual failed: %s", e)
                return jsonify({"error": "Residual evaluation failed"}), 500
            return jsonify(result)

        @bp.route("/berg/residual-batch", methods=["POST"])
        def berg_residual_batch_endpoint():
            data = request.get_json(silent=True)
            try:
                config = service.validate_batch(data)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            try:
                result = service.compute_batch(config)
            except Exception as e:
                log.error("Berg batch residual failed: %s", e)
                return jsonify({"error": "Residual evaluation failed"}), 500
            return jsonify(result)
