"""
Tests for Flask API endpoints.

Integration tests that validate the REST API returns correct status
codes, JSON structure, and the same values as the library functions.
"""

import json

import pytest

from headmodel.berg import berg_residual
from headmodel.constants import DEFAULT_RADII


class TestServicesEndpoint:
    """Test GET /api/services and GET /api/services/<id>."""

    def test_list_services(self, client):
        resp = client.get("/api/services")
        assert resp.status_code == 200
        ids = [s["id"] for s in resp.get_json()["services"]]
        assert "berg" in ids

    def test_service_by_id(self, client):
        resp = client.get("/api/services/berg")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["id"] == "berg"
        assert data["route"] == "/api/berg"

    def test_service_not_found(self, client):
        resp = client.get("/api/services/nonexistent")
        assert resp.status_code == 404

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "bergfit"


class TestConstantsEndpoint:
    """Test GET /api/constants."""

    def test_constants(self, client):
        resp = client.get("/api/constants")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["BERG_ANCHOR_MAGNITUDE"] == 0.0
        assert data["DEFAULT_RADII"] == list(DEFAULT_RADII)


class TestResidualEndpoint:
    """Test POST /api/berg/residual."""

    def test_single_dipole(self, client):
        resp = client.post("/api/berg/residual", json={
            "berg": [0.9],
            "radii": [0.88, 1.0],
            "weights": [0.0, 1.0, 0.5],
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert abs(data["delta"] - 0.92432384) < 1e-12
        assert len(data["terms"]) == 2
        assert data["n_dipoles"] == 1
        assert data["lam"] == [0.0]

    def test_default_radii(self, client):
        payload = {"berg": [0.9, 0.95, 0.3], "weights": [1.0, 0.8, 0.6, 0.5]}
        resp = client.post(
            "/api/berg/residual",
            data=json.dumps(payload),
            content_type="application/json",
        )
        assert resp.status_code == 200
        expected = berg_residual(payload["berg"], DEFAULT_RADII, payload["weights"])
        assert resp.get_json()["delta"] == pytest.approx(expected, rel=1e-15)

    def test_single_term(self, client):
        resp = client.post("/api/berg/residual", json={"berg": [0.9], "weights": [3.0]})
        assert resp.status_code == 200
        assert resp.get_json()["delta"] == 0.0
        assert resp.get_json()["terms"] == []

    def test_overflow_reported_as_null(self, client):
        resp = client.post("/api/berg/residual", json={
            "berg": [1e200],
            "weights": [1.0, 0.0, 0.0],
        })
        assert resp.status_code == 200
        assert resp.get_json()["delta"] is None

    def test_missing_berg(self, client):
        resp = client.post("/api/berg/residual", json={"weights": [1.0]})
        assert resp.status_code == 400
        assert "berg" in resp.get_json()["error"]

    def test_even_length(self, client):
        resp = client.post("/api/berg/residual", json={
            "berg": [0.9, 0.8],
            "weights": [1.0, 0.5],
        })
        assert resp.status_code == 400

    def test_non_json_body(self, client):
        resp = client.post("/api/berg/residual", data="not json",
                           content_type="text/plain")
        assert resp.status_code == 400


class TestResidualBatchEndpoint:
    """Test POST /api/berg/residual-batch."""

    def test_batch(self, client):
        candidates = [[0.5], [0.8], [0.95]]
        weights = [1.0, 0.8, 0.64, 0.512]
        resp = client.post("/api/berg/residual-batch", json={
            "candidates": candidates,
            "radii": [0.88, 1.0],
            "weights": weights,
        })
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["n_candidates"] == 3
        assert data["n_dipoles"] == 1
        assert data["best_index"] == 1
        for c, d in zip(candidates, data["deltas"]):
            assert d == pytest.approx(berg_residual(c, [0.88, 1.0], weights),
                                      rel=1e-12, abs=1e-15)

    def test_mixed_lengths(self, client):
        resp = client.post("/api/berg/residual-batch", json={
            "candidates": [[0.5], [0.8, 0.7, 0.1]],
            "weights": [1.0, 0.5],
        })
        assert resp.status_code == 400

    def test_missing_candidates(self, client):
        resp = client.post("/api/berg/residual-batch", json={"weights": [1.0]})
        assert resp.status_code == 400
