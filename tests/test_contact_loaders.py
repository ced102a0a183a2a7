import json
from unittest.mock import patch

import pytest
import requests

from campaign_app.contact_loaders import csv_s3_upload, empower, init_contact_loaders
from campaign_app.contact_loaders.empower.views import get_provisioning_service
from campaign_app.contact_loaders.registry import LoaderAvailability, get_loader_registry, resolve_loaders
from conftest import FakeSession, FakeResponse

CLIENT_CHOICE_DATA = json.dumps({"s3Url": "https://storage.test/put-here", "s3key": "uploads/abc"})


class TestRegistry:
    def test_registry_lists_both_loaders(self):
        registry = get_loader_registry()

        assert list(registry) == ["csv-s3-upload", "empower"]
        assert registry["empower"].display_name == "Empower Project"
        assert registry["empower"].description == "Load orgs/contacts from Empower"

    def test_empower_instructions(self):
        instructions = get_loader_registry()["empower"].server_administrator_instructions()

        assert instructions == {
            "description": "Load orgs/contacts from Empower",
            "setupInstructions": "Set up an Auth0 Management API and set the environment variables specified.",
            "environmentVariables": [
                "AUTH0_DOMAIN",
                "AUTH0_MANAGEMENT_API_CLIENT_ID",
                "AUTH0_MANAGEMENT_API_CLIENT_SECRET",
                "EMPOWER_SHARED_SECRET",
            ],
        }

    def test_resolve_loaders_preserves_order(self):
        names = [descriptor.name for descriptor in resolve_loaders(("empower", "csv-s3-upload"))]

        assert names == ["empower", "csv-s3-upload"]

    def test_resolve_loaders_rejects_unknown(self):
        with pytest.raises(ValueError, match="ngpvan"):
            resolve_loaders(("csv-s3-upload", "ngpvan"))

    def test_availability(self, app):
        assert empower.available(app.config) == LoaderAvailability(result=False, expires_seconds=86400)
        assert empower.available(app.config).as_dict() == {"result": False, "expiresSeconds": 86400}
        assert csv_s3_upload.available(app.config).result is True

    def test_init_is_idempotent(self, app):
        state = init_contact_loaders(app)

        assert [entry["name"] for entry in state["loaders"]] == ["csv-s3-upload", "empower"]
        assert "empower" in app.blueprints
        assert "contacts" in app.cli.commands


class TestHealthRoutes:
    def test_health_lists_loaders(self, client):
        response = client.get("/integration/health")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "ok"
        empower_entry = next(entry for entry in body["loaders"] if entry["name"] == "empower")
        assert empower_entry["available"] == {"result": False, "expiresSeconds": 86400}
        assert empower_entry["instructions"]["environmentVariables"][0] == "AUTH0_DOMAIN"

    def test_metrics_hidden_when_monitoring_disabled(self, client):
        assert client.get("/metrics").status_code == 404

    def test_metrics_served_when_monitoring_enabled(self, app, client):
        app.config["MONITORING_ENABLED"] = True

        response = client.get("/metrics")

        assert response.status_code == 200
        assert b"contact_loader_csv_uploads_total" in response.data

    def test_unknown_route_returns_json(self, client):
        response = client.get("/integration/nope")

        assert response.status_code == 404
        assert response.get_json() == {"message": "Not found"}


class TestContactsCli:
    def test_loaders_command(self, runner):
        result = runner.invoke(args=["contacts", "loaders"])

        assert result.exit_code == 0
        assert "csv-s3-upload" in result.output
        assert "empower (Empower Project): server-side only" in result.output

    def test_upload_command(self, runner, tmp_path):
        csv_path = tmp_path / "volunteers.csv"
        csv_path.write_text("firstName,lastName,cell,team\nAnn,Alpha,2015550123,red\nBob,Bravo,2015550123,red\n")
        session = FakeSession([FakeResponse(status_code=200)])

        with patch(
            "campaign_app.contact_loaders.csv_s3_upload.pipeline.requests.Session",
            return_value=session,
        ):
            result = runner.invoke(
                args=["contacts", "upload", str(csv_path), "--client-choice-data", CLIENT_CHOICE_DATA]
            )

        assert result.exit_code == 0, result.output
        assert "1 contacts" in result.output
        assert "1 duplicates removed" in result.output
        assert "Stored contacts at key: uploads/abc" in result.output
        assert session.put_calls[0]["url"] == "https://storage.test/put-here"

    def test_upload_command_reports_empty_file(self, runner, tmp_path):
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("firstName,lastName,cell\n")

        with patch(
            "campaign_app.contact_loaders.csv_s3_upload.pipeline.requests.Session",
            return_value=FakeSession(),
        ):
            result = runner.invoke(
                args=["contacts", "upload", str(csv_path), "--client-choice-data", CLIENT_CHOICE_DATA]
            )

        assert result.exit_code == 1
        assert "Upload at least one contact" in result.output

    def test_upload_command_rejects_bad_client_choice_data(self, runner, tmp_path):
        csv_path = tmp_path / "contacts.csv"
        csv_path.write_text("firstName,lastName,cell\nAnn,Alpha,2015550123\n")

        result = runner.invoke(args=["contacts", "upload", str(csv_path), "--client-choice-data", "{}"])

        assert result.exit_code == 2
        assert "s3Url and s3key" in result.output


def test_empower_requests_share_one_http_session(app):
    shared = app.extensions["empower"]["http_session"]

    with app.test_request_context("/integration/empower/create/user", method="POST"):
        first = get_provisioning_service()
        second = get_provisioning_service()

    assert isinstance(shared, requests.Session)
    assert first.identity_client.session is shared
    assert second.identity_client.session is shared
