"""Tests for the /api/identifiers endpoints."""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from seedtrace.identifiers.allocator import SequenceScope
from seedtrace.identifiers.types import BatchType
from seedtrace.main import create_app

BATCHES = "/api/identifiers/batches"
SERIALS = "/api/identifiers/serials"


async def issue_reference(client) -> tuple[dict, dict]:
    batch = await client.post(
        BATCHES, json={"site_id": 1, "batch_type": 10, "batch_date": "2025-12-06"}
    )
    assert batch.status_code == 201
    serials = await client.post(SERIALS, json={
        "batch_number": batch.json()["batch_number"],
        "strain_code": 100,
        "weight_tenths_gram": 35,
        "pack_size": 1,
    })
    assert serials.status_code == 201
    return batch.json(), serials.json()[0]


@pytest.mark.api
@pytest.mark.asyncio
class TestIssueEndpoints:
    async def test_issue_batch(self, client):
        batch, _ = await issue_reference(client)

        assert batch["batch_number"] == "0110202512060001"
        assert batch["batch_type"] == 10
        assert batch["batch_type_label"] == "Production"
        assert batch["sequence"] == 1

    async def test_issue_serial(self, client):
        _, serial = await issue_reference(client)

        assert serial["full_serial"] == "011001020251206000100001003514"
        assert serial["short_serial"] == "0125120600001"
        assert serial["batch_number"] == "0110202512060001"
        assert serial["record"]["strain_family"] == "sativa"
        assert serial["record"]["unit_sequence"] == 1

    async def test_issue_serials_in_bulk_with_grams(self, client):
        batch, _ = await issue_reference(client)

        response = await client.post(SERIALS, json={
            "batch_number": batch["batch_number"],
            "strain_code": 250,
            "weight_grams": "1.5",
            "pack_size": 0,
            "count": 3,
        })

        assert response.status_code == 201
        serials = response.json()
        assert [s["record"]["unit_sequence"] for s in serials] == [2, 3, 4]
        assert {s["record"]["weight_tenths_gram"] for s in serials} == {15}

    async def test_unknown_batch_type_is_rejected(self, client):
        response = await client.post(BATCHES, json={"site_id": 1, "batch_type": 15})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_future_batch_date(self, client):
        response = await client.post(
            BATCHES, json={"site_id": 1, "batch_type": 10, "batch_date": "2025-12-11"}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "FIELD_OUT_OF_RANGE"
        assert response.json()["error"]["details"]["field"] == "batch_date"

    @pytest.mark.parametrize("weights", [
        {},
        {"weight_tenths_gram": 35, "weight_grams": "3.5"},
        {"weight_grams": "3.55"},
    ])
    async def test_weight_must_be_given_once(self, client, weights):
        response = await client.post(SERIALS, json={
            "batch_number": "0110202512060001",
            "strain_code": 100,
            "pack_size": 1,
            **weights,
        })

        assert response.status_code == 422

    async def test_serial_for_unknown_batch(self, client):
        response = await client.post(SERIALS, json={
            "batch_number": "0110202512060009",
            "strain_code": 100,
            "weight_tenths_gram": 35,
        })

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "IDENTIFIER_NOT_FOUND"

    async def test_exhausted_scope_is_a_conflict(self, client, counter_store):
        scope = SequenceScope.batch(1, BatchType.PRODUCTION, date(2025, 12, 6))
        counter_store._values[scope] = 9999

        response = await client.post(
            BATCHES, json={"site_id": 1, "batch_type": 10, "batch_date": "2025-12-06"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SEQUENCE_EXHAUSTED"


@pytest.mark.api
@pytest.mark.asyncio
class TestLookupEndpoints:
    async def test_decode_batch(self, client):
        await issue_reference(client)

        response = await client.get("/api/identifiers/decode/0110202512060001")

        assert response.status_code == 200
        assert response.json()["kind"] == "batch"
        assert response.json()["batch_date"] == "2025-12-06"

    async def test_decode_full_and_short(self, client):
        _, serial = await issue_reference(client)

        full = await client.get(f"/api/identifiers/decode/{serial['full_serial']}")
        short = await client.get(f"/api/identifiers/decode/{serial['short_serial']}")

        assert full.status_code == short.status_code == 200
        assert full.json() == short.json()
        assert full.json()["kind"] == "full_serial"
        assert full.json()["weight_tenths_gram"] == 35

    async def test_decode_checksum_mismatch(self, client):
        response = await client.get("/api/identifiers/decode/011001020251206000100001003515")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CHECKSUM_MISMATCH"

    async def test_decode_wrong_length(self, client):
        response = await client.get("/api/identifiers/decode/12345")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_LENGTH"

    async def test_validate(self, client):
        _, serial = await issue_reference(client)

        ok = await client.get(f"/api/identifiers/validate/{serial['short_serial']}")
        bad = await client.get("/api/identifiers/validate/0125120600099")

        assert ok.json() == {"identifier": serial["short_serial"], "valid": True}
        assert bad.json() == {"identifier": "0125120600099", "valid": False}

    async def test_resolve(self, client):
        _, serial = await issue_reference(client)

        response = await client.get(f"/api/identifiers/resolve/{serial['short_serial']}")

        assert response.status_code == 200
        assert response.json() == {
            "short_serial": serial["short_serial"],
            "full_serial": serial["full_serial"],
        }

    async def test_resolve_unknown(self, client):
        response = await client.get("/api/identifiers/resolve/0125120600001")

        assert response.status_code == 404

    async def test_list_batch_serials(self, client):
        batch, serial = await issue_reference(client)

        response = await client.get(f"/api/identifiers/batches/{batch['batch_number']}/serials")

        assert response.status_code == 200
        assert [s["full_serial"] for s in response.json()] == [serial["full_serial"]]


@pytest.mark.api
@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["service"] == "SeedTrace"


class UnavailableStoreService:
    """Service whose stores cannot be reached."""

    async def resolve_short(self, short_serial):
        raise OperationalError("SELECT full_serial", {}, Exception("database is locked"))


@pytest.mark.api
@pytest.mark.asyncio
class TestErrorEnvelope:
    async def test_unavailable_store_is_a_503(self):
        app = create_app()
        app.state.identifier_service = UnavailableStoreService()

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/identifiers/resolve/0125120600001")

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "DATABASE_UNAVAILABLE"
        assert "locked" not in response.json()["error"]["message"]

    async def test_body_errors_name_the_field(self, client):
        response = await client.post(BATCHES, json={"batch_type": 10})

        assert response.status_code == 422
        errors = response.json()["error"]["details"]["errors"]
        assert [e["field"] for e in errors] == ["site_id"]

    async def test_unknown_route_uses_the_envelope(self, client):
        response = await client.get("/api/identifiers/nowhere")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_404"
