from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from easye2ee.crypto.protection import unseal_private_key
from easye2ee.worker.app import create_app
from easye2ee.worker.protocol import parse_response
from easye2ee.worker.service import KeyGenService

TEST_BITS = 512


@pytest.fixture
def service() -> Iterator[KeyGenService]:
    with ThreadPoolExecutor(max_workers=1) as executor:
        yield KeyGenService(executor=executor, bits=TEST_BITS)


def test_health_while_running(service: KeyGenService) -> None:
    with TestClient(create_app(service)) as client:
        response = client.get("/health")
        assert response.status_code == 200  # noqa: PLR2004
        data = response.json()
        assert data["status"] == "ok"
        assert isinstance(data["timestamp"], int)
    assert not service.running


def test_worker_generates_keys(service: KeyGenService) -> None:
    with TestClient(create_app(service)) as client:
        response = client.post(
            "/worker",
            json={"action": "generateKeys", "password": "pw", "bitLength": TEST_BITS},
        )
    assert response.status_code == 200  # noqa: PLR2004
    body = response.json()
    assert body["success"] is True

    result = parse_response(body)
    assert result.public_key.bits == TEST_BITS
    assert unseal_private_key(result.protected_private_key_blob, "pw") == (
        result.private_key
    )


def test_worker_rejects_unknown_action(service: KeyGenService) -> None:
    with TestClient(create_app(service)) as client:
        response = client.post(
            "/worker", json={"action": "deleteKeys", "password": "pw"}
        )
    assert response.status_code == 422  # noqa: PLR2004


def test_worker_reports_stopped_service(service: KeyGenService) -> None:
    # Without the context manager the lifespan never starts the service.
    client = TestClient(create_app(service))
    assert client.get("/health").json()["status"] == "stopped"

    response = client.post("/worker", json={"action": "generateKeys", "password": "pw"})
    assert response.status_code == 400  # noqa: PLR2004
    assert response.json() == {
        "success": False,
        "error": "key generation service is not running",
    }


def test_worker_rejects_unsupported_key_size(service: KeyGenService) -> None:
    with TestClient(create_app(service)) as client:
        response = client.post(
            "/worker",
            json={"action": "generateKeys", "password": "pw", "bitLength": 1_000_000},
        )
    assert response.status_code == 422  # noqa: PLR2004
    assert service.current_job is None
