"""
Integration Tests - Id Path Parameters
"""
import pytest

UPDATE_BODIES = {
    "users": {"username": "renamed"},
    "orders": {"payment": True},
    "reviews": {"score": 3},
}

ID_ROUTES = [
    ("GET", "products"),
    ("DELETE", "products"),
] + [
    (method, resource)
    for resource in ("users", "orders", "reviews")
    for method in ("GET", "PUT", "PATCH", "DELETE")
]


def send(client, method, resource, raw_id):
    body = UPDATE_BODIES[resource] if method in ("PUT", "PATCH") else None
    return client.request(method, f"/{resource}/{raw_id}", json=body)


class TestMalformedIds:
    """Every route taking a row id rejects ids that are not positive 32-bit integers"""

    @pytest.mark.parametrize("method,resource", ID_ROUTES)
    @pytest.mark.parametrize("raw_id", ["abc", "0", "-3", "1.5", "2147483648"])
    def test_rejected_with_error_envelope(self, client, method, resource, raw_id):
        response = send(client, method, resource, raw_id)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid request parameters"
        assert set(body) <= {"error", "details"}

    @pytest.mark.parametrize("method,resource", ID_ROUTES)
    def test_largest_unknown_id_is_not_found(self, client, method, resource):
        response = send(client, method, resource, 2147483647)

        assert response.status_code == 404
