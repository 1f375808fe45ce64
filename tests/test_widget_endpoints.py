"""
Integration tests for the widget catalog endpoints
"""
import pytest
import pytest_asyncio

from tests.conftest import gateway_headers


@pytest_asyncio.fixture
async def registered_type(client, mock_user_admin):
    response = await client.post(
        "/api/v1/widget-types",
        json={"name": "chart", "component_name": "ChartWidget", "default_config": {"kind": "line"}},
        headers=gateway_headers(mock_user_admin),
    )
    assert response.status_code == 201
    return response.json()


class TestWidgetTypeEndpoints:

    @pytest.mark.asyncio
    async def test_create_type_as_admin(self, registered_type):
        """POSITIVE: Admins register widget types"""
        assert registered_type["name"] == "chart"
        assert registered_type["default_config"] == {"kind": "line"}

    @pytest.mark.asyncio
    async def test_create_type_as_regular_user(self, client, mock_user_owner):
        """NEGATIVE: Regular users get 403"""
        response = await client.post(
            "/api/v1/widget-types",
            json={"name": "table", "component_name": "TableWidget"},
            headers=gateway_headers(mock_user_owner),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_duplicate_type(self, client, registered_type, mock_user_admin):
        """NEGATIVE: Duplicate names get 409"""
        response = await client.post(
            "/api/v1/widget-types",
            json={"name": "chart", "component_name": "Other"},
            headers=gateway_headers(mock_user_admin),
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_list_types(self, client, registered_type, mock_user_owner):
        """POSITIVE: Any authenticated user can browse the catalog"""
        response = await client.get("/api/v1/widget-types", headers=gateway_headers(mock_user_owner))

        assert response.status_code == 200
        assert [t["name"] for t in response.json()] == ["chart"]


    @pytest.mark.asyncio
    async def test_update_type_as_admin(self, client, registered_type, mock_user_admin):
        """POSITIVE: Admins update a type's allow-listed fields"""
        response = await client.put(
            f"/api/v1/widget-types/{registered_type['id']}",
            json={"component_name": "LineChart", "created_at": "2000-01-01T00:00:00"},
            headers=gateway_headers(mock_user_admin),
        )

        assert response.status_code == 200
        assert response.json()["component_name"] == "LineChart"
        assert response.json()["created_at"] == registered_type["created_at"]

    @pytest.mark.asyncio
    async def test_update_type_as_regular_user(self, client, registered_type, mock_user_owner):
        """NEGATIVE: Regular users get 403"""
        response = await client.put(
            f"/api/v1/widget-types/{registered_type['id']}",
            json={"name": "renamed"},
            headers=gateway_headers(mock_user_owner),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_type_to_taken_name(self, client, registered_type, widget_type, mock_user_admin):
        """NEGATIVE: Renaming onto an existing name gets 409"""
        response = await client.put(
            f"/api/v1/widget-types/{registered_type['id']}",
            json={"name": widget_type["name"]},
            headers=gateway_headers(mock_user_admin),
        )

        assert response.status_code == 409


class TestWidgetDefinitionEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_get_definition(self, client, registered_type, mock_user_owner):
        """POSITIVE: A definition is created by the caller and read back with type names"""
        headers = gateway_headers(mock_user_owner)
        created = await client.post(
            "/api/v1/widget-definitions",
            json={"name": "Latency", "widget_type_id": registered_type["id"]},
            headers=headers,
        )
        assert created.status_code == 201
        assert created.json()["created_by"] == mock_user_owner["userId"]

        fetched = await client.get(f"/api/v1/widget-definitions/{created.json()['id']}", headers=headers)

        assert fetched.status_code == 200
        assert fetched.json()["component_name"] == "ChartWidget"

    @pytest.mark.asyncio
    async def test_delete_placed_definition(self, client, widget_definition, mock_user_owner):
        """NEGATIVE: A definition placed on a dashboard cannot be deleted"""
        headers = gateway_headers(mock_user_owner)
        await client.post(
            "/api/v1/dashboards",
            json={"name": "Board", "widgets": [{"widget_definition_id": widget_definition["id"]}]},
            headers=headers,
        )

        response = await client.delete(f"/api/v1/widget-definitions/{widget_definition['id']}", headers=headers)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_type_in_use(self, client, widget_definition, widget_type, mock_user_admin):
        """NEGATIVE: A type used by a definition cannot be deleted"""
        response = await client.delete(
            f"/api/v1/widget-types/{widget_type['id']}", headers=gateway_headers(mock_user_admin)
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_unplaced_definition(self, client, widget_definition, mock_user_owner):
        """POSITIVE: The creator deletes an unplaced definition"""
        headers = gateway_headers(mock_user_owner)

        response = await client.delete(f"/api/v1/widget-definitions/{widget_definition['id']}", headers=headers)

        assert response.status_code == 200
        missing = await client.get(f"/api/v1/widget-definitions/{widget_definition['id']}", headers=headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update_definition_as_creator(self, client, widget_definition, mock_user_owner):
        """POSITIVE: The creator updates a definition"""
        response = await client.put(
            f"/api/v1/widget-definitions/{widget_definition['id']}",
            json={"name": "Paged incidents"},
            headers=gateway_headers(mock_user_owner),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Paged incidents"
        assert response.json()["widget_type_name"] == "counter"

    @pytest.mark.asyncio
    async def test_update_definition_as_stranger(self, client, widget_definition, mock_user_other):
        """NEGATIVE: Someone else's definition gets 403"""
        response = await client.put(
            f"/api/v1/widget-definitions/{widget_definition['id']}",
            json={"name": "Mine now"},
            headers=gateway_headers(mock_user_other),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_definition_unknown_type(self, client, widget_definition, mock_user_owner):
        """NEGATIVE: Pointing at a missing widget type gets 404"""
        response = await client.put(
            f"/api/v1/widget-definitions/{widget_definition['id']}",
            json={"widget_type_id": "507f1f77bcf86cd799439011"},
            headers=gateway_headers(mock_user_owner),
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_definition_empty_payload(self, client, widget_definition, mock_user_owner):
        """NEGATIVE: Nothing updatable gets 422"""
        response = await client.put(
            f"/api/v1/widget-definitions/{widget_definition['id']}",
            json={"created_by": "intruder"},
            headers=gateway_headers(mock_user_owner),
        )

        assert response.status_code == 422
