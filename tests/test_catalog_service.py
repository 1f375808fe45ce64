"""
Unit tests for WidgetCatalogService
"""
import pytest
from bson import ObjectId

from gridboard.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from gridboard.schemas.widget import (
    WidgetDefinitionCreate,
    WidgetDefinitionUpdate,
    WidgetTypeCreate,
    WidgetTypeUpdate,
)


class TestWidgetTypes:

    @pytest.mark.asyncio
    async def test_create_type(self, widget_type):
        """POSITIVE: Elevated users register widget types"""
        assert widget_type["name"] == "counter"
        assert widget_type["component_name"] == "CounterWidget"
        assert widget_type["default_config"] == {"color": "blue"}

    @pytest.mark.asyncio
    async def test_create_type_requires_elevation(self, catalog_service):
        """NEGATIVE: Regular users cannot register widget types"""
        with pytest.raises(ForbiddenException):
            await catalog_service.create_type(WidgetTypeCreate(name="chart", component_name="Chart"))

    @pytest.mark.asyncio
    async def test_create_type_duplicate_name(self, catalog_service, widget_type):
        """NEGATIVE: Type names are unique"""
        with pytest.raises(ConflictException):
            await catalog_service.create_type(
                WidgetTypeCreate(name="counter", component_name="Other"), is_elevated=True
            )

    @pytest.mark.asyncio
    async def test_update_type(self, catalog_service, widget_type):
        """POSITIVE: Elevated users rename and reconfigure a type"""
        result = await catalog_service.update_type(
            widget_type["id"],
            WidgetTypeUpdate(name="gauge", default_config={"color": "red"}),
            is_elevated=True,
        )

        assert result["name"] == "gauge"
        assert result["component_name"] == "CounterWidget"
        assert result["default_config"] == {"color": "red"}

    @pytest.mark.asyncio
    async def test_update_type_requires_elevation(self, catalog_service, widget_type):
        """NEGATIVE: Regular users cannot change widget types"""
        with pytest.raises(ForbiddenException):
            await catalog_service.update_type(widget_type["id"], WidgetTypeUpdate(name="gauge"))

    @pytest.mark.asyncio
    async def test_update_type_duplicate_name(self, catalog_service, widget_type):
        """NEGATIVE: Renaming onto another type's name is a conflict"""
        # Arrange
        other = await catalog_service.create_type(
            WidgetTypeCreate(name="chart", component_name="ChartWidget"), is_elevated=True
        )

        # Act
        with pytest.raises(ConflictException):
            await catalog_service.update_type(other["id"], WidgetTypeUpdate(name="counter"), is_elevated=True)

        # Assert
        assert (await catalog_service.get_type(other["id"]))["name"] == "chart"

    @pytest.mark.asyncio
    async def test_update_type_keeps_own_name(self, catalog_service, widget_type):
        """POSITIVE: Sending a type's own name back is not a conflict"""
        result = await catalog_service.update_type(
            widget_type["id"], WidgetTypeUpdate(name="counter", component_name="Counter2"), is_elevated=True
        )

        assert result["component_name"] == "Counter2"

    @pytest.mark.asyncio
    async def test_update_type_nothing_to_update(self, catalog_service, widget_type):
        """NEGATIVE: An empty payload is a validation error"""
        with pytest.raises(ValidationException):
            await catalog_service.update_type(widget_type["id"], WidgetTypeUpdate(), is_elevated=True)

    @pytest.mark.asyncio
    async def test_update_type_not_found(self, catalog_service):
        """NEGATIVE: Unknown type raises NotFoundException"""
        with pytest.raises(NotFoundException):
            await catalog_service.update_type(str(ObjectId()), WidgetTypeUpdate(name="gauge"), is_elevated=True)

    @pytest.mark.asyncio
    async def test_delete_type_in_use(self, catalog_service, widget_type, widget_definition):
        """NEGATIVE: A type used by definitions cannot be deleted"""
        with pytest.raises(ConflictException):
            await catalog_service.delete_type(widget_type["id"], is_elevated=True)

    @pytest.mark.asyncio
    async def test_delete_unused_type(self, catalog_service, widget_type):
        """POSITIVE: An unused type is removed"""
        await catalog_service.delete_type(widget_type["id"], is_elevated=True)

        assert await catalog_service.find_type(widget_type["id"]) is None


class TestWidgetDefinitions:

    @pytest.mark.asyncio
    async def test_definition_carries_type_names(self, widget_definition):
        """POSITIVE: Definitions are returned with their type's names"""
        assert widget_definition["widget_type_name"] == "counter"
        assert widget_definition["component_name"] == "CounterWidget"
        assert widget_definition["created_by"] == "owner123"

    @pytest.mark.asyncio
    async def test_create_definition_unknown_type(self, catalog_service):
        """NEGATIVE: A definition needs an existing type"""
        with pytest.raises(NotFoundException):
            await catalog_service.create_definition(
                WidgetDefinitionCreate(name="Orphan", widget_type_id=str(ObjectId())), created_by="owner123"
            )

    @pytest.mark.asyncio
    async def test_list_definitions_filtered(self, catalog_service, widget_definition):
        """POSITIVE: Listing filters by creator"""
        assert len(await catalog_service.list_definitions(created_by="owner123")) == 1
        assert await catalog_service.list_definitions(created_by="someone-else") == []

    @pytest.mark.asyncio
    async def test_update_definition(self, catalog_service, widget_definition):
        """POSITIVE: The creator updates a definition and updated_at moves"""
        result = await catalog_service.update_definition(
            widget_definition["id"],
            WidgetDefinitionUpdate(name="Closed incidents", data_source_config={"endpoint": "/api/closed"}),
            user_id="owner123",
        )

        assert result["name"] == "Closed incidents"
        assert result["data_source_config"] == {"endpoint": "/api/closed"}
        assert result["widget_type_name"] == "counter"
        assert result["updated_at"] >= widget_definition["updated_at"]

    @pytest.mark.asyncio
    async def test_update_definition_changes_type(self, catalog_service, widget_definition):
        """POSITIVE: Moving to another existing type refreshes the type names"""
        chart = await catalog_service.create_type(
            WidgetTypeCreate(name="chart", component_name="ChartWidget"), is_elevated=True
        )

        result = await catalog_service.update_definition(
            widget_definition["id"], WidgetDefinitionUpdate(widget_type_id=chart["id"]), user_id="owner123"
        )

        assert result["widget_type_id"] == chart["id"]
        assert result["component_name"] == "ChartWidget"

    @pytest.mark.asyncio
    async def test_update_definition_unknown_type(self, catalog_service, widget_definition):
        """NEGATIVE: The new widget type must exist"""
        with pytest.raises(NotFoundException):
            await catalog_service.update_definition(
                widget_definition["id"], WidgetDefinitionUpdate(widget_type_id=str(ObjectId())), user_id="owner123"
            )

    @pytest.mark.asyncio
    async def test_update_definition_by_stranger(self, catalog_service, widget_definition):
        """NEGATIVE: Only the creator or an elevated user may update"""
        with pytest.raises(ForbiddenException):
            await catalog_service.update_definition(
                widget_definition["id"], WidgetDefinitionUpdate(name="Mine now"), user_id="user456"
            )

    @pytest.mark.asyncio
    async def test_update_definition_by_elevated_user(self, catalog_service, widget_definition):
        """POSITIVE: Elevated users may update anyone's definition"""
        result = await catalog_service.update_definition(
            widget_definition["id"], WidgetDefinitionUpdate(description="Tuned"), user_id="admin789", is_elevated=True
        )

        assert result["description"] == "Tuned"
        assert result["created_by"] == "owner123"

    @pytest.mark.asyncio
    async def test_update_definition_nothing_to_update(self, catalog_service, widget_definition):
        """NEGATIVE: Fields outside the allow-list leave nothing to update"""
        with pytest.raises(ValidationException):
            await catalog_service.update_definition(
                widget_definition["id"], WidgetDefinitionUpdate(created_by="intruder"), user_id="owner123"
            )

    @pytest.mark.asyncio
    async def test_delete_definition_in_use(self, catalog_service, fake_db, widget_definition):
        """NEGATIVE: A placed definition cannot be deleted and the transaction is aborted"""
        # Arrange
        await fake_db.dashboard_layouts.insert_one(
            {"dashboard_id": str(ObjectId()), "widget_definition_id": widget_definition["id"]}
        )

        # Act
        with pytest.raises(ConflictException) as exc_info:
            await catalog_service.delete_definition(widget_definition["id"], user_id="owner123")

        # Assert
        assert exc_info.value.status_code == 409
        assert await catalog_service.find_definition(widget_definition["id"]) is not None
        assert fake_db.client.sessions[-1].aborted is True

    @pytest.mark.asyncio
    async def test_delete_definition_by_stranger(self, catalog_service, widget_definition):
        """NEGATIVE: Only the creator or an elevated user may delete"""
        with pytest.raises(ForbiddenException):
            await catalog_service.delete_definition(widget_definition["id"], user_id="user456")

    @pytest.mark.asyncio
    async def test_delete_definition(self, catalog_service, fake_db, widget_definition):
        """POSITIVE: The creator deletes an unplaced definition"""
        await catalog_service.delete_definition(widget_definition["id"], user_id="owner123")

        assert await catalog_service.find_definition(widget_definition["id"]) is None
        assert fake_db.client.sessions[-1].committed is True


class TestDescribe:

    @pytest.mark.asyncio
    async def test_describe_joins_type_metadata(self, catalog_service, widget_definition):
        """POSITIVE: Placements get definition and type metadata"""
        result = await catalog_service.describe([widget_definition["id"]])

        meta = result[widget_definition["id"]]
        assert meta["widget_name"] == "Open incidents"
        assert meta["widget_type_name"] == "counter"
        assert meta["widget_default_config"] == {"color": "blue"}
        assert meta["data_source_config"] == {"endpoint": "/api/incidents/count"}

    @pytest.mark.asyncio
    async def test_describe_skips_unknown_and_malformed(self, catalog_service):
        """NEGATIVE: Missing or malformed definitions are left out"""
        assert await catalog_service.describe([str(ObjectId()), "garbage"]) == {}
