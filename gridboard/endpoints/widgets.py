"""
Widget catalog endpoints - widget types and widget definitions
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status

from gridboard.schemas.widget import (
    WidgetDefinitionCreate,
    WidgetDefinitionResponse,
    WidgetDefinitionUpdate,
    WidgetTypeCreate,
    WidgetTypeResponse,
    WidgetTypeUpdate,
)
from gridboard.services.catalog_service import WidgetCatalogService
from gridboard.services.dashboard_manager import is_elevated
from gridboard.endpoints.dependencies import get_catalog_service
from gridboard.middleware.authentication import get_current_user

router = APIRouter()


@router.get("/widget-types", response_model=List[WidgetTypeResponse], summary="Get all widget types")
async def list_widget_types(
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.list_types()


@router.get("/widget-types/{widget_type_id}", response_model=WidgetTypeResponse, summary="Get widget type by ID")
async def get_widget_type(
    widget_type_id: str,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.get_type(widget_type_id)


@router.post(
    "/widget-types",
    response_model=WidgetTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create widget type",
    description="Admins only. Names are unique."
)
async def create_widget_type(
    widget_type: WidgetTypeCreate,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.create_type(widget_type, is_elevated=is_elevated(user))


@router.put(
    "/widget-types/{widget_type_id}",
    response_model=WidgetTypeResponse,
    summary="Update widget type",
    description="Admins only. Updatable fields: name, component_name, default_config."
)
async def update_widget_type(
    widget_type_id: str,
    widget_type: WidgetTypeUpdate,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.update_type(widget_type_id, widget_type, is_elevated=is_elevated(user))


@router.delete(
    "/widget-types/{widget_type_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete widget type",
    description="Admins only. Refused while widget definitions use the type."
)
async def delete_widget_type(
    widget_type_id: str,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.delete_type(widget_type_id, is_elevated=is_elevated(user))


@router.get(
    "/widget-definitions",
    response_model=List[WidgetDefinitionResponse],
    summary="Get all widget definitions",
)
async def list_widget_definitions(
    created_by: Optional[str] = Query(None, description="Filter by creator"),
    widget_type_id: Optional[str] = Query(None, description="Filter by widget type"),
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.list_definitions(created_by=created_by, widget_type_id=widget_type_id)


@router.get(
    "/widget-definitions/{definition_id}",
    response_model=WidgetDefinitionResponse,
    summary="Get widget definition by ID",
)
async def get_widget_definition(
    definition_id: str,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.get_definition(definition_id)


@router.post(
    "/widget-definitions",
    response_model=WidgetDefinitionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create widget definition",
)
async def create_widget_definition(
    definition: WidgetDefinitionCreate,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.create_definition(definition, created_by=user["userId"])


@router.put(
    "/widget-definitions/{definition_id}",
    response_model=WidgetDefinitionResponse,
    summary="Update widget definition",
    description="Creator or admin only. A new widget_type_id must reference an existing type."
)
async def update_widget_definition(
    definition_id: str,
    definition: WidgetDefinitionUpdate,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.update_definition(
        definition_id, definition, user_id=user["userId"], is_elevated=is_elevated(user)
    )


@router.delete(
    "/widget-definitions/{definition_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete widget definition",
    description="Creator or admin only. Refused while any dashboard layout places the definition."
)
async def delete_widget_definition(
    definition_id: str,
    user: dict = Depends(get_current_user),
    catalog: WidgetCatalogService = Depends(get_catalog_service)
):
    return await catalog.delete_definition(
        definition_id, user_id=user["userId"], is_elevated=is_elevated(user)
    )
