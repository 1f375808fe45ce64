from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_GRID_CONFIG: Dict[str, Any] = {
    "cols": 12,
    "rowHeight": 100,
    "margin": [10, 10],
    "breakpoints": {"lg": 1200, "md": 996, "sm": 768, "xs": 480, "xxs": 0},
    "containerPadding": [10, 10],
}


class GridConfig(BaseModel):
    """
    Grid settings of a dashboard (react-grid-layout naming).

    Every field is optional. A dashboard created without a grid config gets
    DEFAULT_GRID_CONFIG; a supplied one is stored exactly as given.
    """

    cols: Optional[int] = Field(None, ge=1)
    row_height: Optional[int] = Field(None, alias="rowHeight", ge=1)
    margin: Optional[List[int]] = Field(None, min_length=2, max_length=2)
    breakpoints: Optional[Dict[str, int]] = None
    container_padding: Optional[List[int]] = Field(
        None, alias="containerPadding", min_length=2, max_length=2
    )

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def as_stored(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)

    @classmethod
    def default(cls) -> "GridConfig":
        return cls.model_validate(DEFAULT_GRID_CONFIG)
