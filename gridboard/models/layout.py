from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_LAYOUT_CONFIG: Dict[str, Any] = {
    "x": 0,
    "y": 0,
    "w": 4,
    "h": 2,
    "minW": 2,
    "minH": 1,
    "static": False,
}


class LayoutConfig(BaseModel):
    """
    Geometry of one placement on the grid.

    Two policies apply to it and they are deliberately different:
    creating a placement merges the supplied keys over DEFAULT_LAYOUT_CONFIG
    (merge_over_defaults), while updating one replaces the stored object
    with exactly what was sent (as_stored).
    """

    x: Optional[int] = Field(None, ge=0)
    y: Optional[int] = Field(None, ge=0)
    w: Optional[int] = Field(None, ge=1)
    h: Optional[int] = Field(None, ge=1)
    min_w: Optional[int] = Field(None, alias="minW", ge=1)
    min_h: Optional[int] = Field(None, alias="minH", ge=1)
    static: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def as_stored(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)

    def merge_over_defaults(self) -> Dict[str, Any]:
        """Shallow merge: each supplied key overrides that single default key."""
        return {**DEFAULT_LAYOUT_CONFIG, **self.as_stored()}
