# models/page.py

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# -------------------------------------------------
# Shared config: snake_case columns, camelCase JSON
# -------------------------------------------------
class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# -------------------------------------------------
# Page (row in sidebar_pages)
# -------------------------------------------------
class Page(CamelModel):
    page_id: int
    page_name: str
    page_url: str
    page_icon: Optional[str] = None
    display_order: int = 0
    description: Optional[str] = None


# -------------------------------------------------
# Create / Update (admin management UI)
# -------------------------------------------------
class PageWrite(CamelModel):
    """
    Used for both create and update: an update replaces every
    editable column, as the management form always sends them all.
    """
    page_name: str
    page_url: str
    page_icon: str
    display_order: Optional[int] = 0
    description: Optional[str] = None

    @field_validator("page_name", "page_url", "page_icon")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Page name, URL, and icon are required")
        return v.strip()

    @field_validator("display_order", mode="before")
    @classmethod
    def default_order(cls, v):
        return 0 if v in (None, "") else v


# -------------------------------------------------
# Catalog entry (row in page_permissions)
# -------------------------------------------------
class PagePermission(CamelModel):
    permission_type: str
    permission_name: Optional[str] = None
    description: Optional[str] = None


class PageWithPermissions(Page):
    permissions: List[PagePermission] = Field(default_factory=list)
