"""Pydantic schemas for sl_catalog API."""

from pydantic import BaseModel, Field

from src.sl_catalog.domain.models import Category


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    media_url: str = Field(..., max_length=1024)
    parent: str | None = None
    arrangement: int | None = None
    active: bool = True


class UpdateCategoryRequest(BaseModel):
    """Partial update: only fields present in the body are written."""

    name: str | None = Field(None, min_length=1, max_length=128)
    media_url: str | None = Field(None, max_length=1024)
    parent: str | None = None
    arrangement: int | None = None
    active: bool | None = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    media_url: str
    parent: str | None
    arrangement: int | None
    active: bool
    deleted_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            media_url=category.media_url,
            parent=category.parent,
            arrangement=category.arrangement,
            active=category.active,
            deleted_at=category.deleted_at.isoformat() if category.deleted_at else None,
            created_at=category.created_at.isoformat() if category.created_at else None,
        )
