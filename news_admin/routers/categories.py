"""Categories router."""

from fastapi import APIRouter

from news_admin.categories import Category, CategoryInfo

router = APIRouter(tags=["categories"])


@router.get("/categories", response_model=list[CategoryInfo])
async def get_categories():
    """Ordered category options shared by filters, badges and charts."""
    return Category.options()
