"""News categories and their display metadata.

The category set is closed: filter dropdowns, badges and the statistics
histogram all read from here. Values stored in the database that are not
part of the set are rendered with ``NEUTRAL_COLOR``.
"""

from enum import Enum

from pydantic import BaseModel

NEUTRAL_COLOR = "gray"


class CategoryInfo(BaseModel):
    """Display metadata for a category value."""

    value: str
    label: str
    color: str


class Category(str, Enum):
    """News category shared by news items and sources."""

    politics_pt = "politics_pt"
    politics_br = "politics_br"
    politics_world = "politics_world"
    controversies = "controversies"
    conflicts = "conflicts"
    disasters = "disasters"

    @property
    def info(self) -> CategoryInfo:
        label, color = _DISPLAY[self]
        return CategoryInfo(value=self.value, label=label, color=color)

    @property
    def label(self) -> str:
        return _DISPLAY[self][0]

    @property
    def color(self) -> str:
        return _DISPLAY[self][1]

    @classmethod
    def parse(cls, value: "str | Category | None") -> "Category | None":
        """Return the matching category, or None for empty/unknown values."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip())
        except ValueError:
            return None

    @classmethod
    def describe(cls, value: "str | Category") -> CategoryInfo:
        """Metadata for a stored category value, neutral for unknown ones."""
        category = cls.parse(value)
        if category is None:
            return CategoryInfo(value=str(value), label=str(value), color=NEUTRAL_COLOR)
        return category.info

    @classmethod
    def options(cls) -> list[CategoryInfo]:
        """Ordered category options for dropdowns and legends."""
        return [category.info for category in cls]


_DISPLAY: dict[Category, tuple[str, str]] = {
    Category.politics_pt: ("Politica PT", "green"),
    Category.politics_br: ("Politica BR", "yellow"),
    Category.politics_world: ("Politica Mundial", "blue"),
    Category.controversies: ("Controversias", "pink"),
    Category.conflicts: ("Conflitos", "red"),
    Category.disasters: ("Desastres", "orange"),
}
