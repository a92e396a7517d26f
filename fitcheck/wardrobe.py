"""Session wardrobe: every garment the user has worn, unique by id."""

from typing import Iterable, Iterator

from .models import Garment

DEFAULT_WARDROBE: tuple[Garment, ...] = (
    Garment(
        id="fitcheck-sweat",
        name="Cream Crewneck Sweatshirt",
        url="https://storage.googleapis.com/fitcheck-assets/wardrobe/sweatshirt.png",
    ),
    Garment(
        id="fitcheck-tee",
        name="Black Logo Tee",
        url="https://storage.googleapis.com/fitcheck-assets/wardrobe/tee.png",
    ),
    Garment(
        id="fitcheck-denim",
        name="Light Wash Denim Jacket",
        url="https://storage.googleapis.com/fitcheck-assets/wardrobe/denim-jacket.png",
    ),
    Garment(
        id="fitcheck-trousers",
        name="Pleated Wide-Leg Trousers",
        url="https://storage.googleapis.com/fitcheck-assets/wardrobe/trousers.png",
    ),
)


class WardrobeSet:
    """Insertion-ordered garments, de-duplicated by id (first seen wins)."""

    def __init__(self, defaults: Iterable[Garment] = DEFAULT_WARDROBE):
        self._defaults = tuple(defaults)
        self._items: dict[str, Garment] = {}
        self.reset()

    def add(self, garment: Garment) -> bool:
        """Insert the garment unless one with the same id is already present."""
        if garment.id in self._items:
            return False
        self._items[garment.id] = garment
        return True

    def reset(self) -> None:
        """Back to the default collection, dropping session additions."""
        self._items = {}
        for garment in self._defaults:
            self.add(garment)

    def get(self, garment_id: str) -> Garment | None:
        return self._items.get(garment_id)

    @property
    def items(self) -> list[Garment]:
        return list(self._items.values())

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Garment):
            return item.id in self._items
        return item in self._items

    def __iter__(self) -> Iterator[Garment]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)
