"""Items held by the player and the resource maximums they grant."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ._enums import RechargeableResource
from ._resources import ResourceCount

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Item:
    """A non-stacking capability, identified by name."""

    name: str


@dataclass(frozen=True, slots=True)
class ExpansionItem(Item):
    """A stacking pickup raising the maximum of a resource per copy."""

    resource: RechargeableResource
    amount: int


class ItemInventory:
    """Non-consumable items plus counted expansion items.

    Maximums are always ``base_maximums`` plus the contribution of every
    expansion held. The base maximums are never changed by pickups.

    Non-consumable items can be disabled: the inventory still contains them,
    but ``has()`` reports them as absent.
    """

    __slots__ = ("_base_maximums", "_disabled", "_expansions", "_items")

    def __init__(self, base_maximums: ResourceCount | None = None) -> None:
        self._base_maximums = (base_maximums or ResourceCount.vanilla_base_maximums()).clone()
        self._items: dict[str, Item] = {}
        self._expansions: dict[str, tuple[ExpansionItem, int]] = {}
        self._disabled: set[str] = set()

    @property
    def base_maximums(self) -> ResourceCount:
        return self._base_maximums.clone()

    @property
    def non_consumable_items(self) -> dict[str, Item]:
        return dict(self._items)

    @property
    def expansion_items(self) -> dict[str, tuple[ExpansionItem, int]]:
        return dict(self._expansions)

    @property
    def disabled_items(self) -> frozenset[str]:
        return frozenset(self._disabled)

    def has(self, name: str) -> bool:
        """Check whether an enabled item with this name is held."""
        if name in self._items:
            return name not in self._disabled
        return self.expansion_count(name) > 0

    def contains(self, name: str) -> bool:
        """Check whether an item with this name is held, disabled or not."""
        return name in self._items or self.expansion_count(name) > 0

    def expansion_count(self, name: str) -> int:
        entry = self._expansions.get(name)
        return entry[1] if entry is not None else 0

    def apply_add_item(self, item: Item, count: int = 1) -> ItemInventory:
        """Add an item, or ``count`` copies of an expansion item.

        Returns:
            This inventory, for chaining.

        """
        if count < 0:
            msg = f"Cannot add a negative count ({count}) of '{item.name}'"
            raise ValueError(msg)
        if isinstance(item, ExpansionItem):
            self._expansions[item.name] = (item, self.expansion_count(item.name) + count)
        elif count > 0:
            self._items[item.name] = item
        return self

    def apply_disable_item(self, name: str) -> ItemInventory:
        """Disable a held non-consumable item. Anything else is ignored."""
        if name in self._items:
            self._disabled.add(name)
        else:
            logger.debug("Ignoring disable of '%s': not a held non-consumable item", name)
        return self

    def apply_enable_item(self, name: str) -> ItemInventory:
        self._disabled.discard(name)
        return self

    @property
    def resource_maximums(self) -> ResourceCount:
        """Base maximums plus every expansion's contribution."""
        maximums = self._base_maximums.clone()
        for item, count in self._expansions.values():
            maximums.apply_increase(item.resource, item.amount * count)
        return maximums

    def max_amount(self, resource: RechargeableResource) -> int:
        return self.resource_maximums.get(resource)

    def except_in(self, other: ItemInventory) -> ItemInventory:
        """Return the items of this inventory that ``other`` does not hold.

        Expansion items are kept with the difference of their counts, when
        positive. Base maximums are those of this inventory.
        """
        result = ItemInventory(self._base_maximums)
        for name, item in self._items.items():
            if not other.contains(name):
                result.apply_add_item(item)
                if name in self._disabled:
                    result.apply_disable_item(name)
        for name, (item, count) in self._expansions.items():
            difference = count - other.expansion_count(name)
            if difference > 0:
                result.apply_add_item(item, difference)
        return result

    def clone(self) -> ItemInventory:
        copy = ItemInventory(self._base_maximums)
        copy._items = dict(self._items)
        copy._expansions = dict(self._expansions)
        copy._disabled = set(self._disabled)
        return copy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemInventory):
            return NotImplemented
        return (
            self._base_maximums == other._base_maximums
            and self._items == other._items
            and {k: v for k, v in self._expansions.items() if v[1] > 0}
            == {k: v for k, v in other._expansions.items() if v[1] > 0}
            and self._disabled == other._disabled
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        items = sorted(self._items)
        expansions = {name: count for name, (_, count) in sorted(self._expansions.items())}
        return f"ItemInventory(items={items!r}, expansions={expansions!r}, disabled={sorted(self._disabled)!r})"
