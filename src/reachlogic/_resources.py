"""Amounts of rechargeable resources and the rules for spending them."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from ._enums import ConsumableResource, RechargeableResource

VANILLA_REGULAR_ENERGY_MAXIMUM = 99


@dataclass(slots=True)
class ResourceCount:
    """An amount for each rechargeable resource.

    Used both for current amounts (owned by a state) and for maximums
    (computed by an inventory). Missing resources count as 0.

    Energy is spent through the consumable view: regular energy first down
    to 1, then reserve energy, then regular energy again. A regular energy of
    0 or less after a reduction means the player died.

    Example:
        >>> count = ResourceCount({RechargeableResource.REGULAR_ENERGY: 99})
        >>> count.is_available(ConsumableResource.ENERGY, 98)
        True
        >>> count.is_available(ConsumableResource.ENERGY, 99)
        False

    """

    amounts: dict[RechargeableResource, int] = field(default_factory=dict)

    @classmethod
    def vanilla_base_maximums(cls) -> ResourceCount:
        """Maximums of a fresh game: 99 regular energy and nothing else."""
        return cls({RechargeableResource.REGULAR_ENERGY: VANILLA_REGULAR_ENERGY_MAXIMUM})

    @classmethod
    def from_mapping(cls, values: Mapping[RechargeableResource, int]) -> ResourceCount:
        return cls({RechargeableResource(resource): amount for resource, amount in values.items()})

    def get(self, resource: RechargeableResource) -> int:
        """Return the amount of a rechargeable resource."""
        return self.amounts.get(resource, 0)

    def get_consumable(self, resource: ConsumableResource) -> int:
        """Return the total spendable amount of a consumable pool."""
        return sum(self.get(source) for source in resource.rechargeables)

    def is_available(self, resource: ConsumableResource, quantity: int) -> bool:
        """Check whether ``quantity`` can be spent without dying.

        Spending nothing is always possible. Energy must stay at 1 or above,
        so the pool must strictly exceed the quantity. Ammo only needs to
        cover it.
        """
        if quantity <= 0:
            return True
        amount = self.get_consumable(resource)
        if resource == ConsumableResource.ENERGY:
            return amount > quantity
        return amount >= quantity

    def apply_reduction(self, resource: ConsumableResource, quantity: int) -> ResourceCount:
        """Remove ``quantity`` from a consumable pool, unconditionally.

        This is the unavoidable-damage path: energy can end at 0 or below.

        Returns:
            This instance, for chaining.

        """
        if quantity <= 0:
            return self
        if resource != ConsumableResource.ENERGY:
            (source,) = resource.rechargeables
            self.amounts[source] = self.get(source) - quantity
            return self

        regular = self.get(RechargeableResource.REGULAR_ENERGY)
        reserve = self.get(RechargeableResource.RESERVE_ENERGY)
        # Regular energy down to 1
        from_regular = quantity if regular > quantity else max(0, regular - 1)
        regular -= from_regular
        remaining = quantity - from_regular
        # Then reserves down to 0
        from_reserve = min(remaining, max(0, reserve))
        reserve -= from_reserve
        remaining -= from_reserve
        # Whatever is left kills
        regular -= remaining

        self.amounts[RechargeableResource.REGULAR_ENERGY] = regular
        self.amounts[RechargeableResource.RESERVE_ENERGY] = reserve
        return self

    def apply_increase(self, resource: RechargeableResource, quantity: int) -> ResourceCount:
        self.amounts[resource] = self.get(resource) + quantity
        return self

    def apply_amount(self, resource: RechargeableResource, value: int) -> ResourceCount:
        self.amounts[resource] = value
        return self

    def apply_amounts(self, other: ResourceCount) -> ResourceCount:
        """Copy every amount of ``other`` into this instance."""
        for resource in RechargeableResource:
            self.amounts[resource] = other.get(resource)
        return self

    def variation_with(self, other: ResourceCount) -> ResourceCount:
        """Return ``self - other`` for every resource."""
        return ResourceCount({resource: self.get(resource) - other.get(resource) for resource in RechargeableResource})

    def plus(self, other: ResourceCount) -> ResourceCount:
        """Return the element-wise sum of two counts."""
        return ResourceCount({resource: self.get(resource) + other.get(resource) for resource in RechargeableResource})

    def is_zero(self) -> bool:
        return all(self.get(resource) == 0 for resource in RechargeableResource)

    def clone(self) -> ResourceCount:
        return ResourceCount(dict(self.amounts))

    def __iter__(self) -> Iterator[tuple[RechargeableResource, int]]:
        for resource in RechargeableResource:
            yield resource, self.get(resource)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceCount):
            return NotImplemented
        return all(self.get(resource) == other.get(resource) for resource in RechargeableResource)
