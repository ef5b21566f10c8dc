"""Game rules turning damage sources into energy costs."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from ._enums import DamageOverTimeSource, PunctualDamageSource

if TYPE_CHECKING:
    from ._options import LogicalOptions
    from ._requirements import EnemyAttack

type HasItem = Callable[[str], bool]

_D = Decimal

DEFAULT_PUNCTUAL_DAMAGE: Mapping[PunctualDamageSource, int] = {
    PunctualDamageSource.THORN_HIT: 16,
    PunctualDamageSource.SPIKE_HIT: 60,
    PunctualDamageSource.HIBASHI_HIT: 30,
}

DEFAULT_DAMAGE_PER_FRAME: Mapping[DamageOverTimeSource, Decimal] = {
    DamageOverTimeSource.ACID: _D("1.5"),
    DamageOverTimeSource.GRAPPLE_ELECTRICITY: _D(1),
    DamageOverTimeSource.HEAT: _D("0.25"),
    DamageOverTimeSource.LAVA: _D("0.5"),
    DamageOverTimeSource.LAVA_PHYSICS: _D("0.5"),
    DamageOverTimeSource.SHINESPARK: _D(1),
    DamageOverTimeSource.SAMUS_EATER: _D("0.1"),
}

# Sources missing from a table are not reduced by that suit
DEFAULT_FULL_SUIT_MULTIPLIERS: Mapping[DamageOverTimeSource, Decimal] = {
    DamageOverTimeSource.ACID: _D("0.25"),
    DamageOverTimeSource.GRAPPLE_ELECTRICITY: _D("0.25"),
    DamageOverTimeSource.SAMUS_EATER: _D("0.25"),
    DamageOverTimeSource.HEAT: _D(0),
    DamageOverTimeSource.LAVA: _D(0),
}

DEFAULT_HEAT_SUIT_MULTIPLIERS: Mapping[DamageOverTimeSource, Decimal] = {
    DamageOverTimeSource.ACID: _D("0.5"),
    DamageOverTimeSource.GRAPPLE_ELECTRICITY: _D("0.5"),
    DamageOverTimeSource.SAMUS_EATER: _D("0.5"),
    DamageOverTimeSource.LAVA: _D("0.5"),
    DamageOverTimeSource.LAVA_PHYSICS: _D("0.5"),
    DamageOverTimeSource.HEAT: _D(0),
}


@dataclass(frozen=True, slots=True)
class GameRules:
    """Damage rules, with suit mitigation.

    Two suits reduce damage. The full suit is checked first; the heat suit
    applies only when the full suit is absent or does not reduce a source.
    All damage is truncated to an integer.

    Static analysis uses a best case (every suit that options do not remove)
    and a worst case (only the suits of the starting inventory).
    """

    heat_suit: str = "Varia Suit"
    full_suit: str = "Gravity Suit"
    punctual_damage: Mapping[PunctualDamageSource, int] = field(default_factory=lambda: dict(DEFAULT_PUNCTUAL_DAMAGE))
    damage_per_frame: Mapping[DamageOverTimeSource, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_DAMAGE_PER_FRAME),
    )
    full_suit_multipliers: Mapping[DamageOverTimeSource, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_FULL_SUIT_MULTIPLIERS),
    )
    heat_suit_multipliers: Mapping[DamageOverTimeSource, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_HEAT_SUIT_MULTIPLIERS),
    )
    punctual_full_suit_multiplier: Decimal = _D("0.25")
    punctual_heat_suit_multiplier: Decimal = _D("0.5")
    shinespark_energy_floor: int = 29

    # Damage over time

    def _dot_multiplier(self, source: DamageOverTimeSource, has_item: HasItem) -> tuple[Decimal, tuple[str, ...]]:
        if has_item(self.full_suit) and source in self.full_suit_multipliers:
            return self.full_suit_multipliers[source], (self.full_suit,)
        if has_item(self.heat_suit) and source in self.heat_suit_multipliers:
            return self.heat_suit_multipliers[source], (self.heat_suit,)
        return _D(1), ()

    def damage_over_time(self, source: DamageOverTimeSource, frames: int, has_item: HasItem) -> int:
        """Damage taken over ``frames`` frames of ``source``.

        Example:
            >>> rules = GameRules()
            >>> rules.damage_over_time(DamageOverTimeSource.HEAT, 100, lambda name: False)
            25

        """
        multiplier, _ = self._dot_multiplier(source, has_item)
        return int(frames * self.damage_per_frame[source] * multiplier)

    def damage_over_time_reducing_items(self, source: DamageOverTimeSource, has_item: HasItem) -> tuple[str, ...]:
        return self._dot_multiplier(source, has_item)[1]

    def lenient_frames(self, source: DamageOverTimeSource, frames: int, options: LogicalOptions) -> int:
        """Frames after applying the options' leniency for ``source``."""
        return int(frames * options.leniency_multiplier(source))

    def minimum_energy_threshold(self, source: DamageOverTimeSource) -> int:
        """Energy that ``source`` can never take away."""
        return self.shinespark_energy_floor if source == DamageOverTimeSource.SHINESPARK else 1

    # Punctual damage

    def _punctual_multiplier(self, has_item: HasItem) -> tuple[Decimal, tuple[str, ...]]:
        if has_item(self.full_suit):
            return self.punctual_full_suit_multiplier, (self.full_suit,)
        if has_item(self.heat_suit):
            return self.punctual_heat_suit_multiplier, (self.heat_suit,)
        return _D(1), ()

    def punctual_damage_per_hit(self, source: PunctualDamageSource, has_item: HasItem) -> int:
        multiplier, _ = self._punctual_multiplier(has_item)
        return int(self.punctual_damage[source] * multiplier)

    def punctual_damage_reducing_items(self, has_item: HasItem) -> tuple[str, ...]:
        return self._punctual_multiplier(has_item)[1]

    # Enemies

    def enemy_damage_per_hit(self, attack: EnemyAttack, has_item: HasItem) -> int:
        if attack.affected_by_full_suit and has_item(self.full_suit):
            return attack.base_damage // 4
        if attack.affected_by_heat_suit and has_item(self.heat_suit):
            return attack.base_damage // 2
        return attack.base_damage

    def enemy_damage_reducing_items(self, attack: EnemyAttack, has_item: HasItem) -> tuple[str, ...]:
        if attack.affected_by_full_suit and has_item(self.full_suit):
            return (self.full_suit,)
        if attack.affected_by_heat_suit and has_item(self.heat_suit):
            return (self.heat_suit,)
        return ()

    # Shinespark

    def shinespark_energy_needed(self, frames: int, excess_frames: int, times: int = 1) -> int:
        """Regular energy needed before sparking ``times`` times.

        Every spark but the last must complete, excess frames included. The
        last one only needs its non-excess frames. Nothing is needed when
        there is no spark.
        """
        if frames <= 0 or times <= 0:
            return 0
        minimum_damage = frames * (times - 1) + (frames - excess_frames)
        return minimum_damage + self.shinespark_energy_floor

    def shinespark_damage(self, energy: int, frames: int, times: int = 1) -> int:
        """Energy lost by sparking, which stops at the energy floor."""
        if frames <= 0 or times <= 0:
            return 0
        return max(0, min(frames * times, energy - self.shinespark_energy_floor))

    # Static analysis helpers

    def best_case_inventory(self, options: LogicalOptions) -> HasItem:
        """Item check for the best case: every suit not removed by options."""
        suits = {self.heat_suit, self.full_suit}
        return lambda name: name in suits and not options.is_item_removed(name)

    def worst_case_inventory(self, options: LogicalOptions) -> HasItem:
        """Item check for the worst case: only the starting items."""
        items = options.start_conditions.items
        return lambda name: name in items and not options.is_item_removed(name)

