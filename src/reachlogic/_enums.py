"""String enums describing resources and damage sources."""

from enum import StrEnum
from typing import Self


class StrEnumWithDoc(StrEnum):
    """Base class for string enums whose members carry a docstring.

    Members are declared as ``NAME = "value", "doc"``.
    """

    def __new__(cls, value: str, doc: str = "") -> Self:
        """Create a new enum member with a docstring."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj


class RechargeableResource(StrEnumWithDoc):
    """A resource with its own current and maximum amount."""

    REGULAR_ENERGY = "regular_energy", "Primary health pool, refilled by energy tanks."
    RESERVE_ENERGY = "reserve_energy", "Backup health pool, drained after regular energy reaches 1."
    MISSILE = "missile", "Basic ammunition."
    SUPER = "super", "Heavy ammunition."
    POWER_BOMB = "power_bomb", "Area-of-effect ammunition."


class ConsumableResource(StrEnumWithDoc):
    """A spendable resource pool, possibly spanning several rechargeable resources."""

    ENERGY = "energy", "Regular and reserve energy, spent regular-first."
    MISSILE = "missile", "Missiles."
    SUPER = "super", "Super missiles."
    POWER_BOMB = "power_bomb", "Power bombs."

    @property
    def rechargeables(self) -> tuple[RechargeableResource, ...]:
        """The rechargeable resources backing this pool, in spending order."""
        return _CONSUMABLE_SOURCES[self]


_CONSUMABLE_SOURCES: dict[ConsumableResource, tuple[RechargeableResource, ...]] = {
    ConsumableResource.ENERGY: (RechargeableResource.REGULAR_ENERGY, RechargeableResource.RESERVE_ENERGY),
    ConsumableResource.MISSILE: (RechargeableResource.MISSILE,),
    ConsumableResource.SUPER: (RechargeableResource.SUPER,),
    ConsumableResource.POWER_BOMB: (RechargeableResource.POWER_BOMB,),
}


class DamageOverTimeSource(StrEnumWithDoc):
    """Environmental damage applied per frame."""

    ACID = "acid", "Acid pools."
    GRAPPLE_ELECTRICITY = "grapple_electricity", "Electrified grapple blocks."
    HEAT = "heat", "Heated rooms."
    LAVA = "lava", "Submerged in lava."
    LAVA_PHYSICS = "lava_physics", "Lava without the full suit's physics."
    SHINESPARK = "shinespark", "Energy drained while sparking."
    SAMUS_EATER = "samus_eater", "Held by a grabbing plant."


class PunctualDamageSource(StrEnumWithDoc):
    """Environmental damage applied per hit."""

    THORN_HIT = "thorn_hit", "Contact with thorns."
    SPIKE_HIT = "spike_hit", "Contact with spikes."
    HIBASHI_HIT = "hibashi_hit", "Hit by a fire pillar."


class UnknownNamePolicy(StrEnum):
    """What to do with option names that match nothing in the model."""

    IGNORE = "ignore"
    WARN = "warn"
    ERROR = "error"
