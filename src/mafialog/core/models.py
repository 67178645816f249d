"""Data models for parsed ascension logs."""

import collections
from dataclasses import dataclass, field, fields, replace
from enum import Enum, auto
from typing import Optional

from mafialog.data.counters import Counter
from mafialog.data.stats import StatClass


@dataclass(frozen=True)
class Statgain:
    """Substat gains for the three primary stats."""

    muscle: int = 0
    mysticality: int = 0
    moxie: int = 0

    def plus(self, other: "Statgain") -> "Statgain":
        return Statgain(
            self.muscle + other.muscle,
            self.mysticality + other.mysticality,
            self.moxie + other.moxie,
        )

    def negate(self) -> "Statgain":
        return Statgain(-self.muscle, -self.mysticality, -self.moxie)

    @property
    def is_empty(self) -> bool:
        return self.muscle == 0 and self.mysticality == 0 and self.moxie == 0

    @property
    def dominant_stat(self) -> Optional[StatClass]:
        """Stat class with the largest gain, None if nothing was gained."""
        if self.is_empty:
            return None
        ranked = [
            (self.muscle, StatClass.MUSCLE),
            (self.mysticality, StatClass.MYSTICALITY),
            (self.moxie, StatClass.MOXIE),
        ]
        return max(ranked, key=lambda entry: entry[0])[1]

    @classmethod
    def of(cls, stat_class: StatClass, amount: int) -> "Statgain":
        """Build a gain for a single stat class."""
        if stat_class is StatClass.MUSCLE:
            return cls(muscle=amount)
        if stat_class is StatClass.MYSTICALITY:
            return cls(mysticality=amount)
        if stat_class is StatClass.MOXIE:
            return cls(moxie=amount)
        return NO_STATS


NO_STATS = Statgain()


@dataclass(frozen=True)
class MeatGain:
    """Meat gained inside and outside of encounters, and meat spent."""

    encounter_meat: int = 0
    other_meat: int = 0
    spent_meat: int = 0

    def plus(self, other: "MeatGain") -> "MeatGain":
        return MeatGain(
            self.encounter_meat + other.encounter_meat,
            self.other_meat + other.other_meat,
            self.spent_meat + other.spent_meat,
        )

    @property
    def total_gained(self) -> int:
        return self.encounter_meat + self.other_meat


@dataclass(frozen=True)
class MPGain:
    """MP restored, split by source."""

    encounter_mp: int = 0
    out_of_encounter_mp: int = 0
    consumable_mp: int = 0

    def plus(self, other: "MPGain") -> "MPGain":
        return MPGain(
            self.encounter_mp + other.encounter_mp,
            self.out_of_encounter_mp + other.out_of_encounter_mp,
            self.consumable_mp + other.consumable_mp,
        )

    @property
    def total(self) -> int:
        return self.encounter_mp + self.out_of_encounter_mp + self.consumable_mp


class ConsumableKind(Enum):
    """How a consumable was used."""

    FOOD = auto()
    BOOZE = auto()
    SPLEEN = auto()
    OTHER = auto()


@dataclass
class Consumable:
    """A food, booze, spleen or other item used outside of combat."""

    name: str
    amount: int
    kind: ConsumableKind
    turn_number: int
    day_number: int = 1
    stat_gain: Statgain = NO_STATS
    adventure_gain: int = 0
    meat_gain: int = 0
    mp_gain: int = 0


@dataclass(frozen=True)
class EquipmentChange:
    """Full equipment loadout, effective from a turn onwards."""

    turn_number: int
    hat: str = "none"
    weapon: str = "none"
    offhand: str = "none"
    back: str = "none"
    shirt: str = "none"
    pants: str = "none"
    acc1: str = "none"
    acc2: str = "none"
    acc3: str = "none"
    familiar_equip: str = "none"

    def equals_ignore_turn(self, other: "EquipmentChange") -> bool:
        return self.items() == other.items()

    def items(self) -> tuple[str, ...]:
        return tuple(getattr(self, slot) for slot in EQUIPMENT_SLOTS)

    def with_slot(self, slot: str, item: str, turn_number: int) -> "EquipmentChange":
        """Copy of this loadout with one slot changed."""
        if slot not in EQUIPMENT_SLOTS:
            raise ValueError(f"Unknown equipment slot: {slot}")
        return replace(self, turn_number=turn_number, **{slot: item or "none"})

    def at_turn(self, turn_number: int) -> "EquipmentChange":
        return replace(self, turn_number=turn_number)

    def is_equipped(self, item: str) -> bool:
        item = item.lower()
        return any(equipped.lower() == item for equipped in self.items())


EQUIPMENT_SLOTS = tuple(f.name for f in fields(EquipmentChange) if f.name != "turn_number")

NO_EQUIPMENT = EquipmentChange(0)


@dataclass(frozen=True)
class FamiliarChange:
    """Familiar in use from a turn onwards."""

    familiar_name: str
    turn_number: int


NO_FAMILIAR = FamiliarChange("none", 0)


@dataclass(frozen=True)
class DayChange:
    """Start of an in-game day."""

    day_number: int
    turn_number: int


@dataclass(frozen=True)
class LevelData:
    """Turn a character level was reached on."""

    level_number: int
    turn_number: int


@dataclass(frozen=True)
class Pull:
    """Item pulled from Hagnk's storage."""

    item_name: str
    amount: int
    turn_number: int
    day_number: int


@dataclass(frozen=True)
class NamedTurn:
    """Free-form data attached to a turn number."""

    data: str
    turn_number: int


@dataclass
class PlayerSnapshot:
    """Character state printed by mafia on login and ascension."""

    turn_number: int
    day_number: int = 1
    character_class: str = "not defined"
    level: int = 0
    muscle: int = 0
    mysticality: int = 0
    moxie: int = 0
    buffed_muscle: int = 0
    buffed_mysticality: int = 0
    buffed_moxie: int = 0
    adventures_left: int = 0
    meat: int = 0
    familiar: str = "none"
    equipment: Optional[EquipmentChange] = None


@dataclass(frozen=True)
class LimitedUse:
    """One use of a daily-limited resource."""

    day: int
    turn: int
    counter: Counter
    use: str
    stat_gain: Statgain = NO_STATS

    def sort_key(self) -> tuple[int, str, int]:
        return (self.counter.sort_index, self.use, self.turn)

    def __lt__(self, other: "LimitedUse") -> bool:
        return self.sort_key() < other.sort_key()


@dataclass(frozen=True)
class PizzaEvent:
    """A crafted or eaten diabolic pizza and its outcome."""

    day: int
    turn: int
    description: str
    duration: int = 0


@dataclass(frozen=True)
class FreeRunaways:
    """Runaways attempted with a free runaway source, and how many were free."""

    attempted: int = 0
    successful: int = 0

    def __post_init__(self) -> None:
        if self.attempted < 0 or self.successful < 0:
            raise ValueError("Number of runaways cannot be negative")
        if self.successful > self.attempted:
            raise ValueError("Successful runaways cannot exceed attempted runaways")

    def plus(self, other: "FreeRunaways") -> "FreeRunaways":
        return FreeRunaways(
            self.attempted + other.attempted,
            self.successful + other.successful,
        )

    def __str__(self) -> str:
        return f"{self.successful} / {self.attempted} free retreats"


@dataclass
class Turn:
    """
    One adventure spent, or one free action logged with a turn number.

    Turns are plain records. Merging same-numbered turns is decided by the
    timeline; this class only knows how to fold another turn's data into
    itself.
    """

    area_name: str
    encounter_name: str
    turn_number: int
    day_number: int
    used_equipment: EquipmentChange = NO_EQUIPMENT
    used_familiar: FamiliarChange = NO_FAMILIAR
    meat: MeatGain = field(default_factory=MeatGain)
    stat_gain: Statgain = NO_STATS
    mp_gain: MPGain = field(default_factory=MPGain)
    dropped_items: collections.Counter = field(default_factory=collections.Counter)
    skills_cast: collections.Counter = field(default_factory=collections.Counter)
    combat_items_used: collections.Counter = field(default_factory=collections.Counter)
    consumables_used: list[Consumable] = field(default_factory=list)
    limited_uses: list[LimitedUse] = field(default_factory=list)
    pizza_events: list[PizzaEvent] = field(default_factory=list)
    encounters: list[str] = field(default_factory=list)
    attempted_runaways: int = 0
    free_runaways: int = 0
    is_free_turn: bool = False
    is_disintegrated: bool = False
    is_banished: bool = False
    ran_away: bool = False
    runaway_equipment_equipped: bool = False
    notes: str = ""

    def __post_init__(self) -> None:
        if self.turn_number < 0:
            raise ValueError("Turn number cannot be negative")
        if self.day_number < 1:
            raise ValueError("Day number must be at least 1")
        if not self.encounters:
            self.encounters.append(self.encounter_name)

    def add_dropped_item(self, item_name: str, amount: int = 1) -> None:
        self.dropped_items[item_name] += amount

    def add_skill_cast(self, skill_name: str, casts: int = 1) -> None:
        self.skills_cast[skill_name.lower()] += casts

    def add_combat_item_used(self, item_name: str, amount: int = 1) -> None:
        self.combat_items_used[item_name] += amount

    def add_consumable_used(self, consumable: Consumable) -> None:
        self.consumables_used.append(consumable)

    def add_meat(self, meat: MeatGain) -> None:
        self.meat = self.meat.plus(meat)

    def add_stat_gain(self, stat_gain: Statgain) -> None:
        self.stat_gain = self.stat_gain.plus(stat_gain)

    def add_mp_gain(self, mp_gain: MPGain) -> None:
        self.mp_gain = self.mp_gain.plus(mp_gain)

    def add_limited_use(self, limited_use: LimitedUse) -> None:
        self.limited_uses.append(limited_use)

    def add_pizza_event(self, event: PizzaEvent) -> None:
        self.pizza_events.append(event)

    def record_runaway(self, has_free_runaway_source: bool) -> None:
        """Mark the turn as run away from, counting an attempt if a free source was used."""
        self.ran_away = True
        self.runaway_equipment_equipped = has_free_runaway_source
        if has_free_runaway_source:
            self.attempted_runaways += 1

    def add_free_runaways(self, count: int) -> None:
        self.free_runaways += count

    def add_notes(self, notes: str) -> None:
        if not notes:
            return
        self.notes = f"{self.notes}\n{notes}" if self.notes else notes

    def absorb(self, other: "Turn") -> None:
        """Fold all data of another turn into this one."""
        self.encounters.extend(other.encounters)
        self.add_meat(other.meat)
        self.add_stat_gain(other.stat_gain)
        self.add_mp_gain(other.mp_gain)
        self.dropped_items.update(other.dropped_items)
        self.skills_cast.update(other.skills_cast)
        self.combat_items_used.update(other.combat_items_used)
        self.consumables_used.extend(other.consumables_used)
        self.limited_uses.extend(other.limited_uses)
        self.pizza_events.extend(other.pizza_events)
        self.attempted_runaways += other.attempted_runaways
        self.free_runaways += other.free_runaways
        self.is_disintegrated = self.is_disintegrated or other.is_disintegrated
        self.is_banished = self.is_banished or other.is_banished
        self.add_notes(other.notes)

    @property
    def runaways(self) -> FreeRunaways:
        return FreeRunaways(self.attempted_runaways, self.free_runaways)

    @property
    def consumable_stat_gain(self) -> Statgain:
        total = NO_STATS
        for consumable in self.consumables_used:
            total = total.plus(consumable.stat_gain)
        return total

    @property
    def total_stat_gain(self) -> Statgain:
        """Stats from the turn itself and its consumables."""
        return self.stat_gain.plus(self.consumable_stat_gain)


# Areas whose "turns" are fights against copied monsters
COPIED_MONSTER_AREAS = frozenset({
    "spooky putty monster",
    "shaking 4-d camera",
    "photocopied monster",
    "rain-doh box full of monster",
    "ice sculpture",
    "rain man",
    "chateau painting",
})


@dataclass
class TurnInterval:
    """Consecutive turns spent in one area."""

    area_name: str
    turns: list[Turn] = field(default_factory=list)
    is_free: bool = False
    # Only set for intervals that were never built from single turns
    start: Optional[int] = None
    end: Optional[int] = None

    def add_turn(self, turn: Turn) -> None:
        if turn.area_name != self.area_name:
            raise ValueError(
                f"Turn in {turn.area_name!r} does not belong to interval {self.area_name!r}"
            )
        self.turns.append(turn)

    @property
    def start_turn(self) -> int:
        if self.turns:
            return self.turns[0].turn_number
        return self.start or 0

    @property
    def end_turn(self) -> int:
        if self.turns:
            return self.turns[-1].turn_number
        return self.end if self.end is not None else self.start_turn

    @property
    def total_turns(self) -> int:
        """Adventures spent in this interval."""
        if self.turns:
            return sum(1 for turn in self.turns if not turn.is_free_turn)
        return self.end_turn - self.start_turn

    @property
    def is_copied_monster(self) -> bool:
        return self.area_name.lower() in COPIED_MONSTER_AREAS

    @property
    def dropped_items(self) -> collections.Counter:
        total = collections.Counter()
        for turn in self.turns:
            total.update(turn.dropped_items)
        return total

    @property
    def skills_cast(self) -> collections.Counter:
        total = collections.Counter()
        for turn in self.turns:
            total.update(turn.skills_cast)
        return total

    @property
    def combat_items_used(self) -> collections.Counter:
        total = collections.Counter()
        for turn in self.turns:
            total.update(turn.combat_items_used)
        return total

    @property
    def consumables_used(self) -> list[Consumable]:
        return [c for turn in self.turns for c in turn.consumables_used]

    @property
    def limited_uses(self) -> list[LimitedUse]:
        return [u for turn in self.turns for u in turn.limited_uses]

    @property
    def stat_gain(self) -> Statgain:
        total = NO_STATS
        for turn in self.turns:
            total = total.plus(turn.total_stat_gain)
        return total

    @property
    def meat(self) -> MeatGain:
        total = MeatGain()
        for turn in self.turns:
            total = total.plus(turn.meat)
        return total

    @property
    def mp_gain(self) -> MPGain:
        total = MPGain()
        for turn in self.turns:
            total = total.plus(turn.mp_gain)
        return total

    @property
    def free_runaways(self) -> int:
        return sum(turn.free_runaways for turn in self.turns)

    @property
    def attempted_runaways(self) -> int:
        return sum(turn.attempted_runaways for turn in self.turns)

    @property
    def runaways(self) -> FreeRunaways:
        return FreeRunaways(self.attempted_runaways, self.free_runaways)
