"""Stat classes, substat names and character classes."""

from enum import Enum
from types import MappingProxyType
from typing import Optional


class StatClass(Enum):
    """Primary stat, carrying the name the game uses for its MP pool."""

    MUSCLE = "Muscularity Points"
    MYSTICALITY = "Mana Points"
    MOXIE = "Mojo Points"
    MAXIMUM = "N/A"

    @property
    def points_name(self) -> str:
        return self.value


# Substat name -> stat class
SUBSTATS = MappingProxyType({
    "Beefiness": StatClass.MUSCLE,
    "Fortitude": StatClass.MUSCLE,
    "Muscleboundness": StatClass.MUSCLE,
    "Strengthliness": StatClass.MUSCLE,
    "Strongness": StatClass.MUSCLE,
    "Enchantedness": StatClass.MYSTICALITY,
    "Magicalness": StatClass.MYSTICALITY,
    "Mysteriousness": StatClass.MYSTICALITY,
    "Wizardliness": StatClass.MYSTICALITY,
    "Cheek": StatClass.MOXIE,
    "Chutzpah": StatClass.MOXIE,
    "Roguishness": StatClass.MOXIE,
    "Sarcasm": StatClass.MOXIE,
    "Smarm": StatClass.MOXIE,
})

# Full stat names, as used by "You gain a Muscle point!" style lines
STAT_NAMES = MappingProxyType({
    "Muscle": StatClass.MUSCLE,
    "Mysticality": StatClass.MYSTICALITY,
    "Moxie": StatClass.MOXIE,
})

MP_NAMES = frozenset(
    stat_class.points_name for stat_class in StatClass if stat_class is not StatClass.MAXIMUM
)


def get_stat_class(substat: str) -> Optional[StatClass]:
    """Map a substat name to its stat class, None if unknown."""
    return SUBSTATS.get(substat)


class CharacterClass(Enum):
    """Playable character class."""

    SEAL_CLUBBER = ("Seal Clubber", StatClass.MUSCLE, "clobber")
    TURTLE_TAMER = ("Turtle Tamer", StatClass.MUSCLE, "toss")
    PASTAMANCER = ("Pastamancer", StatClass.MYSTICALITY, "spaghetti spear")
    SAUCEROR = ("Sauceror", StatClass.MYSTICALITY, "salsaball")
    DISCO_BANDIT = ("Disco Bandit", StatClass.MOXIE, "suckerpunch")
    ACCORDION_THIEF = ("Accordion Thief", StatClass.MOXIE, "sing")
    AVATAR_OF_BORIS = ("Avatar of Boris", StatClass.MUSCLE, "N/A")
    AVATAR_OF_JARLSBERG = ("Avatar of Jarlsberg", StatClass.MYSTICALITY, "N/A")
    AVATAR_OF_SNEAKY_PETE = ("Avatar of Sneaky Pete", StatClass.MOXIE, "N/A")
    ED = ("Ed", StatClass.MYSTICALITY, "N/A")
    VAMPYRE = ("Vampyre", StatClass.MYSTICALITY, "N/A")
    PLUMBER = ("Plumber", StatClass.MAXIMUM, "N/A")
    NOT_DEFINED = ("not defined", StatClass.MUSCLE, "N/A")

    def __init__(self, class_name: str, stat_class: StatClass, trivial_skill: str) -> None:
        self.class_name = class_name
        self.stat_class = stat_class
        self.trivial_skill = trivial_skill

    def __str__(self) -> str:
        return self.class_name

    @classmethod
    def from_string(cls, class_name: str) -> "CharacterClass":
        """Resolve a class name, falling back to NOT_DEFINED."""
        if class_name is None:
            raise ValueError("Class name must not be None")
        for character_class in cls:
            if character_class.class_name == class_name:
                return character_class
        return cls.NOT_DEFINED
