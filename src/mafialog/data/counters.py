"""Daily limited-use counters and the lookup table that feeds them."""

from enum import Enum
from types import MappingProxyType
from typing import Optional


class Counter(Enum):
    """
    A daily limited resource.

    Members are listed alphabetically by display name, which is also the
    order used when sorting limited uses.
    """

    BASTILLE = ("Bastille", 1)
    BEACH_HEAD_COLD = ("Beach Head/Cold", 1)
    BEACH_HEAD_FAMILIAR_WT = ("Beach Head/Familiar Wt", 1)
    BEACH_HEAD_HOT = ("Beach Head/Hot", 1)
    BEACH_HEAD_INITIATIVE = ("Beach Head/Initiative", 1)
    BEACH_HEAD_MOXIE = ("Beach Head/Moxie", 1)
    BEACH_HEAD_MUSCLE = ("Beach Head/Muscle", 1)
    BEACH_HEAD_MYSTICALITY = ("Beach Head/Mysticality", 1)
    BEACH_HEAD_SLEAZE = ("Beach Head/Sleaze", 1)
    BEACH_HEAD_SPOOKY = ("Beach Head/Spooky", 1)
    BEACH_HEAD_STATS = ("Beach Head/Stats", 1)
    BEACH_HEAD_STENCH = ("Beach Head/Stench", 1)
    CHEAT_CODE = ("CHEAT CODE", 100)
    CLIP_ART = ("Clip Art", 3)
    DAYCARE_SPA = ("Daycare Spa", 1)
    DOCTOR_BAG_HAMMER = ("Doctor Bag/Hammer", 3)
    DOCTOR_BAG_OTOSCOPE = ("Doctor Bag/Otoscope", 3)
    DOCTOR_BAG_XRAY = ("Doctor Bag/X-ray", 3)
    FORTUNE_TELLER = ("Fortune Teller", 1)
    PILLKEEPER = ("Pillkeeper", 6)
    SABER_UPGRADE = ("Saber/Upgrade", 1)
    SABER_USE_FORCE = ("Saber/Use the Force", 5)
    VAMPYRIC_CLOAKE = ("Vampyric Cloake", 10)

    def __init__(self, display_name: str, limit: int) -> None:
        self.display_name = display_name
        self.limit = limit

    @property
    def sort_index(self) -> int:
        return list(Counter).index(self)

    @classmethod
    def from_name(cls, name: str) -> "Counter":
        """
        Look up a counter by display name (case-insensitive) or member name.

        Raises:
            ValueError: If no counter matches
        """
        for counter in cls:
            if counter.display_name.lower() == name.lower():
                return counter
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown counter: {name}") from None


REPLACE_ENEMY = "Replace Enemy"

# Choice ids ("choice/option"), lowercased skill names and lowercased effect
# names all share one table, since the mechanics award the same counters.
LIMITED_USE_MAP = MappingProxyType({
    # Fourth of May Cosplay Saber
    "1387/1": (Counter.SABER_USE_FORCE, "Not the adventurer"),
    "1387/2": (Counter.SABER_USE_FORCE, "Find friends"),
    "1387/3": (Counter.SABER_USE_FORCE, "Drop things"),
    "1386/1": (Counter.SABER_UPGRADE, "MP regen"),
    "1386/2": (Counter.SABER_UPGRADE, "+20 ML"),
    "1386/3": (Counter.SABER_UPGRADE, "+3 prismatic res"),
    "1386/4": (Counter.SABER_UPGRADE, "+10 familiar wt"),
    # Pillkeeper
    "1395/1": (Counter.PILLKEEPER, "Explodinall"),
    "1395/2": (Counter.PILLKEEPER, "Extendicillin"),
    "1395/3": (Counter.PILLKEEPER, "Sneakisol"),
    "1395/4": (Counter.PILLKEEPER, "Rainbowolin"),
    "1395/5": (Counter.PILLKEEPER, "Hulkien"),
    "1395/6": (Counter.PILLKEEPER, "Fidoxene"),
    "1395/7": (Counter.PILLKEEPER, "Surprise Me"),
    "1395/8": (Counter.PILLKEEPER, "Telecybin"),
    # Powerful Glove
    "cheat code: replace enemy": (Counter.CHEAT_CODE, REPLACE_ENEMY),
    "cheat code: triple size": (Counter.CHEAT_CODE, "Triple Size"),
    "cheat code: invisible avatar": (Counter.CHEAT_CODE, "Invisible Avatar"),
    "cheat code: shrink enemy": (Counter.CHEAT_CODE, "Shrink Enemy"),
    # Beach Comb (effects)
    "hot-headed": (Counter.BEACH_HEAD_HOT, ""),
    "cold as nice": (Counter.BEACH_HEAD_COLD, ""),
    "a brush with grossness": (Counter.BEACH_HEAD_STENCH, ""),
    "does it have a skull in there??": (Counter.BEACH_HEAD_SPOOKY, ""),
    "oiled, slick": (Counter.BEACH_HEAD_SLEAZE, ""),
    "lack of body-building": (Counter.BEACH_HEAD_MUSCLE, ""),
    "we're all made of starfish": (Counter.BEACH_HEAD_MYSTICALITY, ""),
    "pomp & circumsands": (Counter.BEACH_HEAD_MOXIE, ""),
    "resting beach face": (Counter.BEACH_HEAD_INITIATIVE, ""),
    "do i know you from somewhere?": (Counter.BEACH_HEAD_FAMILIAR_WT, ""),
    "you learned something maybe!": (Counter.BEACH_HEAD_STATS, ""),
    # Lil' Doctor bag
    "reflex hammer": (Counter.DOCTOR_BAG_HAMMER, ""),
    "otoscope": (Counter.DOCTOR_BAG_OTOSCOPE, ""),
    "chest x-ray": (Counter.DOCTOR_BAG_XRAY, ""),
    # Vampyric cloake
    "become a bat": (Counter.VAMPYRIC_CLOAKE, "Bat"),
    "become a wolf": (Counter.VAMPYRIC_CLOAKE, "Wolf"),
    "become a cloud of mist": (Counter.VAMPYRIC_CLOAKE, "Mist"),
    "summon clip art": (Counter.CLIP_ART, ""),
})

# Effects that only matter for the turn they are acquired on
DAYCARE_SPA_EFFECTS = MappingProxyType({
    "muddled": "Mud bath",
    "ten out of ten": "Mani-pedi",
    "uncucumbered": "Eye treatment",
    "flagrantly fragrant": "Aromatherapy",
})

FORTUNE_TELLER_EFFECTS = MappingProxyType({
    "a girl named sue": "Susie",
    "there's no n in love": "Hagnk",
    "meet the meat": "Meatsmith",
    "gunther than thou": "Gunther",
    "everybody calls him gorgon": "Gorgonzola",
    "they call him shifty because...": "Shifty",
})


def lookup_limited_use(key: str) -> Optional[tuple[Counter, str]]:
    """
    Look up a limited use by choice id, skill name or effect name.

    Args:
        key: "choice/option" id, or a skill/effect name (any case)

    Returns:
        (counter, sub-use label) or None if the key is not a limited use
    """
    return LIMITED_USE_MAP.get(key.strip().lower())


def daily_use_weight(counter: Counter, use: str) -> int:
    """
    How much of a counter's daily budget one use consumes.

    Powerful Glove cheat codes drain 5% of the battery, and replacing an
    enemy drains twice that.
    """
    if counter is Counter.CHEAT_CODE:
        return 10 if use == REPLACE_ENEMY else 5
    return 1
