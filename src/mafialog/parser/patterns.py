"""Compiled regex patterns for session log parsing."""

import re

# Turn marker opening an encounter block
# Example: [123] The Haunted Pantry
TURN_MARKER_PATTERN = re.compile(r"^\[(?P<turn>\d+)\] (?P<area>.+?)\s*$")

# Example: Encounter: possessed can of tomatoes
ENCOUNTER_PATTERN = re.compile(r"^Encounter: (?P<name>.*?)\s*$")

# Combat round lines
# Example: Round 0: Brad wins initiative!
# Example: Round 3: Brad casts SAUCEGEYSER!
# Example: Round 2: Brad uses the seal tooth!
ROUND_PREFIX = "Round "
ROUND_ZERO_PATTERN = re.compile(r"^Round 0: (?P<player>.*?) +(?:wins|loses) initiative!")
COMBAT_SKILL_PATTERN = re.compile(r"^Round \d+: .+? casts (?P<skill>.+?)!\s*$")
COMBAT_ITEM_PATTERN = re.compile(r"^Round \d+: .+? uses the (?P<item>.+?)!\s*$")
COMBAT_WIN_SUFFIX = "wins the fight!"
COMBAT_LOSS_PATTERN = re.compile(r"^Round \d+: .+? loses the fight!?\s*$")
COMBAT_RUNAWAY_PATTERN = re.compile(r"^Round \d+: .+? runs away!?\s*$")
# He-Boulder's major yellow ray
MAJOR_YELLOW_RAY_PATTERN = re.compile(
    r"^Round \d+: .+? swings his eyestalk around and unleashes a massive"
    r" ray of yellow energy, completely disintegrating your opponent\.$"
)

# Meat
# Example: You gain 1,234 Meat
# Example: After Battle: You gain 55 Meat
MEAT_PATTERN = re.compile(r"^(?:After Battle: )?You (?P<verb>gain|lose) (?P<amount>\d*,?\d+) Meat")
# Example: You spent 500 Meat
MEAT_SPENT_PATTERN = re.compile(r"^You spent (?P<amount>[\d,]+) Meat")

# Substats
# Example: You gain 12 Strongness
# Example: After Battle: You lose 3 Cheek
STAT_PATTERN = re.compile(
    r"^(?:After Battle: )?You (?P<verb>gain|lose) (?P<amount>\S+) (?P<substat>[A-Za-z]+)\s*$"
)

# MP
# Example: You gain 15 Mana Points
MP_PATTERN = re.compile(
    r"^(?:After Battle: )?You gain (?P<amount>[\d,]+) "
    r"(?P<points>Muscularity Points|Mana Points|Mojo Points)\s*$"
)

# Adventures
# Example: You gain 6 Adventures
ADVENTURE_GAIN_PATTERN = re.compile(r"^You gain (?P<amount>[\d,]+) Adventures?")
# Example: You lose 60 Adventures
ADVENTURE_LOSS_PATTERN = re.compile(r"You lose (?P<amount>[\d,]+) Adventures?")

# Items
SINGLE_ITEM_PREFIX = "You acquire an item: "
# Example: You acquire an item: seal tooth
SINGLE_ITEM_PATTERN = re.compile(r"^You acquire an item: (?P<item>.+?)\s*$")
# Example: You acquire disassembled clover (3)
MULTI_ITEM_PATTERN = re.compile(r"^You acquire (?!an? (?:item|effect|intrinsic):)(?P<item>.+?) \((?P<amount>[\d,]+)\)\s*$")

# Effects
# Example: You acquire an effect: Bastille Budgeteer (5)
# Example: You acquire an effect: On the Trail (duration: 40 Adventures)
EFFECT_PATTERN = re.compile(
    r"^You acquire an effect:\s*(?P<effect>.*?)\s*\((?:duration: )?(?P<duration>\d+)(?: Adventures?)?\)\s*$"
)
# Example: You acquire an intrinsic: Human-Fish Hybrid
INTRINSIC_PATTERN = re.compile(r"^You acquire an intrinsic: (?P<intrinsic>.+?)\s*$")
HYBRID_INTRINSIC_PATTERN = re.compile(r"^You acquire an intrinsic: (?P<intrinsic>Human-.+? Hybrid)\s*$")

# Non-combat commands
# Example: cast 3 Summon Clip Art
SKILL_CAST_PATTERN = re.compile(r"^cast (?P<casts>\d+) (?P<skill>.+?)\s*$")
# Example: eat 1 Boris's key lime pie
CONSUMABLE_PATTERN = re.compile(r"^(?P<verb>eat|drink|chew|use) (?P<amount>\d+) (?P<item>.+?)\s*$")
# Example: use 1 Gene Tonic: Fish
GENE_TONIC_PATTERN = re.compile(r"^use (?P<amount>\d+) (?P<tonic>Gene Tonic: .+?)\s*$")
# Example: pull: 2 ring of conflict
PULL_PATTERN = re.compile(r"^pull: (?P<amount>\d+) (?P<item>.+?)\s*$")
# Example: You learned a new skill: Snokebomb
LEARNED_SKILL_PATTERN = re.compile(r"^You learned a new skill: (?P<skill>.+?)\s*$")
# Example: Took choice 1395/4: Rainbowolin
TOOK_CHOICE_PATTERN = re.compile(r"^Took choice (?P<choice>\d+/\d+):\s*(?P<text>.*)$")
# Example: Took choice 1089/30: Donate Body
SERVICE_CHOICE_PATTERN = re.compile(r"^Took choice 1089/(?P<service>\d*):")
# Example: pizza bran muffin, cheap wine, sea salt, tofu
PIZZA_PATTERN = re.compile(r"^pizza (?P<ingredients>.+?)\s*$")
# Example: You gain a Level!
LEVEL_UP_PATTERN = re.compile(r"^You gain a Level!")
# Example: Notes: burned the first free fight
NOTES_PATTERN = re.compile(r"^Notes: (?P<notes>.*?)\s*$")

# Loadout
# Example: familiar Frumious Bandersnatch (12 lbs)
FAMILIAR_PATTERN = re.compile(r"^familiar (?P<familiar>.+?)(?: \((?P<weight>\d+) lbs?\))?\s*$")
# Example: equip acc1 ring of conflict
EQUIP_PATTERN = re.compile(
    r"^equip (?P<slot>hat|weapon|off-hand|offhand|back|shirt|pants|acc1|acc2|acc3|familiar)"
    r" (?P<item>.+?)\s*$"
)
# Example: unequip hat
UNEQUIP_PATTERN = re.compile(
    r"^unequip (?P<slot>hat|weapon|off-hand|offhand|back|shirt|pants|acc1|acc2|acc3|familiar)\s*$"
)
CHECKPOINT_LINE = "checkpoint"
OUTFIT_CHECKPOINT_LINE = "outfit checkpoint"

# Days
# Example: ===Day 2===
DAY_CHANGE_PATTERN = re.compile(r"^===Day (?P<day>\d+)===\s*$")
DAY_CHANGE_NOTE = "Day change occurred"
# Real-world date followed by the in-game date
# Example: February 21, 2020 - Boozember 3
DATE_LINE_PATTERN = re.compile(
    r"^(?:January|February|March|April|May|June|July|August|September|October|November|December)"
    r" \d{1,2}, \d{4} - (?P<kol_date>.+?)\s*$"
)

# Block markers
ASCENSION_DATA_PATTERN = re.compile(r"^Ascension #(?P<number>\d+):?\s*$")
PLAYER_SNAPSHOT_LINE = "Player Snapshot"
BASTILLE_LINE = "use 1 Bastille Battalion control rig"
BEACH_HEAD_MARKER = "beach head"
SUMMON_CLIP_ART_LINE = "cast 1 Summon Clip Art"

# Player snapshot fields
# Example: Class: Sauceror
SNAPSHOT_CLASS_PATTERN = re.compile(r"^Class: (?P<value>.+?)\s*$")
# Example: Lv: 7
SNAPSHOT_LEVEL_PATTERN = re.compile(r"^Lv: (?P<value>\d+)")
# Example: Mus: 35 (30), tnp = 12
SNAPSHOT_STAT_PATTERN = re.compile(
    r"^(?:Buffed )?(?P<stat>Mus|Mys|Mox): (?P<buffed>\d+)(?: \((?P<base>\d+)\))?"
)
# Example: Advs: 120
SNAPSHOT_ADVENTURES_PATTERN = re.compile(r"^Advs: (?P<value>\d+)")
# Example: Meat: 1,234
SNAPSHOT_MEAT_PATTERN = re.compile(r"^Meat: (?P<value>[\d,]+)")
# Example: Familiar: Mosquito (5 lbs)
SNAPSHOT_FAMILIAR_PATTERN = re.compile(r"^Familiar: (?P<value>.+?)(?: \(\d+ lbs?\))?\s*$")
# Example: Hat: Helmet Turtle
SNAPSHOT_EQUIPMENT_PATTERN = re.compile(
    r"^(?P<slot>Hat|Weapon|Off-hand|Back|Shirt|Pants|Acc1|Acc2|Acc3|Fam Equip|Familiar Equip)"
    r": (?P<item>.+?)\s*$"
)

# Familiar and equipment that make running away free
RUNAWAY_EQUIPMENT = frozenset({
    "navel ring of navel gazing",
    "greatest american pants",
    "peppermint parasol",
})
RUNAWAY_FAMILIARS = frozenset({
    "pair of stomping boots",
    "frumious bandersnatch",
})

# Combat skills and items that banish the current monster
BANISH_SKILLS = frozenset({
    "snokebomb",
    "feel hatred",
    "reflex hammer",
    "throw latte on opponent",
    "batter up!",
    "curse of vacation",
    "show them your ring",
    "breathe out",
    "bowl a curveball",
    "kgb tranquilizer dart",
})
BANISH_ITEMS = frozenset({
    "louder than bomb",
    "tennis ball",
    "smoke grenade",
    "crystal skull",
    "divine champagne popper",
    "harold's bell",
})
