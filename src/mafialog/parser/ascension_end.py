"""Detection of the block that ends an ascension."""

from mafialog.parser.block_reader import LogBlock, LogBlockType
from mafialog.parser.patterns import COMBAT_WIN_SUFFIX, ENCOUNTER_PATTERN, ROUND_ZERO_PATTERN

# Final bosses whose defeat ends the run, matched against the encounter line
FINAL_BOSS_SUFFIXES = (
    "Naughty Sorceress (3)",
    "The Rain King",
    "Avatar of Jarlsberg",
)
SORCERESS_CHAMBER = "The Naughty Sorceress' Chamber"
# Path of the Plumber bosses are all named "Wa..."
PLUMBER_BOSS_MARKER = "Encounter: Wa"
DONATE_BODY_CHOICE = "Took choice 1089/30"
MACGUFFIN_ENCOUNTER = "Encounter: Returning the MacGuffin"
MACGUFFIN_CHOICE = "choice.php?pwd&whichchoice=1054&option=1"
FREEING_KING_RALPH = "Tower: Freeing King Ralph"


def _wins_fight(lines: list[str]) -> bool:
    return any(line.endswith(COMBAT_WIN_SUFFIX) for line in lines)


def is_final_dark_gyffte_battle(lines: list[str]) -> bool:
    """
    Whether an encounter block is the Dark Gyffte final fight.

    The final boss there carries the player's name spelled backwards.
    """
    if len(lines) < 3:
        return False
    player_match = ROUND_ZERO_PATTERN.match(lines[2])
    encounter_match = ENCOUNTER_PATTERN.match(lines[1])
    if not player_match or not encounter_match:
        return False
    player_name = player_match.group("player").lower()
    boss_name = encounter_match.group("name").lower()
    return boss_name == player_name[::-1]


class AscensionEndDetector:
    """
    Decides whether a block ends the ascension.

    Each path has its own terminal signature. With old ascension counting
    none of them apply and the whole log is read.
    """

    def __init__(self, old_ascension_counting: bool = False) -> None:
        self.old_ascension_counting = old_ascension_counting

    def is_ascension_end(self, block: LogBlock) -> bool:
        if self.old_ascension_counting:
            return False

        lines = block.lines
        if block.block_type is LogBlockType.ENCOUNTER:
            return self._is_final_fight(lines)
        if block.block_type is LogBlockType.SERVICE:
            return lines[0].startswith(DONATE_BODY_CHOICE)
        if block.block_type is LogBlockType.OTHER:
            if (
                len(lines) > 2
                and MACGUFFIN_ENCOUNTER in lines[1]
                and MACGUFFIN_CHOICE in lines
            ):
                return True
            return len(lines) > 1 and FREEING_KING_RALPH in lines[1]
        return False

    @staticmethod
    def _is_final_fight(lines: list[str]) -> bool:
        if len(lines) < 2:
            return False
        encounter = lines[1]
        if encounter.endswith(FINAL_BOSS_SUFFIXES) and _wins_fight(lines):
            return True
        if SORCERESS_CHAMBER in lines[0]:
            if is_final_dark_gyffte_battle(lines) or PLUMBER_BOSS_MARKER in encounter:
                return _wins_fight(lines)
        return False
