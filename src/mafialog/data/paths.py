"""Ascension paths and game modes."""

from enum import Enum


class AscensionPath(Enum):
    """Named ascension ruleset."""

    NO_PATH = "No-Path"
    TEETOTALER = "Teetotaler"
    BOOZETAFARIAN = "Boozetafarian"
    OXYGENARIAN = "Oxygenarian"
    # 2011
    BEES_HATE_YOU = "Bees Hate You"
    WAY_OF_THE_SURPRISING_FIST = "Way of the Surprising Fist"
    TRENDY = "Trendy"
    # 2012
    AVATAR_OF_BORIS = "Avatar of Boris"
    BUGBEAR_INVASION = "Bugbear Invasion"
    ZOMBIE_SLAYER = "Zombie Slayer"
    # 2013
    AVATAR_OF_JARLSBERG = "Avatar of Jarlsberg"
    BIG = "BIG!"
    KOLHS = "KOLHS"
    CLASS_ACT_II = "Class Act II: A Class For Pigs"
    # Must stay after CLASS_ACT_II, it is a prefix of it
    CLASS_ACT = "Class Act"
    # 2014
    AVATAR_OF_SNEAKY_PETE = "Avatar of Sneaky Pete"
    SLOW_AND_STEADY = "Slow and Steady"
    HEAVY_RAINS = "Heavy Rains"
    PICKY = "Picky"
    # 2015
    STANDARD = "Standard"
    ED = "Actually Ed the Undying"
    OCRS = "One Crazy Random Summer"
    COMMUNITY_SERVICE = "Community Service"
    # 2016
    AVATAR_OF_WOL = "Avatar of West of Loathing"
    THE_SOURCE = "The Source"
    NUCLEAR_AUTUMN = "Nuclear Autumn"
    # 2017
    GELATINOUS_NOOB = "Gelatinous Noob"
    LICENSE_TO_ADVENTURE = "License to Adventure"
    LIVE_ASCEND_REPEAT = "Live. Ascend. Repeat."
    # 2018
    POCKET_FAMILIARS = "Pocket Familiars"
    G_LOVER = "G-Lover"
    DISGUISES_DELIMIT = "Disguises Delimit"
    # 2019
    DARK_GYFFTE = "Dark Gyffte"
    TWO_CRS = "Two Crazy Random Summer"
    KINGDOM_OF_EXPLOATHING = "Kingdom of Exploathing"
    # 2020
    PLUMBER = "Path of the Plumber"
    NOT_DEFINED = "not defined"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, path_name: str) -> "AscensionPath":
        """Resolve an exact path name, falling back to NOT_DEFINED."""
        if path_name is None:
            raise ValueError("Path name must not be None")
        try:
            return cls(path_name)
        except ValueError:
            return cls.NOT_DEFINED

    @classmethod
    def find_in(cls, text: str) -> "AscensionPath":
        """
        Find the first path whose name occurs in free text.

        Members are checked in declaration order, so longer names that
        contain shorter ones are listed first.
        """
        for path in cls:
            if path is not cls.NOT_DEFINED and path.value in text:
                return path
        return cls.NOT_DEFINED


class GameMode(Enum):
    """Ascension difficulty."""

    CASUAL = "Casual"
    SOFTCORE = "Softcore"
    HARDCORE = "Hardcore"
    NOT_DEFINED = "not defined"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, mode_name: str) -> "GameMode":
        """Resolve a mode name, falling back to NOT_DEFINED."""
        if mode_name is None:
            raise ValueError("Mode name must not be None")
        try:
            return cls(mode_name)
        except ValueError:
            return cls.NOT_DEFINED
