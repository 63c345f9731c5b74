"""Game-wide constants and enumerations."""

from enum import Enum

MIN_BOMBS = 10
MAX_BOMBS = 20
DEFAULT_BOARD_SIDE = 10

# Delay before the AI acts once the turn has passed to it.
AI_TURN_DELAY_SECONDS = 1.0

START_MESSAGE = (
    "There will be {mines} bombs. The AI bot is {ai} (difficulty: {difficulty}). "
    "The Game Is Now In Progress, Good Luck!"
)
REMAINING_MESSAGE = "Bombs remaining: {remaining}"
TURN_MESSAGE = "Turn: {actor}"
LOSE_MESSAGE = "GAME OVER! {who} hit a bomb! Time: {seconds}s"
WIN_MESSAGE = "CONGRATULATIONS! YOU WIN! Time: {seconds}s"
UNKNOWN_END_MESSAGE = (
    "Error 02: Unknown Game End Condition - Reset the game to continue."
)


class GameState(Enum):
    MAIN_MENU = 0
    ACTIVE_GAME = 1
    GAME_OVER = 2
    OPTIONS = 3
    CREDITS = 4


class Actor(Enum):
    PLAYER = "Player"
    AI = "AI"

    def other(self) -> "Actor":
        return Actor.AI if self is Actor.PLAYER else Actor.PLAYER


class Difficulty(Enum):
    NONE = "none"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, text: str) -> "Difficulty":
        """Look up a difficulty by name, ignoring case and surrounding blanks."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(
                f"Unknown difficulty {text!r}; expected one of: {names}."
            ) from None


class EndCondition(Enum):
    WIN = 1
    LOSE = 2


def difficulty_to_string(difficulty: Difficulty) -> str:
    """Return the display name of a difficulty ("None", "Easy", ...)."""
    return difficulty.value.capitalize()
