"""Domain enumerations for the trade journal."""

from enum import StrEnum


class TradeDirection(StrEnum):
    LONG = "Long"
    SHORT = "Short"


class OptionType(StrEnum):
    CALL = "Call"
    PUT = "Put"


class TradeStatus(StrEnum):
    OPEN = "Open"
    CLOSED = "Closed"


class Emotion(StrEnum):
    CALM = "Calm"
    ANXIOUS = "Anxious"
    CONFIDENT = "Confident"
    FOMO = "FOMO"
    BORED = "Bored"
    REVENGE = "Revenge"


NEUTRAL_EMOTION = Emotion.CALM


class Outcome(StrEnum):
    STOP_LOSS_VIOLATED = "stop_loss_violated"
    TARGET_HIT = "target_hit"
    NEUTRAL = "neutral"
    UNCLASSIFIED = "unclassified"
