from enum import IntEnum

class Quality(IntEnum):
    BLACKOUT = 0
    WRONG = 1
    WRONG_FAMILIAR = 2
    HARD = 3
    HESITANT = 4
    PERFECT = 5

QUALITY_LABELS = {
    Quality.BLACKOUT: "blackout",
    Quality.WRONG: "wrong",
    Quality.WRONG_FAMILIAR: "wrong_familiar",
    Quality.HARD: "hard",
    Quality.HESITANT: "hesitant",
    Quality.PERFECT: "perfect",
}
