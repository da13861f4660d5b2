# cardbattle/engine/dice.py
import random
from typing import List


def rng_for(seed: int, sequence: int) -> random.Random:
    # deterministic per battle seed + committed version, never shared across battles
    return random.Random(f"{seed}:{sequence}")


def shuffled(cards: List[str], r: random.Random) -> List[str]:
    deck = list(cards)
    r.shuffle(deck)
    return deck
