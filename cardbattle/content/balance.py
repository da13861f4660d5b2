# cardbattle/content/balance.py
DEFAULTS = {
    "hp": 20,
    "energy": 100,
    "hand_size": 5,
    "spell_deck_size": 3,
    "placement_cost": 20,
    "spell_cooldown": 3,
    "min_attack_round": 2,
    "critical_damage": 100,
    "health": 1,
    "lock_timeout": 2.0,
    "max_commit_retries": 3,
}

CAPS = {
    "hp_min": 0,
    "hp_max": 50,
    "energy_min": 0,
    "energy_max": 100,
    "percent_min": 0,
    "percent_max": 100,
}

SLOTS = ("left", "center", "right")
UNIT_CLASSES = ("melee", "ranged", "mage")
