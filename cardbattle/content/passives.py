# cardbattle/content/passives.py
PASSIVE_ABILITIES = {
    "burning_blade": {
        "name": "Burning Blade",
        "description": "10% chance to deal +1 damage",
        "effect": {"type": "damage_bonus", "chance": 10, "bonus": 1},
    },
    "wind_shot": {
        "name": "Wind Shot",
        "description": "+15% critical chance",
        "effect": {"type": "crit_chance", "bonus": 15},
    },
    "frost_armor": {
        "name": "Frost Armor",
        "description": "Reduce incoming damage by 1",
        "effect": {"type": "damage_reduction", "amount": 1},
    },
    "stealth_strike": {
        "name": "Stealth Strike",
        "description": "+25% critical damage",
        "effect": {"type": "crit_damage", "bonus": 25},
    },
    "crystal_shield": {
        "name": "Crystal Shield",
        "description": "+2 health regeneration per turn",
        "effect": {"type": "health_regen", "amount": 2},
    },
    "berserker_rage": {
        "name": "Berserker Rage",
        "description": "+1 attack for each missing health point",
        "effect": {"type": "attack_per_missing_hp", "multiplier": 1},
    },
    "magical_ward": {
        "name": "Magical Ward",
        "description": "+10% magic resistance",
        "effect": {"type": "magic_resistance", "bonus": 10},
    },
    "armor_piercing": {
        "name": "Armor Piercing",
        "description": "Ignore 50% of enemy defense",
        "effect": {"type": "defense_ignore", "percentage": 50},
    },
}
