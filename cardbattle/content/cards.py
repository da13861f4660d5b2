# cardbattle/content/cards.py
CARDS = {
    # Battle units
    "iron_guard": {
        "name": "Iron Guard",
        "type": "battle",
        "class": "melee",
        "health": 10,
        "attack": 5,
        "defense": 3,
        "criticalChance": 5,
        "criticalDamage": 50,
        "rangedResistance": 20,
        "meleeResistance": 10,
        "magicResistance": 0,
        "passiveAbilities": ["frost_armor"],
    },
    "ember_knight": {
        "name": "Ember Knight",
        "type": "battle",
        "class": "melee",
        "health": 8,
        "attack": 6,
        "defense": 2,
        "criticalChance": 12,
        "criticalDamage": 50,
        "rangedResistance": 0,
        "meleeResistance": 10,
        "magicResistance": 5,
        "passiveAbilities": ["burning_blade"],
    },
    "berserker": {
        "name": "Berserker",
        "type": "battle",
        "class": "melee",
        "health": 9,
        "attack": 4,
        "defense": 1,
        "criticalChance": 10,
        "criticalDamage": 100,
        "rangedResistance": 0,
        "meleeResistance": 0,
        "magicResistance": 0,
        "passiveAbilities": ["berserker_rage"],
    },
    "wind_archer": {
        "name": "Wind Archer",
        "type": "battle",
        "class": "ranged",
        "health": 6,
        "attack": 5,
        "defense": 1,
        "criticalChance": 15,
        "criticalDamage": 50,
        "rangedResistance": 10,
        "meleeResistance": 0,
        "magicResistance": 0,
        "passiveAbilities": ["wind_shot"],
    },
    "shadow_ranger": {
        "name": "Shadow Ranger",
        "type": "battle",
        "class": "ranged",
        "health": 7,
        "attack": 4,
        "defense": 1,
        "criticalChance": 20,
        "criticalDamage": 50,
        "rangedResistance": 5,
        "meleeResistance": 5,
        "magicResistance": 5,
        "passiveAbilities": ["stealth_strike"],
    },
    "siege_crossbow": {
        "name": "Siege Crossbow",
        "type": "battle",
        "class": "ranged",
        "health": 5,
        "attack": 7,
        "defense": 0,
        "criticalChance": 5,
        "criticalDamage": 100,
        "rangedResistance": 0,
        "meleeResistance": 0,
        "magicResistance": 0,
        "passiveAbilities": ["armor_piercing"],
    },
    "crystal_sage": {
        "name": "Crystal Sage",
        "type": "battle",
        "class": "mage",
        "health": 7,
        "attack": 5,
        "defense": 1,
        "criticalChance": 10,
        "criticalDamage": 50,
        "rangedResistance": 0,
        "meleeResistance": 0,
        "magicResistance": 20,
        "passiveAbilities": ["crystal_shield"],
    },
    "ward_keeper": {
        "name": "Ward Keeper",
        "type": "battle",
        "class": "mage",
        "health": 8,
        "attack": 4,
        "defense": 2,
        "criticalChance": 5,
        "criticalDamage": 50,
        "rangedResistance": 5,
        "meleeResistance": 5,
        "magicResistance": 15,
        "passiveAbilities": ["magical_ward"],
    },
    "storm_caller": {
        "name": "Storm Caller",
        "type": "battle",
        "class": "mage",
        "health": 6,
        "attack": 6,
        "defense": 0,
        "criticalChance": 8,
        "criticalDamage": 75,
        "rangedResistance": 0,
        "meleeResistance": 0,
        "magicResistance": 10,
    },
    "militia": {
        "name": "Militia",
        "type": "battle",
        "class": "melee",
        "health": 5,
        "attack": 3,
        "defense": 1,
        "isBase": True,
    },

    # Spells
    "fireball": {
        "name": "Fireball",
        "type": "ability",
        "cost": 30,
        "spellType": "magical",
        "description": "Hurls a ball of fire at the enemy line.",
    },
    "battle_cry": {
        "name": "Battle Cry",
        "type": "ability",
        "cost": 20,
        "spellType": "combat",
        "description": "Rallies the troops.",
    },
    "volley": {
        "name": "Volley",
        "type": "ability",
        "cost": 25,
        "spellType": "ranged",
        "description": "A rain of arrows.",
    },
    "mend": {
        "name": "Mend",
        "type": "ability",
        "cost": 15,
        "spellType": "other",
        "description": "Restores a wounded unit.",
    },
}

STARTER_DECK = [
    "iron_guard",
    "ember_knight",
    "berserker",
    "wind_archer",
    "shadow_ranger",
    "siege_crossbow",
    "crystal_sage",
    "ward_keeper",
    "storm_caller",
    "militia",
]

STARTER_SPELLS = ["fireball", "battle_cry", "volley"]

AI_PROFILE = {
    "player_id": "ai-sentinel",
    "display_name": "Arena Sentinel",
    "deck": list(STARTER_DECK),
    "spell_deck": list(STARTER_SPELLS),
    "is_ai": True,
}
