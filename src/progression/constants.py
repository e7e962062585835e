DEFAULT_MAX_LEVEL = 3
DEFAULT_LEVEL_COSTS = (1, 1, 1)

# Specializations always have five ranks with a steeper curve.
SPECIALIZATION_MAX_LEVEL = 5
SPECIALIZATION_LEVEL_COSTS = (1, 1, 2, 2, 3)

DEFAULT_STARTING_POINTS = 0

# Stat defaults used when a fold builds on a stat the base bag does not carry.
DEFAULT_MAX_HEALTH = 100
DEFAULT_BASE_DAMAGE = 5
DEFAULT_CRIT_CHANCE = 0.05
DEFAULT_CRIT_MULTIPLIER = 1.5
DEFAULT_ACCURACY = 0.9
DEFAULT_MOVEMENT_SPEED = 1.0
DEFAULT_RANGED_ATTACK_RANGE = 200

# Gear that counts as "Oiyoi" for unarmed dodge purposes.
OIYOI_GEAR_TAGS = ("oiyoi", "shuriken", "blowdart", "brass_knuckles", "staff", "tunic")
MELEE_WEAPON_TAGS = ("sword", "axe", "dagger", "brass_knuckles", "spear", "staff")

LEVEL_ZERO_DESCRIPTION = "Not learned yet."
