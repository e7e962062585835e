from __future__ import annotations

from progression.catalog.registry import AbilityCatalog, default_catalog
from progression.components.ability_definition import (
    AbilityCategory,
    AbilityDefinition,
    Prerequisite,
    SpecializationProfile,
)
from progression.constants import SPECIALIZATION_LEVEL_COSTS, SPECIALIZATION_MAX_LEVEL


def _core_abilities() -> list[AbilityDefinition]:
    return [
        AbilityDefinition(
            id="archery",
            name="Archery",
            description=(
                "Archery is a great skill for anybody that wants to use ranged weapons. Without "
                "Archery you cannot use Crossbows, Longbows, or Slings. It also improves your "
                "shooting with them."
            ),
            tier=1,
            category=AbilityCategory.COMBAT,
            level_costs=(1, 1, 1),
            level_effects=(
                ("+1 with Crossbows and Longbows", "Enables you to craft Longbows and Crossbows"),
                ("+2 with Longbows and Crossbows", "+25 Range with Longbows and Crossbows"),
                ("+3 with Longbows and Crossbows", "+50 Range with Longbows and Crossbows"),
            ),
            unlocks=("Militia Training", "Ranger Training", "Mercenary Training"),
        ),
        AbilityDefinition(
            id="cleave",
            name="Cleave",
            description=(
                "If you wield a melee weapon (Sword, Axe, Dagger, Brass Knuckles, Spear, or Staff), "
                "Cleave gives each blow a chance to hit more enemies than before."
            ),
            tier=1,
            category=AbilityCategory.COMBAT,
            level_costs=(1, 1, 2),
            level_effects=(
                ("5% chance of dealing 50% of normal attack damage to 3 nearby targets when using Melee Weapons",),
                ("10% chance of dealing 50% of normal attack damage to 4 nearby targets when using Melee Weapons",),
                ("15% chance of dealing 50% of normal attack damage to 5 nearby targets when using Melee Weapons",),
            ),
            unlocks=("Knight Training", "Legion Training", "Warrior Training"),
        ),
        AbilityDefinition(
            id="oiyoi_martial_art",
            name="Oiyoi Martial Art",
            description=(
                "Train your body to dodge attacks in unarmed combat. Provides access to special "
                "Oiyoi weapons and armor."
            ),
            tier=1,
            category=AbilityCategory.COMBAT,
            level_costs=(1, 1, 1),
            level_effects=(
                (
                    "Unarmed attack and defense scale with your character level (up to level 25)",
                    "+1 with Blowdarts and Shurikens",
                    "Can use Oiyoi weapons and armor",
                ),
                ("15% Dodge Chance when unarmed or when using Oiyoi Gear", "+2 with Blowdarts and Shurikens"),
                (
                    "30% Dodge Chance when unarmed or when using Oiyoi Gear",
                    "Can craft Oiyoi Gear",
                    "+3 with Blowdarts and Shurikens",
                ),
            ),
            unlocks=("Assassin Training", "Ninja Training", "Oiyoi Master Training", "Thief Training"),
        ),
        AbilityDefinition(
            id="tactics",
            name="Tactics",
            description=(
                "Plan your assaults outside of battle to fight more efficiently. Gain damage "
                "bonuses against monsters when not aggressive."
            ),
            tier=1,
            category=AbilityCategory.COMBAT,
            level_costs=(1, 1, 1),
            level_effects=(
                ("Gain +0.1 Tactics damage bonus per chopped tree or 30 seconds unaggressive", "(Max of +1)"),
                ("Tactics bonus gains +0.2 each time", "(Max of +2)"),
                ("Tactics bonus gains +0.3 each time", "(Max of +3)"),
            ),
            unlocks=("Merchant Training", "Crafter Training", "Druid Training", "Explorer Training"),
        ),
    ]


def _intermediate_abilities() -> list[AbilityDefinition]:
    return [
        AbilityDefinition(
            id="foraging",
            name="Foraging",
            description="Increase your chances of finding extra resources when defeating monsters.",
            tier=2,
            category=AbilityCategory.EXPLORATION,
            level_effects=(
                ("5% chance of finding Wood or Great Fern Sap whenever a monster you kill drops an item",),
                ("10% chance of finding additional items", "Now also find Leather and Iron Ore"),
                ("15% chance of finding additional items", "Now also find Sulfur and Stone"),
            ),
        ),
        AbilityDefinition(
            id="tracker",
            name="Tracker",
            description="Identify a monster's vulnerabilities to deliver devastating attacks.",
            tier=2,
            category=AbilityCategory.COMBAT,
            level_effects=(
                ("3% chance of applying Exposed Weakness (1.5x damage)",),
                ("6% chance of applying Exposed Weakness (1.5x damage)",),
                ("9% chance of applying Exposed Weakness (2x damage)",),
            ),
        ),
        AbilityDefinition(
            id="blacksmithing",
            name="Blacksmithing",
            description="Enhance your ability to craft metal items and reduce durability loss of your gear.",
            tier=2,
            category=AbilityCategory.CRAFTING,
            level_effects=(
                ("Repair gear at 150 Gold per 10%", "Gear you are wielding lasts 1.5x longer"),
                ("Repair gear at 125 Gold per 10%", "Gear you are wielding lasts 2x longer"),
                ("Repair gear at 100 Gold per 10%", "Gear you are wielding lasts 3x longer", "Can craft Traps"),
            ),
        ),
        AbilityDefinition(
            id="alchemy",
            name="Alchemy",
            description="Learn to craft and use magical Potions and Bombs.",
            tier=2,
            category=AbilityCategory.CRAFTING,
            level_effects=(
                ("Can craft Inspiration Tonic and Halvar's Resin", "Halvar's Resin you use is 50% more effective"),
                ("Can craft Anti-poison and Keldor's Rage", "Alchemy potions you use last 50% longer"),
                ("Can craft Fire Bombs and Rolly's Serum", "Fire Bombs you use do 25% more damage"),
            ),
        ),
        AbilityDefinition(
            id="focus",
            name="Focus",
            description="Steady your aim to land more of your blows.",
            tier=2,
            category=AbilityCategory.COMBAT,
            level_effects=(("+3% accuracy",), ("+6% accuracy",), ("+9% accuracy",)),
        ),
        AbilityDefinition(
            id="heroism",
            name="Heroism",
            description="Fight harder when the odds turn against you.",
            tier=2,
            category=AbilityCategory.COMBAT,
            prerequisites=(Prerequisite("cleave", 1),),
            level_effects=(
                ("+15% damage below 30% health",),
                ("+30% damage below 30% health",),
                ("+45% damage below 30% health",),
            ),
        ),
        AbilityDefinition(
            id="triumph",
            name="Triumph",
            description="Recover health whenever you slay an enemy.",
            tier=2,
            category=AbilityCategory.COMBAT,
            level_effects=(("Heal 8 on kill",), ("Heal 11 on kill",), ("Heal 14 on kill",)),
        ),
        AbilityDefinition(
            id="relentless_assault",
            name="Relentless Assault",
            description="Press the attack with ever faster strikes.",
            tier=2,
            category=AbilityCategory.COMBAT,
            level_effects=(("+15% attack speed",), ("+20% attack speed",), ("+25% attack speed",)),
        ),
        AbilityDefinition(
            id="fatality",
            name="Fatality",
            description="Find the killing blow more often and make it count.",
            tier=3,
            category=AbilityCategory.COMBAT,
            prerequisites=(Prerequisite("focus", 1),),
            level_effects=(
                ("+5% critical chance", "+20% critical damage"),
                ("+10% critical chance", "+40% critical damage"),
                ("+15% critical chance", "+60% critical damage"),
            ),
        ),
        AbilityDefinition(
            id="shield_charge",
            name="Shield Charge",
            description="Charge into enemies behind your shield, stunning them.",
            tier=3,
            category=AbilityCategory.COMBAT,
            prerequisites=(Prerequisite("cleave", 2),),
            level_effects=(
                ("Unlocks Shield Charge: 8 damage, 1.5s stun",),
                ("Shield Charge: 11 damage, 2s stun",),
                ("Shield Charge: 14 damage, 2.5s stun",),
            ),
        ),
        AbilityDefinition(
            id="taunt",
            name="Taunt",
            description="Force nearby enemies to turn their attention to you.",
            tier=3,
            category=AbilityCategory.COMBAT,
            prerequisites=(Prerequisite("shield_charge", 1),),
            level_effects=(
                ("Unlocks Taunt: 150 radius, 4s",),
                ("Taunt: 200 radius, 5s",),
                ("Taunt: 250 radius, 6s",),
            ),
        ),
        AbilityDefinition(
            id="rally_cry",
            name="Rally Cry",
            description="A war cry that temporarily bolsters damage and defense.",
            tier=3,
            category=AbilityCategory.COMBAT,
            prerequisites=(Prerequisite("tactics", 1),),
            level_effects=(
                ("Unlocks Rally Cry: +15% damage and defense for 7s",),
                ("Rally Cry: +20% damage and defense for 9s",),
                ("Rally Cry: +25% damage and defense for 11s",),
            ),
        ),
        AbilityDefinition(
            id="troglodyte_philosophy",
            name="Troglodyte Philosophy",
            description="Gain the ability to craft practical items and gear from leather materials.",
            tier=3,
            category=AbilityCategory.KNOWLEDGE,
            level_effects=(
                ("Can craft Slings, Boots, and Backpacks", "+1 defense against monsters that drop Leather"),
                ("Can craft Gloves and Nets", "+1 attack against monsters that drop Leather"),
                ("Can craft Roc Boots, Midas Gloves, and Leather Armor", "20% chance of double Leather"),
            ),
        ),
        AbilityDefinition(
            id="leatherworking",
            name="Leatherworking",
            description="Master the art of crafting with leather to create durable gear.",
            tier=3,
            category=AbilityCategory.CRAFTING,
            level_effects=(
                ("Leather items you craft have 10% more durability",),
                ("Leather items you craft have 25% more durability",),
                ("Leather items you craft have 50% more durability", "15% chance to use less leather"),
            ),
        ),
    ]


def _expertise_chain(
    path: str,
    category: AbilityCategory,
    ranks: list[tuple[int, int, tuple[str, ...]]],
) -> list[AbilityDefinition]:
    numerals = ("", " II", " III", " IV")
    chain: list[AbilityDefinition] = []
    for index, (tier, cost, effects) in enumerate(ranks):
        rank = index + 1
        ability_id = f"expertise_{path.lower()}_{rank}"
        prerequisites = ()
        if index:
            prerequisites = (Prerequisite(f"expertise_{path.lower()}_{index}", 1),)
        chain.append(
            AbilityDefinition(
                id=ability_id,
                name=f"{path} Expertise{numerals[index]}",
                description=f"Follow the path of {path.lower()} expertise for specialized bonuses.",
                tier=tier,
                category=category,
                max_level=1,
                level_costs=(cost,),
                prerequisites=prerequisites,
                level_effects=(effects,),
                expertise_path=path,
            )
        )
    return chain


def _expertise_abilities() -> list[AbilityDefinition]:
    return [
        *_expertise_chain(
            "Combat",
            AbilityCategory.COMBAT,
            [
                (4, 2, ("+10% damage with all weapons",)),
                (6, 3, ("+20% damage with all weapons", "10% chance to land critical hits")),
                (8, 4, ("+30% damage with all weapons", "20% chance to land critical hits with 2x damage")),
                (11, 5, (
                    "+50% damage with all weapons",
                    "30% chance to land critical hits with 3x damage",
                    "Chance to instantly defeat non-boss enemies",
                )),
            ],
        ),
        *_expertise_chain(
            "Crafting",
            AbilityCategory.CRAFTING,
            [
                (4, 2, ("25% faster crafting speed", "Craft items with 15% better quality")),
                (6, 3, (
                    "50% faster crafting speed",
                    "Craft items with 30% better quality",
                    "20% chance to use fewer materials",
                )),
            ],
        ),
        *_expertise_chain(
            "Knowledge",
            AbilityCategory.KNOWLEDGE,
            [
                (4, 2, ("20% more experience from all sources",)),
                (6, 3, (
                    "40% more experience from all sources",
                    "Automatically identify monster weaknesses",
                    "Increased effectiveness of potions and scrolls",
                )),
            ],
        ),
    ]


def _advanced_abilities() -> list[AbilityDefinition]:
    return [
        AbilityDefinition(
            id="lizardfolk_philosophy",
            name="Lizardfolk Philosophy",
            description="Learn the ancient knowledge of lizard people to gain unique abilities.",
            tier=5,
            category=AbilityCategory.KNOWLEDGE,
            level_costs=(2, 2, 2),
            prerequisites=(Prerequisite("troglodyte_philosophy", 2),),
            level_effects=(
                ("Gain resistance to poison damage",),
                ("Regenerate health slowly over time",),
                ("Camouflage in natural environments", "Resistance to extreme temperatures"),
            ),
        ),
        AbilityDefinition(
            id="rebound",
            name="Rebound",
            description="Master the art of deflecting attacks back at your enemies.",
            tier=5,
            category=AbilityCategory.COMBAT,
            level_costs=(2, 2, 2),
            level_effects=(
                ("10% chance to reflect melee damage back to attacker",),
                ("20% chance to reflect melee damage", "Reflected damage increased by 25%"),
                ("30% chance to reflect melee damage", "Reflected damage increased by 50%", "5% stun chance"),
            ),
        ),
        AbilityDefinition(
            id="barrage",
            name="Barrage",
            description="Unleash a rapid series of attacks with ranged weapons.",
            tier=5,
            category=AbilityCategory.COMBAT,
            level_costs=(2, 2, 2),
            prerequisites=(Prerequisite("archery", 2),),
            level_effects=(
                ("Fire two arrows with a 15% damage penalty",),
                ("Fire three arrows with a 10% damage penalty", "Increased attack speed with ranged weapons"),
                ("Fire four arrows with a 5% damage penalty", "Multiple hits apply bleeding"),
            ),
        ),
        AbilityDefinition(
            id="guardian_insight",
            name="Guardian Insight",
            description="Gain the wisdom of ancient guardians to protect yourself and allies.",
            tier=7,
            category=AbilityCategory.KNOWLEDGE,
            level_costs=(2, 2, 2),
            level_effects=(
                ("Protective aura reduces damage taken",),
                ("Aura strength increased by 25%", "Chance to predict and avoid enemy attacks"),
                ("Aura strength increased by 50%", "Share health regeneration with allies"),
            ),
        ),
        AbilityDefinition(
            id="valor",
            name="Valor",
            description="Channel your inner courage to perform heroic feats in battle.",
            tier=15,
            category=AbilityCategory.COMBAT,
            level_costs=(3, 3, 3),
            prerequisites=(Prerequisite("heroism", 2),),
            level_effects=(
                ("Take half damage while below 20% health",),
                ("Reduced damage from boss monsters",),
                ("Critical strikes ignore armor", "Second wind when defeated"),
            ),
        ),
        AbilityDefinition(
            id="unity",
            name="Unity",
            description="Forge unbreakable bonds with allies to achieve greater strength together.",
            tier=16,
            category=AbilityCategory.OTHER,
            level_costs=(4, 4, 4),
            level_effects=(
                ("Gain damage bonus when fighting alongside allies",),
                ("Protective aura reduces damage for all allies",),
                ("Coordinated attacks with allies deal bonus damage",),
            ),
        ),
        AbilityDefinition(
            id="pierce_armor",
            name="Pierce Armor",
            description="Master techniques to bypass enemy armor and defenses.",
            tier=16,
            category=AbilityCategory.COMBAT,
            level_costs=(4, 4, 4),
            prerequisites=(Prerequisite("fatality", 2),),
            level_effects=(
                ("15% chance to ignore 50% of enemy armor",),
                ("25% chance to ignore 75% of enemy armor",),
                ("35% chance to completely ignore enemy armor",),
            ),
        ),
        AbilityDefinition(
            id="blight_strike",
            name="Blight Strike",
            description="Infuse your attacks with corrupting energy that damages enemies over time.",
            tier=16,
            category=AbilityCategory.COMBAT,
            level_costs=(4, 4, 4),
            level_effects=(
                ("20% chance to apply Blight",),
                ("Blight chance increased to 35%", "Blight damage increased by 50%"),
                ("Blight chance increased to 50%", "Blight damage increased by 100%", "Blight spreads"),
            ),
        ),
    ]


def _specialization(
    ability_id: str,
    name: str,
    description: str,
    prerequisite: Prerequisite,
    profile: SpecializationProfile,
    level_effects: tuple[tuple[str, ...], ...],
) -> AbilityDefinition:
    return AbilityDefinition(
        id=ability_id,
        name=name,
        description=description,
        tier=4,
        category=AbilityCategory.SPECIALIZATION,
        max_level=SPECIALIZATION_MAX_LEVEL,
        level_costs=SPECIALIZATION_LEVEL_COSTS,
        prerequisites=(prerequisite,),
        is_specialization=True,
        level_effects=level_effects,
        specialization=profile,
    )


def _specialization_abilities() -> list[AbilityDefinition]:
    return [
        _specialization(
            "warrior_training",
            "Warrior Training",
            "Warriors are brutes that deal more powerful blows with Axes as their improved Health lowers.",
            Prerequisite("cleave", 3),
            SpecializationProfile(
                class_name="Warrior",
                role="Tank/DPS",
                difficulty=1,
                optimal_weapons=("Axe",),
                optimal_armor=("Heavy Armor",),
                key_abilities=(
                    "Increased maximum HP",
                    "Bonus damage with axes",
                    "Additional attack bonus when at low health",
                    "Cleave ability to hit multiple targets",
                ),
            ),
            (
                ("+10 Max HP", "+1 attack bonus with Axe"),
                ("+20 Max HP", "+1 melee attack bonus when HP < 50%"),
                ("+30 Max HP", "+2 attack bonus with Axe", "Cleave hits one more target"),
                ("+40 Max HP", "Additional +2 attack bonus with Axe when HP < 35%"),
                ("+50 Max HP", "+3 attack bonus with Axe", "Cleave chance doubled"),
            ),
        ),
        _specialization(
            "druid_training",
            "Druid Training",
            (
                "Masters of nature, these healing wardens guard the secrets of nature and support "
                "their allies in combat."
            ),
            Prerequisite("tactics", 3),
            SpecializationProfile(
                class_name="Druid",
                role="Support/Healer",
                difficulty=3,
                optimal_weapons=("Staff", "Spear", "Axe"),
                optimal_armor=("Light armor", "No armor"),
                key_abilities=(
                    "Healing Aura that affects allies within range",
                    "Replenish ability to transfer health to allies",
                    "Dodge bonus when not using heavy armor or shields",
                    "Pets and minions gain tactics bonus when equipped with a staff",
                ),
            ),
            (
                ("Can use Staff without Oiyoi Martial Art", "+30 Healing Aura Range", "Replenish Ability"),
                ("Tactics Maximum Bonus increased to +4",),
                ("15% Dodge without Heavy Armor or Shields", "Replenish transfers 1HP per 1HP"),
                ("Tactics Maximum Bonus increased to +5",),
                ("Tactics Maximum Bonus increased to +6", "Replenish transfers 1.3 to 1", "30% Dodge"),
            ),
        ),
        _specialization(
            "ninja_training",
            "Ninja Training",
            (
                "A tracker in the shadows, capable of attacking at lightning fast speeds from range "
                "or up close while dodging the enemy's blows."
            ),
            Prerequisite("oiyoi_martial_art", 3),
            SpecializationProfile(
                class_name="Ninja",
                role="Speed/Evasion DPS",
                difficulty=4,
                optimal_weapons=("Shurikens",),
                optimal_armor=("Oiyoi gear",),
                key_abilities=(
                    "Significantly increased movement speed",
                    "High dodge chance",
                    "Can use ranged weapons in close combat",
                    "Excels at mobility and avoiding damage",
                ),
            ),
            (
                ("+1 attack bonus with Shurikens", "Can use Shurikens at close range"),
                ("+10 base speed bonus", "+3% chance to Dodge"),
                ("+2 attack bonus with Shurikens",),
                ("+20 speed bonus", "+6% chance to Dodge"),
                ("+3 attack bonus with Shuriken", "+30 base speed", "+10% chance to Dodge"),
            ),
        ),
        _specialization(
            "ranger_training",
            "Ranger Training",
            (
                "Rangers strike from a distance while staying mobile, keeping enemies at bay with "
                "longbows and holding their own with swords when pressed."
            ),
            Prerequisite("archery", 3),
            SpecializationProfile(
                class_name="Ranger",
                role="Range/Mobility",
                difficulty=3,
                optimal_weapons=("Longbow", "Sword"),
                optimal_armor=("Leather Armor",),
                key_abilities=(
                    "Significantly extended range with longbows",
                    "Increased movement speed",
                    "Proficiency with both longbows and swords",
                    "Special defense against melee attacks while wearing leather armor",
                ),
            ),
            (
                ("+1 with Longbows and Swords",),
                ("+5 Base Speed bonus", "+25 Range bonus with Longbows"),
                ("+2 with Longbows and Swords",),
                ("+50 Range bonus with Longbows", "+1 Defense versus melee attacks with Leather Armor"),
                ("+3 with Longbows and Swords", "+10 Base Speed bonus", "+2 Defense versus melee with Leather Armor"),
            ),
        ),
    ]


def default_ability_definitions() -> list[AbilityDefinition]:
    return [
        *_core_abilities(),
        *_intermediate_abilities(),
        *_expertise_abilities(),
        *_advanced_abilities(),
        *_specialization_abilities(),
    ]


def ensure_default_abilities_registered(catalog: AbilityCatalog | None = None) -> AbilityCatalog:
    """Register the game's ability definitions if they are not already present."""

    target = catalog if catalog is not None else default_catalog

    def _register(definition: AbilityDefinition) -> None:
        if target.has(definition.id):
            return
        target.register(definition)

    for definition in default_ability_definitions():
        _register(definition)
    target.validate()
    return target


def create_default_catalog() -> AbilityCatalog:
    """Fresh catalog holding the game's abilities, independent of ``default_catalog``."""
    return AbilityCatalog(default_ability_definitions())
