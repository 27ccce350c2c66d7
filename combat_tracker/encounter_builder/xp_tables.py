"""
Experience tables of the D&D 5e Dungeon Master's Guide.

CR_TO_XP maps each challenge rating to the XP one monster is worth;
XP_THRESHOLDS gives, per character level, the adjusted XP at which an
encounter becomes easy, medium, hard or deadly for that character.
"""

from fractions import Fraction

CR_TO_XP: dict[Fraction, int] = {
    Fraction(0): 10,
    Fraction(1, 8): 25,
    Fraction(1, 4): 50,
    Fraction(1, 2): 100,
    Fraction(1): 200,
    Fraction(2): 450,
    Fraction(3): 700,
    Fraction(4): 1100,
    Fraction(5): 1800,
    Fraction(6): 2300,
    Fraction(7): 2900,
    Fraction(8): 3900,
    Fraction(9): 5000,
    Fraction(10): 5900,
    Fraction(11): 7200,
    Fraction(12): 8400,
    Fraction(13): 10000,
    Fraction(14): 11500,
    Fraction(15): 13000,
    Fraction(16): 15000,
    Fraction(17): 18000,
    Fraction(18): 20000,
    Fraction(19): 22000,
    Fraction(20): 25000,
    Fraction(21): 33000,
    Fraction(22): 41000,
    Fraction(23): 50000,
    Fraction(24): 62000,
    Fraction(25): 75000,
    Fraction(26): 90000,
    Fraction(27): 105000,
    Fraction(28): 120000,
    Fraction(29): 135000,
    Fraction(30): 155000,
}

# level: (easy, medium, hard, deadly)
XP_THRESHOLDS: dict[int, tuple[int, int, int, int]] = {
    1: (25, 50, 75, 100),
    2: (50, 100, 150, 200),
    3: (75, 150, 225, 400),
    4: (125, 250, 375, 500),
    5: (250, 500, 750, 1100),
    6: (300, 600, 900, 1400),
    7: (350, 750, 1100, 1700),
    8: (450, 900, 1400, 2100),
    9: (550, 1100, 1600, 2400),
    10: (600, 1200, 1900, 2800),
    11: (800, 1600, 2400, 3600),
    12: (1000, 2000, 3000, 4500),
    13: (1100, 2200, 3400, 5100),
    14: (1250, 2500, 3800, 5700),
    15: (1400, 2800, 4300, 6400),
    16: (1600, 3200, 4800, 7200),
    17: (2000, 3900, 5900, 8800),
    18: (2100, 4200, 6300, 9500),
    19: (2400, 4900, 7300, 10900),
    20: (2800, 5700, 8500, 12700),
}

# Encounter multipliers, indexed by tier.
MULTIPLIER_TIERS: tuple[float, ...] = (1, 1.5, 2, 2.5, 3, 4)

# Upper bound of monster count for each tier but the last.
MULTIPLIER_TIER_LIMITS: tuple[int, ...] = (1, 2, 6, 10, 14)
