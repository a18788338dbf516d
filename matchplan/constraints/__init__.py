"""
Constraint engine: rules that candidate events must satisfy.
"""

from .base import CallableConstraint, Constraint, ConstraintSet, ConstraintSetBuilder
from .metadata import MetadataConstraint
from .pairings import MinimumRestPeriodsConstraint, NoRepeatPairings
from .roles import ConsecutiveRoleConstraint, home_away_role, slot_position_role
from .seeding import SeedProtectionConstraint

__all__ = [
    "CallableConstraint",
    "ConsecutiveRoleConstraint",
    "Constraint",
    "ConstraintSet",
    "ConstraintSetBuilder",
    "MetadataConstraint",
    "MinimumRestPeriodsConstraint",
    "NoRepeatPairings",
    "SeedProtectionConstraint",
    "home_away_role",
    "slot_position_role",
]
