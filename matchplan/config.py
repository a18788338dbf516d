"""
Configuration management for the match planner.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional, Union


LEG_STRATEGIES = ["mirrored", "repeated", "shuffled"]
ORDERINGS = ["static", "alternating", "balanced", "seeded_random"]
METADATA_RULES = ["same", "different", "max_unique", "adjacent"]


class ParticipantConfig(BaseModel):
    """A participant declared in the config file."""
    id: str = Field(description="Unique participant identifier")
    label: Optional[str] = Field(default=None, description="Display name (defaults to the id)")
    seed: Optional[int] = Field(default=None, ge=1, description="Seed rank (1 is strongest)")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Free-form attributes")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not v.strip():
            raise ValueError("Participant id must not be empty")
        return v


class SeedProtectionConfig(BaseModel):
    """Keep top seeds apart early in the tournament."""
    top_seeds: int = Field(default=2, ge=1, description="Number of protected seeds")
    period: float = Field(default=0.5, ge=0.0, le=1.0, description="Protected fraction of the tournament")


class MetadataRuleConfig(BaseModel):
    """A metadata-driven pairing rule."""
    key: str = Field(description="Participant metadata key")
    rule: str = Field(description="One of same, different, max_unique, adjacent")
    max_unique: Optional[int] = Field(default=None, ge=1, description="Limit for the max_unique rule")

    @field_validator('rule')
    @classmethod
    def validate_rule(cls, v):
        if v not in METADATA_RULES:
            raise ValueError(f"Invalid metadata rule: {v}. Must be one of {METADATA_RULES}")
        return v

    @model_validator(mode='after')
    def validate_max_unique(self):
        if self.rule == 'max_unique' and self.max_unique is None:
            raise ValueError("max_unique rule requires a max_unique value")
        return self


class ConstraintConfig(BaseModel):
    """Constraints applied to every candidate event."""
    no_repeat_pairings: bool = Field(default=False, description="Reject any pairing that already met")
    min_rest_rounds: Optional[int] = Field(default=None, ge=1, description="Minimum rounds between rematches")
    seed_protection: Optional[SeedProtectionConfig] = Field(default=None)
    max_consecutive_home_away: Optional[int] = Field(
        default=None, ge=1, description="Longest allowed run of home (or away) events"
    )
    max_consecutive_position: Optional[int] = Field(
        default=None, ge=1, description="Longest allowed run in the same slot position"
    )
    metadata_rules: List[MetadataRuleConfig] = Field(default_factory=list)


class ExcelOut(BaseModel):
    """Excel output configuration."""
    include_summaries: bool = Field(default=True, description="Include summary sheets")
    sheets: Dict[str, Union[str, bool]] = Field(
        default_factory=lambda: {
            "schedule_name": "Schedule",
            "summary_name": "Participant Summary",
            "round_sheets": True
        },
        description="Sheet names and options"
    )


class SchedulerConfig(BaseModel):
    """Main configuration for the match planner."""
    participants: List[ParticipantConfig] = Field(default_factory=list, description="Tournament participants")

    legs: int = Field(default=1, ge=1, description="Times each pair meets")
    participants_per_event: int = Field(default=2, description="Event arity (round robin requires 2)")
    leg_strategy: str = Field(default="mirrored", description="How legs after the first are built")
    ordering: str = Field(default="static", description="Home/away ordering in leg one")

    # Random seed for reproducibility; None draws fresh entropy
    seed: Optional[int] = Field(default=None, description="Random seed for shuffling and ordering")
    shuffle_participants: bool = Field(default=False, description="Shuffle participants before seeding")

    constraints: ConstraintConfig = Field(default_factory=ConstraintConfig)

    # Output configuration
    excel: ExcelOut = Field(default_factory=ExcelOut)

    @field_validator('participants')
    @classmethod
    def validate_unique_ids(cls, v):
        seen = set()
        for participant in v:
            if participant.id in seen:
                raise ValueError(f"Duplicate participant id: {participant.id}")
            seen.add(participant.id)
        return v

    @field_validator('leg_strategy')
    @classmethod
    def validate_leg_strategy(cls, v):
        if v not in LEG_STRATEGIES:
            raise ValueError(f"Invalid leg strategy: {v}. Must be one of {LEG_STRATEGIES}")
        return v

    @field_validator('ordering')
    @classmethod
    def validate_ordering(cls, v):
        if v not in ORDERINGS:
            raise ValueError(f"Invalid ordering: {v}. Must be one of {ORDERINGS}")
        return v

    def get_participant_ids(self) -> List[str]:
        """Get all participant ids in declaration order."""
        return [participant.id for participant in self.participants]

    def get_participant(self, participant_id: str) -> Optional[ParticipantConfig]:
        """Get a participant declaration by id."""
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None


def load_config(config_path: str) -> SchedulerConfig:
    """Load configuration from YAML file."""
    import yaml

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f)

    return SchedulerConfig(**(config_data or {}))


def save_config(config: SchedulerConfig, config_path: str) -> None:
    """Save configuration to YAML file."""
    import yaml

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2)
