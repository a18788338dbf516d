"""
Tests for configuration management.
"""

import pytest
import tempfile
import yaml
from pathlib import Path
import sys

# Add the matchplan package to the path
sys.path.append(str(Path(__file__).parent.parent))

from matchplan.config import SchedulerConfig, load_config, save_config


def test_basic_config_creation():
    """Test creating a basic configuration."""
    config_data = {
        "participants": [
            {"id": "lions", "label": "Lions", "seed": 1},
            {"id": "tigers", "seed": 2, "metadata": {"division": "North"}},
            {"id": "bears"}
        ],
        "legs": 2,
        "leg_strategy": "mirrored",
        "ordering": "balanced",
        "seed": 7
    }

    config = SchedulerConfig(**config_data)

    assert config.legs == 2
    assert config.ordering == "balanced"
    assert len(config.participants) == 3
    assert config.participants[1].metadata == {"division": "North"}
    assert config.participants[2].label is None
    assert config.constraints.no_repeat_pairings is False
    assert config.excel.include_summaries is True


def test_defaults():
    """Test an empty configuration is valid."""
    config = SchedulerConfig()

    assert config.legs == 1
    assert config.participants_per_event == 2
    assert config.leg_strategy == "mirrored"
    assert config.ordering == "static"
    assert config.seed is None
    assert config.shuffle_participants is False


def test_config_validation():
    """Test configuration validation."""
    # Test invalid leg strategy
    with pytest.raises(ValueError, match="Invalid leg strategy"):
        SchedulerConfig(leg_strategy="spiral")

    # Test invalid ordering
    with pytest.raises(ValueError, match="Invalid ordering"):
        SchedulerConfig(ordering="random")

    # Test duplicate participants
    with pytest.raises(ValueError, match="Duplicate participant id"):
        SchedulerConfig(participants=[{"id": "a"}, {"id": "a"}])

    # Test legs must be positive
    with pytest.raises(ValueError):
        SchedulerConfig(legs=0)


def test_constraint_config_validation():
    """Test constraint section validation."""
    with pytest.raises(ValueError):
        SchedulerConfig(constraints={"min_rest_rounds": 0})

    with pytest.raises(ValueError):
        SchedulerConfig(constraints={"seed_protection": {"top_seeds": 2, "period": 1.5}})

    with pytest.raises(ValueError, match="Invalid metadata rule"):
        SchedulerConfig(constraints={"metadata_rules": [{"key": "division", "rule": "similar"}]})

    with pytest.raises(ValueError, match="requires a max_unique value"):
        SchedulerConfig(constraints={"metadata_rules": [{"key": "division", "rule": "max_unique"}]})


def test_config_load_save():
    """Test loading and saving configuration."""
    config_data = {
        "participants": [
            {"id": "A", "seed": 1},
            {"id": "B", "seed": 2}
        ],
        "legs": 2,
        "constraints": {
            "min_rest_rounds": 2,
            "max_consecutive_home_away": 3
        }
    }

    # Create temporary file
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(config_data, f)
        temp_path = f.name

    save_path = temp_path.replace('.yaml', '_saved.yaml')

    try:
        # Load configuration
        loaded_config = load_config(temp_path)

        # Verify loaded config matches original
        assert loaded_config.legs == config_data["legs"]
        assert loaded_config.get_participant_ids() == ["A", "B"]
        assert loaded_config.constraints.min_rest_rounds == 2

        # Test saving configuration
        save_config(loaded_config, save_path)

        # Load saved configuration
        saved_config = load_config(save_path)
        assert saved_config == loaded_config

    finally:
        # Clean up
        import os
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        if os.path.exists(save_path):
            os.unlink(save_path)


def test_load_empty_config(tmp_path):
    """Test an empty YAML file gives the default configuration."""
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == SchedulerConfig()


def test_get_participant():
    """Test participant lookup helpers."""
    config = SchedulerConfig(participants=[{"id": "A"}, {"id": "B", "label": "Bees"}])

    assert config.get_participant_ids() == ["A", "B"]
    assert config.get_participant("B").label == "Bees"
    assert config.get_participant("Z") is None
