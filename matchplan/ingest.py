"""
Participant ingestion for the match planner.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .config import SchedulerConfig
from .models import Participant

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = {
    'id': 'id',
    'label': 'label',
    'seed': 'seed',
}


def create_participants_from_config(config: SchedulerConfig) -> List[Participant]:
    """
    Create Participant objects from configuration.

    Participants with a seed come first in seed order; the rest keep their
    declaration order. The resulting list order is the seeding used by the
    scheduler.

    Args:
        config: Scheduler configuration

    Returns:
        List[Participant]: Participants in seed order
    """
    participants = [
        Participant(
            id=entry.id,
            label=entry.label or entry.id,
            seed=entry.seed,
            metadata=dict(entry.metadata),
        )
        for entry in config.participants
    ]

    return order_by_seed(participants)


def load_participants(path: str, columns: Optional[Dict[str, str]] = None) -> List[Participant]:
    """
    Load participants from a CSV or Excel roster.

    Args:
        path: Path to a .csv, .xlsx or .xls file
        columns: Mapping of 'id', 'label' and 'seed' to column names in the file

    Returns:
        List[Participant]: Participants in seed order; unmapped columns become metadata
    """
    columns = {**DEFAULT_COLUMNS, **(columns or {})}

    suffix = Path(path).suffix.lower()
    if suffix == '.csv':
        df = pd.read_csv(path)
    elif suffix in ('.xlsx', '.xls'):
        df = pd.read_excel(path)
    else:
        raise ValueError(f"Unsupported roster format: {suffix}. Use .csv, .xlsx or .xls")

    # Only the id column is mandatory; label and seed are optional
    if columns['id'] not in df.columns:
        raise ValueError(f"Missing required columns: {[columns['id']]}. Found columns: {list(df.columns)}")

    known = {columns['id'], columns['label'], columns['seed']}
    metadata_columns = [col for col in df.columns if col not in known]

    participants = []
    for _, row in df.iterrows():
        participant_id = str(row[columns['id']]).strip()

        label = participant_id
        if columns['label'] in df.columns and not pd.isna(row[columns['label']]):
            label = str(row[columns['label']])

        seed = None
        if columns['seed'] in df.columns and not pd.isna(row[columns['seed']]):
            seed = int(row[columns['seed']])

        metadata = {
            col: _to_native(row[col])
            for col in metadata_columns
            if not pd.isna(row[col])
        }

        participants.append(Participant(participant_id, label, seed, metadata))

    logger.info("Loaded %d participants from %s", len(participants), path)
    return order_by_seed(participants)


def order_by_seed(participants: List[Participant]) -> List[Participant]:
    """Stable sort: seeded participants by seed, unseeded ones after them."""
    return sorted(participants, key=lambda p: (p.seed is None, p.seed or 0))


def validate_participants(participants: List[Participant]) -> Dict[str, List[str]]:
    """
    Validate participant data for common issues.

    Args:
        participants: List of participants to validate

    Returns:
        Dict[str, List[str]]: Validation results
    """
    issues = {
        'warnings': [],
        'errors': []
    }

    if len(participants) < 2:
        issues['errors'].append(f"At least 2 participants are required, found {len(participants)}")

    ids = [p.id for p in participants]
    duplicates = sorted({pid for pid in ids if ids.count(pid) > 1})
    if duplicates:
        issues['errors'].append(f"Duplicate participant ids: {duplicates}")

    seeds = [p.seed for p in participants if p.seed is not None]
    duplicate_seeds = sorted({s for s in seeds if seeds.count(s) > 1})
    if duplicate_seeds:
        issues['warnings'].append(f"Duplicate seeds: {duplicate_seeds}")

    if seeds and len(seeds) < len(participants):
        issues['warnings'].append(
            f"{len(participants) - len(seeds)} participants have no seed and will be placed after seeded ones"
        )

    return issues


def _to_native(value):
    # Unwrap numpy scalars into plain Python values
    if hasattr(value, 'item'):
        return value.item()
    return value
