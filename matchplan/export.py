"""
Export functionality for writing schedules to Excel and CSV.
"""

import logging
from typing import Optional

import pandas as pd

from .config import ExcelOut, SchedulerConfig
from .models import Schedule

logger = logging.getLogger(__name__)


def write_excel(schedule: Schedule, output_path: str, config: Optional[SchedulerConfig] = None) -> None:
    """
    Write schedule to Excel file with summary sheets.

    Args:
        schedule: Schedule to export
        output_path: Path to output Excel file
        config: Scheduler configuration; default sheet options when omitted
    """
    excel = config.excel if config is not None else ExcelOut()
    logger.info("Writing schedule to %s", output_path)

    with pd.ExcelWriter(output_path, engine='xlsxwriter') as writer:
        # Write main schedule
        _write_schedule(schedule, excel, writer)

        # Write summary sheets if requested
        if excel.include_summaries:
            _write_participant_summary(schedule, excel, writer)
            if excel.sheets.get('round_sheets', True):
                _write_round_sheets(schedule, writer)

    logger.info("Schedule exported successfully to %s", output_path)


def write_csv(schedule: Schedule, output_path: str) -> None:
    """Write the schedule table to a CSV file."""
    schedule.to_dataframe().to_csv(output_path, index=False)
    logger.info("Schedule exported successfully to %s", output_path)


def build_participant_summary(schedule: Schedule) -> pd.DataFrame:
    """
    Per-participant event, home, away and bye counts.

    Args:
        schedule: Schedule to summarise

    Returns:
        pd.DataFrame: One row per participant
    """
    stats = schedule.get_summary_stats()
    if not stats:
        return pd.DataFrame()

    total_rounds = schedule.get_metadata_value('total_rounds', stats['total_rounds'])

    rows = []
    for participant in schedule.get_participants():
        counts = stats['home_away'][participant.id]
        events = counts['home'] + counts['away']
        rows.append({
            'Participant': participant.label,
            'ID': participant.id,
            'Seed': participant.seed,
            'Events': events,
            'Home': counts['home'],
            'Away': counts['away'],
            'Home/Away Balance': counts['home'] - counts['away'],
            'Byes': total_rounds - events,
        })

    return pd.DataFrame(rows).sort_values('ID').reset_index(drop=True)


def _write_schedule(schedule: Schedule, excel: ExcelOut, writer) -> None:
    """Write the main schedule sheet."""
    df = schedule.to_dataframe()

    if df.empty:
        logger.warning("No events to export")
        return

    sheet_name = excel.sheets.get('schedule_name', 'Schedule')
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    _format_schedule_worksheet(writer.sheets[sheet_name], writer.book, df)


def _write_participant_summary(schedule: Schedule, excel: ExcelOut, writer) -> None:
    """Write participant home/away summary."""
    df = build_participant_summary(schedule)
    if df.empty:
        return

    sheet_name = excel.sheets.get('summary_name', 'Participant Summary')
    df.to_excel(writer, sheet_name=sheet_name, index=False)

    # Add summary at the bottom
    worksheet = writer.sheets[sheet_name]
    summary_row = len(df) + 3
    worksheet.write(summary_row, 0, 'Summary Statistics')
    worksheet.write(summary_row + 1, 0, f'Total Events: {len(schedule)}')
    worksheet.write(summary_row + 2, 0, f'Max Home/Away Imbalance: {df["Home/Away Balance"].abs().max()}')


def _write_round_sheets(schedule: Schedule, writer) -> None:
    """Write one sheet per round."""
    for round_schedule in schedule.get_rounds():
        df = pd.DataFrame([
            {'Home': event.home.label, 'Away': event.away.label}
            for event in round_schedule.events
        ])
        df.to_excel(writer, sheet_name=f'Round {round_schedule.round_number}', index=False)


def _format_schedule_worksheet(worksheet, workbook, df: pd.DataFrame) -> None:
    """Apply formatting to the schedule worksheet."""
    header_format = workbook.add_format({
        'bold': True,
        'text_wrap': True,
        'valign': 'top',
        'fg_color': '#D7E4BC',
        'border': 1
    })

    column_widths = {
        'Order': 6,
        'Leg': 5,
        'Round': 7,
        'Home': 20,
        'Away': 20,
        'Home ID': 12,
        'Away ID': 12
    }

    for i, col in enumerate(df.columns):
        worksheet.set_column(i, i, column_widths.get(col, 12))

    for col_num, value in enumerate(df.columns.values):
        worksheet.write(0, col_num, value, header_format)
