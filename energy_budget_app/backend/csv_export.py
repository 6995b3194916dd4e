# backend/csv_export.py
"""
CSV export of tasks and settings. Used by the settings page.
"""
import os
import logging
from typing import Optional, Dict, List, Tuple
from pathlib import Path

import pandas as pd

from backend.task_schema import StatusFilter

logger = logging.getLogger(__name__)

TASK_COLUMNS = [
    'id', 'title', 'energy_cost', 'category', 'deadline', 'description',
    'status', 'created_at', 'completed_at'
]
SETTINGS_COLUMNS = ['key', 'value']


def _format_datetime(dt):
    # pandas turns missing datetimes into NaT
    if dt is None or pd.isna(dt):
        return ''
    return dt.strftime("%Y-%m-%d %H:%M")


def tasks_to_dataframe(tasks: List[dict]) -> pd.DataFrame:
    """Tasks as a DataFrame with CSV-friendly timestamps, oldest first."""
    if not tasks:
        return pd.DataFrame(columns=TASK_COLUMNS)
    df = pd.DataFrame(tasks, columns=TASK_COLUMNS)
    for col in ('deadline', 'created_at', 'completed_at'):
        df[col] = df[col].map(_format_datetime)
    return df.sort_values('id').reset_index(drop=True)


def export_all_data_to_csv(
    task_manager,
    settings_manager,
    data_dir: Optional[str] = None
) -> Tuple[Dict[str, int], List[str]]:
    """
    Write tasks.csv and settings.csv.

    Returns:
        Tuple of (export_counts dict, list of exported file paths)
    """
    if data_dir is None:
        data_dir = os.path.join(Path(__file__).resolve().parent.parent, "data", "export")

    os.makedirs(data_dir, exist_ok=True)

    export_counts = {}
    exported_files = []

    # Always create the file, even if empty
    tasks = task_manager.list_tasks(StatusFilter.ALL, '')
    tasks_file = os.path.join(data_dir, 'tasks.csv')
    tasks_to_dataframe(tasks).to_csv(tasks_file, index=False, encoding='utf-8')
    export_counts['tasks'] = len(tasks)
    exported_files.append(tasks_file)

    settings = settings_manager.get_all()
    settings_file = os.path.join(data_dir, 'settings.csv')
    settings_df = pd.DataFrame(
        [{'key': k, 'value': v} for k, v in settings.items()],
        columns=SETTINGS_COLUMNS
    )
    settings_df.to_csv(settings_file, index=False, encoding='utf-8')
    export_counts['settings'] = len(settings_df)
    exported_files.append(settings_file)

    logger.info("Exported %s tasks and %s settings to %s",
                export_counts['tasks'], export_counts['settings'], data_dir)
    return export_counts, exported_files
