"""
ML Data Loader - Loads the Weight Lifting Exercise tables from delimited text
Normalises the missing-value tokens before any feature selection runs
"""

import os
import numpy as np
import pandas as pd
import logging

from lift_pipeline.config import PROJECT_CONFIG, get_paths_config

logger = logging.getLogger(__name__)


def normalize_missing_values(df, tokens=None):
    """
    Map missing-value tokens to NaN and parse columns that become numeric

    Args:
        df (pd.DataFrame): raw frame, values possibly still strings
        tokens (list): literal tokens meaning "not available"

    Returns:
        pd.DataFrame: new frame with NaN sentinels and numeric dtypes
    """
    if tokens is None:
        tokens = PROJECT_CONFIG['missing_tokens']

    df = df.replace({token: np.nan for token in tokens})

    for col in df.select_dtypes(include=['object', 'string']).columns:
        try:
            df[col] = pd.to_numeric(df[col])
        except (ValueError, TypeError):
            # Genuinely categorical (user_name, classe, ...)
            continue

    return df


class MLDataLoader:
    """Load the labeled and unlabeled sensor tables from a data directory"""

    def __init__(self, paths=None, missing_tokens=None):
        self.paths = paths if paths is not None else get_paths_config()
        self.missing_tokens = (missing_tokens if missing_tokens is not None
                               else PROJECT_CONFIG['missing_tokens'])

    def load_csv(self, path):
        """
        Read one delimited-text table

        File-not-found and parser errors propagate to the caller unchanged.
        """
        logger.info(f"📊 Loading {path}...")

        df = pd.read_csv(
            path,
            na_values=self.missing_tokens,
            keep_default_na=False,
            low_memory=False
        )

        # The exported tables carry an unnamed row-number column first
        first = df.columns[0]
        if first.startswith('Unnamed'):
            df = df.rename(columns={first: 'X'})

        df = normalize_missing_values(df, self.missing_tokens)

        logger.info(f"✅ Loaded {len(df):,} rows x {df.shape[1]} columns")
        return df

    def load_training_data(self):
        """Load the labeled population"""
        return self.load_csv(self._path('training'))

    def load_testing_data(self):
        """Load the unlabeled population"""
        return self.load_csv(self._path('testing'))

    def _path(self, which):
        key = f'{which}_path'
        if key in self.paths:
            return self.paths[key]
        return os.path.join(self.paths['data_dir'], self.paths[f'{which}_file'])

    def summarize_dataset(self, df, name='dataset',
                          target_column=None, window_flag_column=None,
                          missing_threshold=0.9):
        """
        Summarise a loaded table for exploration

        Args:
            df (pd.DataFrame): loaded table
            name (str): label used in log lines
            target_column (str): label column, reported when present
            window_flag_column (str): yes/no flag marking window-summary rows
            missing_threshold (float): share of NaN above which a column
                counts as mostly missing

        Returns:
            dict: summary statistics
        """
        target_column = target_column or PROJECT_CONFIG['target_column']
        window_flag_column = window_flag_column or PROJECT_CONFIG['window_flag_column']

        missing_share = df.isna().mean() if len(df) else pd.Series(0.0, index=df.columns)
        mostly_missing = missing_share[missing_share > missing_threshold].index.tolist()

        window_rows = 0
        if window_flag_column in df.columns:
            flags = df[window_flag_column].astype(str).str.strip().str.lower()
            window_rows = int((flags == 'yes').sum())

        summary = {
            'name': name,
            'rows': int(len(df)),
            'columns': int(df.shape[1]),
            'window_summary_rows': window_rows,
            'mostly_missing_columns': len(mostly_missing),
            'class_distribution': {}
        }

        if target_column in df.columns:
            counts = df[target_column].value_counts().sort_index()
            summary['class_distribution'] = {str(k): int(v) for k, v in counts.items()}

        logger.info(f"📋 {name}: {summary['rows']:,} rows, {summary['columns']} columns")
        logger.info(f"   Window-summary rows: {window_rows:,}")
        logger.info(f"   Mostly missing columns (>{missing_threshold:.0%} NaN): {len(mostly_missing)}")
        if summary['class_distribution']:
            logger.info(f"   Class distribution: {summary['class_distribution']}")

        return summary
