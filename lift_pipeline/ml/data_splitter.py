"""
Stratified partitioning of the labeled population
"""

import logging
from sklearn.model_selection import train_test_split

from lift_pipeline.config import PROJECT_CONFIG

logger = logging.getLogger(__name__)


def stratified_split(df, target_column=None, train_size=None, random_state=None):
    """
    Split rows into disjoint training / validation sets, preserving label proportions

    Args:
        df (pd.DataFrame): labeled table
        target_column (str): label column to stratify on
        train_size (float): share of rows for training, in (0, 1)
        random_state (int): seed for reproducible partitions

    Returns:
        tuple: (X_train, X_valid, y_train, y_valid)
    """
    target_column = target_column or PROJECT_CONFIG['target_column']
    train_size = PROJECT_CONFIG['train_size'] if train_size is None else train_size
    random_state = PROJECT_CONFIG['random_state'] if random_state is None else random_state

    if target_column not in df.columns:
        raise ValueError(f"Target column '{target_column}' not found")
    if not 0 < train_size < 1:
        raise ValueError(f"train_size must be between 0 and 1, got {train_size}")

    X = df.drop(columns=[target_column])
    y = df[target_column]

    X_train, X_valid, y_train, y_valid = train_test_split(
        X, y, train_size=train_size, random_state=random_state, stratify=y
    )

    logger.info(f"   Training: {X_train.shape}")
    logger.info(f"   Validation: {X_valid.shape}")

    return X_train, X_valid, y_train, y_valid
