"""
Configuration for the Weight Lifting Exercise quality pipeline
Values can be overridden through environment variables or a .env file
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ============================================
# INPUT / OUTPUT PATHS
# ============================================

PATHS_CONFIG = {
    'data_dir': os.getenv('LIFT_DATA_DIR', 'data'),
    'training_file': os.getenv('LIFT_TRAINING_FILE', 'pml-training.csv'),
    'testing_file': os.getenv('LIFT_TESTING_FILE', 'pml-testing.csv'),
    'output_dir': os.getenv('LIFT_OUTPUT_DIR', 'predictions'),
    'prediction_prefix': 'problem_id_'
}


def get_paths_config(**overrides):
    """
    Build a paths dict for one run

    Args:
        **overrides: keys of PATHS_CONFIG to replace; None values are ignored

    Returns:
        dict: independent copy of PATHS_CONFIG with overrides applied
    """
    paths = dict(PATHS_CONFIG)
    unknown = set(overrides) - set(paths)
    if unknown:
        raise KeyError(f"Unknown path settings: {sorted(unknown)}")

    paths.update({k: v for k, v in overrides.items() if v is not None})
    paths['training_path'] = os.path.join(paths['data_dir'], paths['training_file'])
    paths['testing_path'] = os.path.join(paths['data_dir'], paths['testing_file'])
    return paths


# ============================================
# PROJECT SETTINGS
# ============================================

PROJECT_CONFIG = {
    'random_state': 42,
    'train_size': 0.7,
    'cv_folds': 5,
    'target_column': 'classe',
    'id_column': 'problem_id',
    'window_flag_column': 'new_window',
    'missing_tokens': ['NA', '#DIV/0!', '']
}

# ============================================
# MODEL PARAMETERS
# ============================================

MODEL_CONFIG = {
    'random_forest': {
        'n_estimators': int(os.getenv('RF_N_ESTIMATORS', 200)),
        'max_features': [2, 'sqrt', 0.5],
        'random_state': 42,
        'n_jobs': -1
    }
}

# ============================================
# FEATURE SELECTION SETTINGS
# ============================================

FEATURE_CONFIG = {
    'n_leading_columns': 7,           # id, user, timestamps, window metadata
    'freq_cut': 95 / 5,               # near-zero-variance frequency ratio cutoff
    'unique_cut': 10,                 # near-zero-variance percent-unique cutoff
    'drop_near_zero_variance': False  # diagnostic only unless enabled
}

# ============================================
# LOGGING SETTINGS
# ============================================

LOGGING_CONFIG = {
    'level': os.getenv('LOG_LEVEL', 'INFO'),
    'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    'log_dir': os.getenv('LIFT_LOG_DIR')
}
