"""
Shared fixtures: synthetic tables laid out like the Weight Lifting Exercise data
"""

import numpy as np
import pandas as pd
import pytest

from lift_pipeline.config import get_paths_config
from lift_pipeline.ml.model_trainer import ModelTrainer

LEADING_COLUMNS = [
    'X', 'user_name', 'raw_timestamp_part_1', 'raw_timestamp_part_2',
    'cvtd_timestamp', 'new_window', 'num_window'
]
SENSORS = ['belt', 'arm', 'dumbbell', 'forearm']
CLASSES = ['A', 'B', 'C', 'D', 'E']
USERS = ['adelmo', 'carlitos', 'charles', 'eurico', 'jeremy', 'pedro']

WINDOW_PREFIXES = ('kurtosis', 'skewness', 'max', 'min', 'amplitude', 'var', 'avg', 'stddev')


def sensor_columns(sensor):
    """(all, aggregate, window, raw) column names for one sensor location"""
    aggregate = [f'roll_{sensor}', f'pitch_{sensor}', f'yaw_{sensor}', f'total_accel_{sensor}']
    window = [f'{stat}_{angle}_{sensor}'
              for stat in ('kurtosis', 'skewness', 'max', 'min', 'amplitude')
              for angle in ('roll', 'picth', 'yaw')]
    window.append(f'var_total_accel_{sensor}')
    window += [f'{stat}_{angle}_{sensor}'
               for angle in ('roll', 'pitch', 'yaw')
               for stat in ('avg', 'stddev', 'var')]
    raw = [f'{kind}_{sensor}_{axis}'
           for kind in ('gyros', 'accel', 'magnet')
           for axis in ('x', 'y', 'z')]
    return aggregate + window + raw, aggregate, window, raw


def all_sensor_columns():
    columns, aggregate, window, raw = [], [], [], []
    for sensor in SENSORS:
        c, a, w, r = sensor_columns(sensor)
        columns += c
        aggregate += a
        window += w
        raw += r
    return columns, aggregate, window, raw


def _build_frame(labels, rng, window_every=None):
    columns, _, window, _ = all_sensor_columns()
    n = len(labels)
    class_index = np.array([CLASSES.index(label) for label in labels])

    window_rows = np.zeros(n, dtype=bool)
    if window_every:
        window_rows[::window_every] = True

    data = {
        'X': np.arange(1, n + 1),
        'user_name': rng.choice(USERS, size=n),
        'raw_timestamp_part_1': 1322489729 + np.arange(n),
        'raw_timestamp_part_2': rng.integers(0, 999999, size=n),
        'cvtd_timestamp': ['28/11/2011 14:15'] * n,
        'new_window': np.where(window_rows, 'yes', 'no'),
        'num_window': np.arange(n) // 10 + 1,
    }
    for col in columns:
        values = class_index * 5.0 + rng.normal(0.0, 1.0, size=n)
        if col in window:
            values = np.where(window_rows, values, np.nan)
        data[col] = values

    return pd.DataFrame(data, columns=LEADING_COLUMNS + columns)


def make_labeled_frame(n_per_class=30, seed=0):
    rng = np.random.default_rng(seed)
    labels = list(np.repeat(CLASSES, n_per_class))
    rng.shuffle(labels)
    df = _build_frame(labels, rng, window_every=20)
    df['classe'] = labels
    return df


def make_unlabeled_frame(n=20, seed=1):
    """Unlabeled rows plus the true classes they were generated from"""
    rng = np.random.default_rng(seed)
    labels = [CLASSES[i % len(CLASSES)] for i in range(n)]
    df = _build_frame(labels, rng, window_every=None)
    df['problem_id'] = np.arange(1, n + 1)
    return df, labels


@pytest.fixture
def labeled_frame():
    return make_labeled_frame()


@pytest.fixture
def unlabeled_frame():
    df, _ = make_unlabeled_frame()
    return df


@pytest.fixture
def unlabeled_truth():
    _, labels = make_unlabeled_frame()
    return labels


@pytest.fixture
def scenario_labeled():
    """14-column labeled table: ids, window aggregates, per-instant axes, label"""
    return pd.DataFrame({
        'id': [1, 2, 3],
        'ts1': [10, 11, 12], 'ts2': [20, 21, 22], 'ts3': [30, 31, 32],
        'ts4': [40, 41, 42], 'ts5': ['no', 'no', 'yes'], 'ts6': [1, 1, 2],
        'kurtosis_x': [np.nan, np.nan, 0.4],
        'max_x': [np.nan, np.nan, 7.0],
        'roll_belt': [1.1, 1.2, 1.3],
        'gyros_arm_x': [0.1, 0.0, -0.1],
        'accel_forearm_y': [-5.0, -4.0, -3.0],
        'magnet_belt_z': [300.0, 301.0, 299.0],
        'classe': ['A', 'B', 'A'],
    })


@pytest.fixture
def scenario_unlabeled(scenario_labeled):
    df = scenario_labeled.drop(columns=['classe'])
    df['problem_id'] = [1, 2, 3]
    return df


def write_raw_csv(df, path):
    """Write a frame the way the exported dataset looks on disk"""
    raw = df.copy()
    # The export has an empty header over the row-number column
    raw = raw.rename(columns={'X': ''})
    raw.to_csv(path, index=False, na_rep='NA')


@pytest.fixture
def data_paths(tmp_path, labeled_frame, unlabeled_frame):
    data_dir = tmp_path / 'data'
    data_dir.mkdir()
    write_raw_csv(labeled_frame, data_dir / 'pml-training.csv')
    write_raw_csv(unlabeled_frame, data_dir / 'pml-testing.csv')
    return get_paths_config(data_dir=str(data_dir), output_dir=str(tmp_path / 'predictions'))


@pytest.fixture
def small_trainer():
    return ModelTrainer(cv_folds=3, n_estimators=15, max_features=[2, 'sqrt'],
                        random_state=7, n_jobs=1)
