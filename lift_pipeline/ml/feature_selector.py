"""
Rule-based Feature Selection for the Weight Lifting Exercise data

Column names carry their meaning in a prefix:
  - window group    populated only on window-summary rows, excluded
  - aggregate group per-instant Euler angles and total acceleration
  - raw group       per-instant gyroscope / accelerometer / magnetometer axes
"""
import pandas as pd
import logging

from lift_pipeline.config import FEATURE_CONFIG, PROJECT_CONFIG
from lift_pipeline.ml.exceptions import (
    ConventionMismatchError,
    MissingValueLeakageError,
    SchemaDriftError,
)

logger = logging.getLogger(__name__)

WINDOW = 'window'
AGGREGATE = 'aggregate'
RAW = 'raw'

COLUMN_PREFIX_RULES = {
    'kurtosis': WINDOW,
    'skewness': WINDOW,
    'max': WINDOW,
    'min': WINDOW,
    'amplitude': WINDOW,
    'var': WINDOW,
    'avg': WINDOW,
    'stddev': WINDOW,
    'total': AGGREGATE,
    'roll': AGGREGATE,
    'pitch': AGGREGATE,
    'yaw': AGGREGATE,
    'gyros': RAW,
    'accel': RAW,
    'magnet': RAW,
}

FEATURE_GROUPS = (AGGREGATE, RAW)


class FeatureSelector:
    """Reduce a raw sensor table to the columns usable for per-instant prediction"""

    def __init__(self, prefix_rules=None, n_leading_columns=None, target_column=None,
                 freq_cut=None, unique_cut=None, drop_near_zero_variance=None):
        self.prefix_rules = dict(prefix_rules or COLUMN_PREFIX_RULES)
        self.n_leading_columns = (FEATURE_CONFIG['n_leading_columns']
                                  if n_leading_columns is None else n_leading_columns)
        self.target_column = target_column or PROJECT_CONFIG['target_column']
        self.freq_cut = FEATURE_CONFIG['freq_cut'] if freq_cut is None else freq_cut
        self.unique_cut = FEATURE_CONFIG['unique_cut'] if unique_cut is None else unique_cut
        self.drop_near_zero_variance = (FEATURE_CONFIG['drop_near_zero_variance']
                                        if drop_near_zero_variance is None
                                        else drop_near_zero_variance)
        self.selected_features = []
        self.nzv_report = None
        self.nzv_dropped = []

    def classify_column(self, name):
        """Group tag of the first prefix `name` starts with, or None"""
        for prefix, group in self.prefix_rules.items():
            if name.startswith(prefix):
                return group
        return None

    def classify_columns(self, columns):
        """Map every column name to its group tag (None when no prefix matches)"""
        return {name: self.classify_column(name) for name in columns}

    def columns_in_group(self, columns, group):
        tags = self.classify_columns(columns)
        return [name for name in columns if tags[name] == group]

    def is_reduced(self, columns):
        """True when every column is already a feature (or the label)"""
        columns = list(columns)
        feature_columns = [c for c in columns if c != self.target_column]
        if not feature_columns:
            return False
        return all(self.classify_column(c) in FEATURE_GROUPS for c in feature_columns)

    def select_features(self, df, is_labeled):
        """
        Drop window-aggregate, identifier and case-id columns

        Args:
            df (pd.DataFrame): table following the sensor naming convention
            is_labeled (bool): True for the labeled population (keeps the
                trailing label), False drops the trailing case identifier.
                When near-zero-variance removal is on, the labeled call
                decides the columns and the unlabeled call drops the same ones

        Returns:
            pd.DataFrame: reduced copy, relative column order preserved

        Raises:
            ConventionMismatchError: the window-aggregate prefixes match nothing
        """
        logger.info(f"🎯 Selecting features from {df.shape[1]} columns (labeled={is_labeled})...")

        if self.is_reduced(df.columns):
            logger.info("   Columns already reduced, nothing to drop")
            self.selected_features = [c for c in df.columns if c != self.target_column]
            return df.copy()

        window_columns = self.columns_in_group(df.columns, WINDOW)
        if not window_columns:
            raise ConventionMismatchError(
                "No window-aggregate columns matched prefixes "
                f"{[p for p, g in self.prefix_rules.items() if g == WINDOW]}; "
                "the table does not follow the expected naming convention"
            )
        reduced = df.drop(columns=window_columns)
        logger.info(f"   Dropped {len(window_columns)} window-aggregate columns")

        if reduced.shape[1] <= self.n_leading_columns:
            raise ConventionMismatchError(
                f"Only {reduced.shape[1]} columns left, expected more than "
                f"{self.n_leading_columns} leading identifier columns"
            )
        leading = list(reduced.columns[:self.n_leading_columns])
        reduced = reduced.iloc[:, self.n_leading_columns:]
        logger.info(f"   Dropped leading columns: {leading}")

        if not is_labeled:
            trailing = reduced.columns[-1]
            reduced = reduced.iloc[:, :-1]
            logger.info(f"   Dropped trailing identifier column '{trailing}'")

        feature_columns = [c for c in reduced.columns if c != self.target_column]
        unmatched = [c for c in feature_columns if self.classify_column(c) is None]
        if unmatched:
            logger.warning(f"   ⚠️ Columns outside the naming convention kept: {unmatched}")

        self.nzv_report = self.near_zero_variance(reduced[feature_columns])
        flagged = self.nzv_report.index[self.nzv_report['nzv'].to_numpy(dtype=bool)].tolist()
        if flagged:
            logger.warning(f"   ⚠️ Near-zero-variance columns: {flagged}")
        else:
            logger.info("   No near-zero-variance columns")

        # Removal is decided on the labeled table only and replayed on the
        # unlabeled one, so both keep the same columns
        if self.drop_near_zero_variance:
            if is_labeled:
                self.nzv_dropped = flagged
            to_drop = [c for c in self.nzv_dropped if c in reduced.columns]
            if to_drop:
                reduced = reduced.drop(columns=to_drop)
                logger.info(f"   Dropped {len(to_drop)} near-zero-variance columns: {to_drop}")

        self.selected_features = [c for c in reduced.columns if c != self.target_column]
        logger.info(f"✅ Selected {len(self.selected_features)} features")

        return reduced.copy()

    def select_aggregate_only(self, df):
        """
        Keep only the aggregate group (total/roll/pitch/yaw) and the label

        Raises:
            ConventionMismatchError: no raw-axis column matched
        """
        raw_columns = self.columns_in_group(df.columns, RAW)
        if not raw_columns:
            raise ConventionMismatchError(
                "No raw sensor-axis columns matched prefixes "
                f"{[p for p, g in self.prefix_rules.items() if g == RAW]}"
            )

        reduced = df.drop(columns=raw_columns)
        logger.info(f"🎯 Aggregate-only features: {df.shape[1]} → {reduced.shape[1]} columns")
        return reduced

    def near_zero_variance(self, df):
        """
        Near-zero-variance diagnostic, one row per column

        freq_ratio is the count of the most common value over the second
        most common; percent_unique is distinct values per 100 rows.
        Missing values are ignored.
        """
        rows = []
        for col in df.columns:
            values = df[col].dropna()
            counts = values.value_counts()
            n_unique = len(counts)

            if n_unique > 1:
                freq_ratio = counts.iloc[0] / counts.iloc[1]
            else:
                freq_ratio = 0.0
            percent_unique = n_unique / len(values) * 100 if len(values) else 0.0
            zero_var = n_unique <= 1

            rows.append({
                'column': col,
                'freq_ratio': float(freq_ratio),
                'percent_unique': float(percent_unique),
                'zero_var': bool(zero_var),
                'nzv': bool(zero_var or (freq_ratio > self.freq_cut
                                         and percent_unique <= self.unique_cut)),
            })

        report = pd.DataFrame(rows, columns=['column', 'freq_ratio', 'percent_unique',
                                             'zero_var', 'nzv'])
        return report.set_index('column')


def check_missing_values(df, population):
    """Raise MissingValueLeakageError if any column of `df` holds NaN"""
    counts = df.isna().sum()
    counts = counts[counts > 0]
    if not counts.empty:
        raise MissingValueLeakageError(population, {c: int(n) for c, n in counts.items()})

    logger.info(f"   ✅ No missing values in the {population} population ({df.shape[1]} columns)")


def check_schema_alignment(labeled, unlabeled, target_column=None):
    """
    Raise SchemaDriftError unless both frames share feature names and order

    The label column of the labeled frame is ignored.
    """
    target_column = target_column or PROJECT_CONFIG['target_column']
    labeled_features = [c for c in labeled.columns if c != target_column]
    unlabeled_features = [c for c in unlabeled.columns if c != target_column]

    if labeled_features == unlabeled_features:
        logger.info(f"   ✅ Feature schemas match ({len(labeled_features)} columns)")
        return

    only_labeled = [c for c in labeled_features if c not in unlabeled_features]
    only_unlabeled = [c for c in unlabeled_features if c not in labeled_features]
    if only_labeled or only_unlabeled:
        raise SchemaDriftError(
            f"Feature names differ: only in labeled {only_labeled}, "
            f"only in unlabeled {only_unlabeled}"
        )
    first = next(i for i, (a, b) in enumerate(zip(labeled_features, unlabeled_features)) if a != b)
    raise SchemaDriftError(
        f"Feature order differs at position {first}: "
        f"'{labeled_features[first]}' vs '{unlabeled_features[first]}'"
    )


def select_features(df, is_labeled):
    """Apply the default FeatureSelector"""
    return FeatureSelector().select_features(df, is_labeled)


def select_aggregate_only(df):
    """Apply the default FeatureSelector's aggregate-only filter"""
    return FeatureSelector().select_aggregate_only(df)
