"""
ML module for exercise quality prediction
"""
from .data_loader import MLDataLoader, normalize_missing_values
from .feature_selector import FeatureSelector, select_features, select_aggregate_only
from .model_trainer import ModelTrainer
from .model_evaluator import ModelEvaluator
from .prediction_writer import PredictionWriter

__all__ = [
    'MLDataLoader',
    'normalize_missing_values',
    'FeatureSelector',
    'select_features',
    'select_aggregate_only',
    'ModelTrainer',
    'ModelEvaluator',
    'PredictionWriter'
]
