"""
Classification metrics for exercise-quality predictions
"""
import numpy as np
from sklearn.metrics import accuracy_score, balanced_accuracy_score, cohen_kappa_score


def out_of_sample_error(y_true, y_pred):
    """Share of misclassified rows"""
    return 1.0 - accuracy_score(y_true, y_pred)


def calculate_all_metrics(y_true, y_pred):
    """Calculate all classification metrics"""
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    return {
        'accuracy': accuracy_score(y_true, y_pred),
        'balanced_accuracy': balanced_accuracy_score(y_true, y_pred),
        'kappa': cohen_kappa_score(y_true, y_pred),
        'out_of_sample_error': out_of_sample_error(y_true, y_pred)
    }
