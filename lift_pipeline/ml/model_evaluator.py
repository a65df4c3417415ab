"""
Model evaluation utilities
"""

import pandas as pd
import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import classification_report, confusion_matrix

from lift_pipeline.ml.metrics import calculate_all_metrics


class ModelEvaluator:
    def __init__(self):
        self.evaluation_results = {}

    def evaluate_model(self, model, X_test, y_test, model_name):
        """Comprehensive model evaluation"""

        # Predictions
        y_pred = model.predict(X_test)
        return self.evaluate_predictions(y_pred, y_test, model_name)

    def evaluate_predictions(self, y_pred, y_test, model_name):
        """Accuracy and confusion statistics for already-made predictions"""
        y_pred = np.asarray(y_pred)
        y_test = np.asarray(y_test)
        labels = sorted(set(y_test) | set(y_pred))

        metrics = calculate_all_metrics(y_test, y_pred)

        # Store results
        self.evaluation_results[model_name] = {
            'metrics': metrics,
            'predictions': y_pred,
            'actuals': y_test,
            'confusion_matrix': pd.DataFrame(
                confusion_matrix(y_test, y_pred, labels=labels),
                index=pd.Index(labels, name='actual'),
                columns=pd.Index(labels, name='predicted')
            ),
            'classification_report': classification_report(
                y_test, y_pred, labels=labels, output_dict=True, zero_division=0
            )
        }

        return metrics

    def get_confusion_matrix(self, model_name):
        if model_name not in self.evaluation_results:
            raise ValueError(f"No evaluation results for {model_name}")
        return self.evaluation_results[model_name]['confusion_matrix']

    def plot_confusion_matrix(self, model_name, save_path=None):
        """Heatmap of actual vs predicted classes"""
        cm = self.get_confusion_matrix(model_name)
        accuracy = self.evaluation_results[model_name]['metrics']['accuracy']

        fig, ax = plt.subplots(figsize=(8, 6))
        sns.heatmap(cm, annot=True, fmt='d', cmap='Blues', cbar=False, ax=ax)
        ax.set_xlabel('Predicted class')
        ax.set_ylabel('Actual class')
        ax.set_title(f'{model_name} - Confusion matrix (accuracy = {accuracy:.4f})')
        fig.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')

        plt.close(fig)
        return save_path

    def generate_report(self):
        """Generate evaluation report"""
        if not self.evaluation_results:
            return pd.DataFrame()

        report_df = pd.DataFrame({
            model: results['metrics']
            for model, results in self.evaluation_results.items()
        }).T

        return report_df.round(4)
