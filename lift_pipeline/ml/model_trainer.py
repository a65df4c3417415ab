import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold
import logging

from lift_pipeline.config import MODEL_CONFIG, PROJECT_CONFIG
from lift_pipeline.ml.metrics import calculate_all_metrics

logger = logging.getLogger(__name__)


class ModelTrainer:

    def __init__(self, cv_folds=None, n_estimators=None, max_features=None,
                 random_state=None, n_jobs=None):
        rf_config = MODEL_CONFIG['random_forest']
        self.cv_folds = PROJECT_CONFIG['cv_folds'] if cv_folds is None else cv_folds
        self.n_estimators = rf_config['n_estimators'] if n_estimators is None else n_estimators
        self.max_features = list(rf_config['max_features'] if max_features is None else max_features)
        self.random_state = rf_config['random_state'] if random_state is None else random_state
        self.n_jobs = rf_config['n_jobs'] if n_jobs is None else n_jobs
        self.results = {}
        self.best_model = None
        self.best_model_name = None

    def build_search(self, n_features):
        """Random forest wrapped in a k-fold grid search over max_features"""
        # Integer candidates larger than the feature count are invalid
        grid = [m for m in self.max_features
                if not isinstance(m, (int, np.integer)) or m <= n_features]
        if not grid:
            grid = ['sqrt']

        forest = RandomForestClassifier(
            n_estimators=self.n_estimators,
            random_state=self.random_state,
            n_jobs=self.n_jobs
        )
        folds = StratifiedKFold(n_splits=self.cv_folds, shuffle=True,
                                random_state=self.random_state)
        return GridSearchCV(forest, {'max_features': grid}, cv=folds,
                            scoring='accuracy', refit=True)

    def train(self, X_train, y_train):
        """
        Fit a cross-validated random forest

        Returns:
            tuple: (fitted RandomForestClassifier, cv summary dict)
        """
        search = self.build_search(X_train.shape[1])
        search.fit(X_train, y_train)

        best = search.best_index_
        cv_summary = {
            'cv_accuracy_mean': float(search.cv_results_['mean_test_score'][best]),
            'cv_accuracy_std': float(search.cv_results_['std_test_score'][best]),
            'best_params': search.best_params_
        }
        return search.best_estimator_, cv_summary

    def train_all(self, feature_sets, y_train, y_valid):
        """
        Train one model per feature set and keep the most accurate

        Args:
            feature_sets (dict): name -> (X_train, X_valid)
            y_train, y_valid: labels aligned with every X_train / X_valid
        """
        logger.info(f"Training {len(feature_sets)} models with {self.cv_folds}-fold CV...")

        for name, (X_train, X_valid) in feature_sets.items():
            logger.info(f"Training {name} on {X_train.shape[1]} features...")
            model, cv_summary = self.train(X_train, y_train)

            train_preds = model.predict(X_train)
            valid_preds = model.predict(X_valid)
            valid_metrics = calculate_all_metrics(y_valid, valid_preds)

            self.results[name] = {
                'model': model,
                'features': list(X_train.columns),
                'params': cv_summary['best_params'],
                'metrics': {
                    'cv_accuracy_mean': cv_summary['cv_accuracy_mean'],
                    'cv_accuracy_std': cv_summary['cv_accuracy_std'],
                    'train_accuracy': calculate_all_metrics(y_train, train_preds)['accuracy'],
                    **{f'valid_{k}': v for k, v in valid_metrics.items()}
                }
            }
            metrics = self.results[name]['metrics']
            logger.info(f"   {name}: CV acc={metrics['cv_accuracy_mean']:.4f} "
                        f"(±{metrics['cv_accuracy_std']:.4f}), "
                        f"validation acc={metrics['valid_accuracy']:.4f}, "
                        f"kappa={metrics['valid_kappa']:.4f}")

        self.best_model_name = max(self.results,
                                   key=lambda k: self.results[k]['metrics']['valid_accuracy'])
        self.best_model = self.results[self.best_model_name]['model']
        logger.info(f"Best model: {self.best_model_name} "
                    f"(accuracy={self.results[self.best_model_name]['metrics']['valid_accuracy']:.4f})")

        return {
            'best_model_name': self.best_model_name,
            'best_model':      self.best_model,
            'metrics':         self.results[self.best_model_name]['metrics'],
            'all_results':     {k: v['metrics'] for k, v in self.results.items()}
        }

    def predict(self, X, model_name=None):
        """Predicted labels, in row order, from the named (default: best) model"""
        model_name = model_name or self.best_model_name
        if model_name not in self.results:
            raise ValueError(f"No trained model named {model_name!r}")

        features = self.results[model_name]['features']
        return list(self.results[model_name]['model'].predict(X[features]))

    def feature_importance(self, model_name=None):
        """Impurity-based importance of each feature, highest first"""
        model_name = model_name or self.best_model_name
        if model_name not in self.results:
            raise ValueError(f"No trained model named {model_name!r}")

        result = self.results[model_name]
        return pd.DataFrame({
            'feature': result['features'],
            'importance': result['model'].feature_importances_
        }).sort_values('importance', ascending=False).reset_index(drop=True)
