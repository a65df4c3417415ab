"""
Tests for partitioning, random-forest training and evaluation.
"""

import os

import numpy as np
import pandas as pd
import pytest

from lift_pipeline.ml.data_splitter import stratified_split
from lift_pipeline.ml.feature_selector import select_aggregate_only, select_features
from lift_pipeline.ml.metrics import calculate_all_metrics, out_of_sample_error
from lift_pipeline.ml.model_evaluator import ModelEvaluator


@pytest.fixture
def labeled_features(labeled_frame):
    return select_features(labeled_frame, is_labeled=True)


class TestStratifiedSplit:

    def test_disjoint_and_complete(self, labeled_features):
        X_train, X_valid, y_train, y_valid = stratified_split(labeled_features, train_size=0.7)

        assert len(X_train) + len(X_valid) == len(labeled_features)
        assert not set(X_train.index) & set(X_valid.index)
        assert 'classe' not in X_train.columns
        assert list(y_train.index) == list(X_train.index)

    def test_preserves_class_proportions(self, labeled_features):
        _, _, y_train, y_valid = stratified_split(labeled_features, train_size=0.6)

        assert y_train.value_counts().to_dict() == {c: 18 for c in 'ABCDE'}
        assert y_valid.value_counts().to_dict() == {c: 12 for c in 'ABCDE'}

    def test_reproducible(self, labeled_features):
        first = stratified_split(labeled_features, random_state=3)[0]
        second = stratified_split(labeled_features, random_state=3)[0]
        assert list(first.index) == list(second.index)

    @pytest.mark.parametrize('train_size', [0, 1, 1.5])
    def test_invalid_train_size(self, labeled_features, train_size):
        with pytest.raises(ValueError):
            stratified_split(labeled_features, train_size=train_size)

    def test_missing_target(self, labeled_features):
        with pytest.raises(ValueError, match='not found'):
            stratified_split(labeled_features.drop(columns=['classe']))


class TestModelTrainer:

    @pytest.fixture
    def trained(self, labeled_features, small_trainer):
        X_train, X_valid, y_train, y_valid = stratified_split(labeled_features)
        aggregate = [c for c in select_aggregate_only(labeled_features).columns if c != 'classe']
        result = small_trainer.train_all({
            'all_features': (X_train, X_valid),
            'aggregate_only': (X_train[aggregate], X_valid[aggregate]),
        }, y_train, y_valid)
        return small_trainer, result, X_valid, y_valid

    def test_trains_every_feature_set(self, trained):
        trainer, result, _, _ = trained

        assert set(trainer.results) == {'all_features', 'aggregate_only'}
        assert len(trainer.results['all_features']['features']) == 52
        assert len(trainer.results['aggregate_only']['features']) == 16
        assert set(result['all_results']) == {'all_features', 'aggregate_only'}

    def test_best_model_is_most_accurate(self, trained):
        trainer, result, _, _ = trained

        best = max(trainer.results, key=lambda k: trainer.results[k]['metrics']['valid_accuracy'])
        assert result['best_model_name'] == best
        assert result['best_model'] is trainer.results[best]['model']

    def test_metrics(self, trained):
        _, result, _, _ = trained
        metrics = result['metrics']

        assert metrics['valid_accuracy'] > 0.9
        assert metrics['cv_accuracy_mean'] > 0.9
        assert metrics['valid_out_of_sample_error'] == pytest.approx(1 - metrics['valid_accuracy'])
        assert metrics['cv_accuracy_std'] >= 0

    def test_cv_grid_respects_feature_count(self, small_trainer):
        search = small_trainer.build_search(n_features=1)
        assert search.param_grid == {'max_features': ['sqrt']}
        assert search.cv.get_n_splits() == 3

    def test_predict_selects_model_features(self, trained):
        trainer, _, X_valid, y_valid = trained

        predictions = trainer.predict(X_valid, model_name='aggregate_only')

        assert len(predictions) == len(X_valid)
        assert set(predictions) <= set('ABCDE')

    def test_predict_unknown_model(self, trained):
        trainer, _, X_valid, _ = trained
        with pytest.raises(ValueError):
            trainer.predict(X_valid, model_name='boosting')

    def test_feature_importance(self, trained):
        trainer, _, _, _ = trained

        importance = trainer.feature_importance('aggregate_only')

        assert len(importance) == 16
        assert importance['importance'].is_monotonic_decreasing
        assert importance['importance'].sum() == pytest.approx(1.0)


class TestMetrics:

    def test_calculate_all_metrics(self):
        y_true = ['A', 'A', 'B', 'B']
        y_pred = ['A', 'B', 'B', 'B']

        metrics = calculate_all_metrics(y_true, y_pred)

        assert metrics['accuracy'] == pytest.approx(0.75)
        assert metrics['out_of_sample_error'] == pytest.approx(0.25)
        assert metrics['balanced_accuracy'] == pytest.approx(0.75)
        assert metrics['kappa'] == pytest.approx(0.5)

    def test_out_of_sample_error_perfect(self):
        assert out_of_sample_error(['C', 'D'], ['C', 'D']) == 0.0


class TestModelEvaluator:

    def test_confusion_matrix(self):
        evaluator = ModelEvaluator()
        evaluator.evaluate_predictions(['A', 'B', 'B', 'C'], ['A', 'A', 'B', 'C'], 'rf')

        cm = evaluator.get_confusion_matrix('rf')

        assert list(cm.index) == ['A', 'B', 'C']
        assert cm.loc['A', 'B'] == 1
        assert cm.loc['A', 'A'] == 1
        assert int(np.trace(cm.values)) == 3

    def test_evaluate_model(self, trained_forest):
        model, X_valid, y_valid = trained_forest
        metrics = ModelEvaluator().evaluate_model(model, X_valid, y_valid, 'rf')
        assert metrics['accuracy'] > 0.9

    def test_report_and_plot(self, tmp_path):
        evaluator = ModelEvaluator()
        evaluator.evaluate_predictions(['A', 'B'], ['A', 'B'], 'all_features')
        evaluator.evaluate_predictions(['A', 'A'], ['A', 'B'], 'aggregate_only')

        report = evaluator.generate_report()
        path = evaluator.plot_confusion_matrix('all_features', save_path=str(tmp_path / 'cm.png'))

        assert isinstance(report, pd.DataFrame)
        assert report.loc['all_features', 'accuracy'] == 1.0
        assert report.loc['aggregate_only', 'accuracy'] == 0.5
        assert os.path.exists(path)

    def test_empty_report(self):
        report = ModelEvaluator().generate_report()
        assert isinstance(report, pd.DataFrame)
        assert report.empty

    def test_unknown_model(self):
        with pytest.raises(ValueError):
            ModelEvaluator().get_confusion_matrix('rf')


@pytest.fixture
def trained_forest(labeled_features, small_trainer):
    X_train, X_valid, y_train, y_valid = stratified_split(labeled_features)
    model, _ = small_trainer.train(X_train, y_train)
    return model, X_valid, y_valid
