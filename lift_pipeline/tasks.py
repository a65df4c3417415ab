"""
Batch tasks for the Weight Lifting Exercise quality pipeline
load → select features → validate → split → train → evaluate → predict
"""

import os
import argparse
import logging

from lift_pipeline.config import PROJECT_CONFIG, get_paths_config
from lift_pipeline.ml.data_loader import MLDataLoader
from lift_pipeline.ml.data_splitter import stratified_split
from lift_pipeline.ml.feature_selector import (
    FeatureSelector,
    check_missing_values,
    check_schema_alignment,
)
from lift_pipeline.ml.model_evaluator import ModelEvaluator
from lift_pipeline.ml.model_trainer import ModelTrainer
from lift_pipeline.ml.prediction_writer import PredictionWriter
from lift_pipeline.utils.logging_utils import configure_logging, log_pipeline_event

logger = logging.getLogger(__name__)


def run_analysis(paths=None, cv_folds=None, train_size=None, random_state=None,
                 plot=False, trainer=None) -> dict:
    """
    Run the full analysis once

    Args:
        paths (dict): input/output locations, see get_paths_config()
        cv_folds (int): cross-validation folds for model training
        train_size (float): share of labeled rows used for training
        random_state (int): seed for the partition
        plot (bool): save confusion-matrix heatmaps next to the predictions
        trainer (ModelTrainer): preconfigured trainer, built from config if None

    Returns:
        dict: run summary (also written to run_summary.json)
    """
    paths = paths if paths is not None else get_paths_config()
    target_col = PROJECT_CONFIG['target_column']
    task_id = 'run_analysis'

    log_pipeline_event(task_id, 'started', {'paths': paths})

    try:
        logger.info("=" * 70)
        logger.info(" STARTING EXERCISE QUALITY ANALYSIS")
        logger.info("=" * 70)

        # ====================================
        # Step 1: Load data
        # ====================================
        loader = MLDataLoader(paths=paths)
        df_labeled = loader.load_training_data()
        df_unlabeled = loader.load_testing_data()

        loader.summarize_dataset(df_labeled, name='labeled')
        unlabeled_summary = loader.summarize_dataset(df_unlabeled, name='unlabeled')
        if unlabeled_summary['window_summary_rows']:
            logger.warning(f"    Unlabeled population has "
                           f"{unlabeled_summary['window_summary_rows']} window-summary rows")

        # ====================================
        # Step 2: Feature selection
        # ====================================
        selector = FeatureSelector(target_column=target_col)
        labeled = selector.select_features(df_labeled, is_labeled=True)
        unlabeled = selector.select_features(df_unlabeled, is_labeled=False)

        # ====================================
        # Step 3: Validate reduced tables
        # ====================================
        logger.info(" Validating selected features...")
        check_missing_values(labeled, 'labeled')
        check_missing_values(unlabeled, 'unlabeled')
        check_schema_alignment(labeled, unlabeled, target_col)

        all_features = [c for c in labeled.columns if c != target_col]
        aggregate_features = [c for c in selector.select_aggregate_only(labeled).columns
                              if c != target_col]

        # ====================================
        # Step 4: Partition
        # ====================================
        logger.info(" Splitting labeled data...")
        X_train, X_valid, y_train, y_valid = stratified_split(
            labeled, target_column=target_col,
            train_size=train_size, random_state=random_state
        )

        # ====================================
        # Step 5: Train models
        # ====================================
        logger.info(" Training models...")
        trainer = trainer or ModelTrainer(cv_folds=cv_folds)
        result = trainer.train_all({
            'all_features': (X_train[all_features], X_valid[all_features]),
            'aggregate_only': (X_train[aggregate_features], X_valid[aggregate_features]),
        }, y_train, y_valid)

        # ====================================
        # Step 6: Evaluate
        # ====================================
        evaluator = ModelEvaluator()
        for model_name, model_result in trainer.results.items():
            evaluator.evaluate_model(model_result['model'],
                                     X_valid[model_result['features']], y_valid, model_name)
            logger.info(f" Confusion matrix ({model_name}):\n"
                        f"{evaluator.get_confusion_matrix(model_name).to_string()}")
            if plot:
                os.makedirs(paths['output_dir'], exist_ok=True)
                evaluator.plot_confusion_matrix(
                    model_name,
                    save_path=os.path.join(paths['output_dir'], f'confusion_matrix_{model_name}.png')
                )

        logger.info(f" Model comparison:\n{evaluator.generate_report().to_string()}")

        top_features = trainer.feature_importance().head(10)
        logger.info(f" Top features ({result['best_model_name']}):\n{top_features.to_string(index=False)}")

        # ====================================
        # Step 7: Predict and write
        # ====================================
        predictions = trainer.predict(unlabeled)
        for i, label in enumerate(predictions, start=1):
            logger.info(f"   Case {i}: {label}")

        writer = PredictionWriter(paths=paths)
        prediction_files = writer.write_predictions(predictions)

        summary = {
            'best_model_name': result['best_model_name'],
            'metrics': result['all_results'],
            'training_records': len(X_train),
            'validation_records': len(X_valid),
            'features_used': len(all_features),
            'selected_features': all_features,
            'aggregate_features': aggregate_features,
            'predictions': [str(p) for p in predictions],
            'prediction_files': prediction_files
        }
        writer.write_summary(summary)

        logger.info("=" * 70)
        logger.info(" ANALYSIS COMPLETED SUCCESSFULLY")
        logger.info(f"   Model: {result['best_model_name']}")
        logger.info(f"      Accuracy: {result['metrics']['valid_accuracy']:.4f}")
        logger.info(f"      Out-of-sample error: {result['metrics']['valid_out_of_sample_error']:.4f}")
        logger.info("=" * 70)

        log_pipeline_event(task_id, 'completed', {
            'best_model_name': result['best_model_name'],
            'valid_accuracy': float(result['metrics']['valid_accuracy']),
            'predictions': len(predictions)
        })

        return summary

    except Exception as e:
        logger.exception(f" Analysis failed: {e}")
        log_pipeline_event(task_id, 'failed', error_message=str(e))
        raise


def build_parser():
    parser = argparse.ArgumentParser(
        description="Predict weight-lifting exercise quality from wearable sensor data"
    )
    parser.add_argument('--data-dir', help="directory holding the training/testing CSV files")
    parser.add_argument('--output-dir', help="directory for prediction files")
    parser.add_argument('--cv-folds', type=int, default=PROJECT_CONFIG['cv_folds'])
    parser.add_argument('--train-size', type=float, default=PROJECT_CONFIG['train_size'])
    parser.add_argument('--n-estimators', type=int, help="trees per random forest")
    parser.add_argument('--plot', action='store_true', help="save confusion-matrix heatmaps")
    parser.add_argument('--log-level', help="logging level, e.g. DEBUG")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)

    paths = get_paths_config(data_dir=args.data_dir, output_dir=args.output_dir)
    trainer = ModelTrainer(cv_folds=args.cv_folds, n_estimators=args.n_estimators)

    run_analysis(paths=paths, train_size=args.train_size, plot=args.plot, trainer=trainer)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
