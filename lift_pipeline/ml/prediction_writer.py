"""
Write predictions as flat files, one per unlabeled row
"""

import os
import json
import logging
from datetime import datetime

from lift_pipeline.config import get_paths_config

logger = logging.getLogger(__name__)

SUMMARY_FILE = 'run_summary.json'


class PredictionWriter:
    """Write prediction files into the configured output directory"""

    def __init__(self, paths=None):
        self.paths = paths if paths is not None else get_paths_config()
        self.output_dir = self.paths['output_dir']
        self.prefix = self.paths.get('prediction_prefix', 'problem_id_')

    def write_predictions(self, predictions):
        """
        Write `<prefix><i>.txt` for i = 1..n holding the single predicted label

        Returns:
            list: written file paths, in row order
        """
        os.makedirs(self.output_dir, exist_ok=True)

        written = []
        for i, label in enumerate(predictions, start=1):
            path = os.path.join(self.output_dir, f'{self.prefix}{i}.txt')
            with open(path, 'w') as f:
                f.write(f'{label}\n')
            written.append(path)

        logger.info(f"✅ Wrote {len(written)} prediction files to {self.output_dir}")
        return written

    def write_summary(self, summary):
        """Write the run summary as JSON next to the prediction files"""
        os.makedirs(self.output_dir, exist_ok=True)

        summary = dict(summary)
        summary.setdefault('run_date', datetime.now().isoformat())

        path = os.path.join(self.output_dir, SUMMARY_FILE)
        with open(path, 'w') as f:
            json.dump(summary, f, indent=2, default=_to_builtin)

        logger.info(f"   Run summary saved to {path}")
        return path


def _to_builtin(value):
    # numpy scalars from sklearn metrics
    if hasattr(value, 'item'):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
