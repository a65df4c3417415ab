"""
Pipeline logging utilities.
Configures handlers and records task events on a dedicated logger.
"""

import os
import json
import logging
from datetime import datetime

from lift_pipeline.config import LOGGING_CONFIG

EVENT_LOGGER = 'lift_pipeline.events'


def configure_logging(level=None, log_dir=None):
    """
    Apply LOGGING_CONFIG to the root logger

    Args:
        level: overrides LOGGING_CONFIG['level']
        log_dir: when set (or configured), also write lift_pipeline.log there

    Returns:
        str or None: path of the log file, if one was opened
    """
    level = level or LOGGING_CONFIG['level']
    log_dir = log_dir or LOGGING_CONFIG['log_dir']

    handlers = [logging.StreamHandler()]
    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, 'lift_pipeline.log')
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(
        level=level,
        format=LOGGING_CONFIG['format'],
        handlers=handlers,
        force=True
    )
    return log_path


def log_pipeline_event(task_id, status, metadata=None, error_message=None):
    """Log a pipeline event as a single JSON line"""
    event = {
        'task_id': task_id,
        'status': status,
        'timestamp': datetime.now().isoformat(),
        'error_message': error_message,
        'metadata': metadata or {}
    }

    logger = logging.getLogger(EVENT_LOGGER)
    line = json.dumps(event, default=str)
    if status == 'failed':
        logger.error(line)
    else:
        logger.info(line)

    return event
