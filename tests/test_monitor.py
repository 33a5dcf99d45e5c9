import logging
import sys
import tempfile
import threading

from romdepot import monitor


def test_monitor_writes_action_to_file():
    logger = logging.getLogger('romdepot')
    saved_handlers = list(logger.handlers)
    saved = (logger.level, logger.propagate, sys.excepthook, threading.excepthook)

    with tempfile.TemporaryDirectory() as tmp:
        monitor._INITIALIZED = False
        try:
            logger = monitor.setup_runtime_monitor(logs_dir=tmp, echo=False)
            monitor.monitor_action('test.event monitor alive', logger=logger)
            for h in logger.handlers:
                h.flush()

            log_path = monitor.get_log_path()
            with open(log_path, 'r', encoding='utf-8') as f:
                content = f.read()

            assert 'action: test.event monitor alive' in content
            assert log_path.name.startswith('runtime-')
        finally:
            for h in logger.handlers:
                if h not in saved_handlers:
                    h.close()
            logger.handlers[:] = saved_handlers
            level, logger.propagate, sys.excepthook, threading.excepthook = saved
            logger.setLevel(level)
            monitor._INITIALIZED = False
            monitor._LOG_PATH = None
