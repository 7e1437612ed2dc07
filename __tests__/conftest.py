import logging

import pytest

from memdata.config import ROOT_LOGGER


@pytest.fixture()
def clean_loggers():
    """Restore the memdata logger tree after a test configures it."""
    root = logging.getLogger(ROOT_LOGGER)
    handlers = list(root.handlers)
    levels = {
        name: logger.level
        for name, logger in logging.Logger.manager.loggerDict.items()
        if isinstance(logger, logging.Logger) and (name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."))
    }
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + ".")):
            logger.setLevel(levels.get(name, logging.NOTSET))
