import logging
import os

ROOT_LOGGER = "memdata"
DEBUG_ENV = "MEMDATA_DEBUG"

_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _logger_name(namespace: str) -> str:
    namespace = namespace.strip()
    if namespace in ("*", ROOT_LOGGER):
        return ROOT_LOGGER
    if namespace.startswith(ROOT_LOGGER + "."):
        return namespace
    return f"{ROOT_LOGGER}.{namespace}"


def configure_logging(
    namespaces: str | None = None,
    level: int = logging.DEBUG,
    handler: logging.Handler | None = None,
) -> list[logging.Logger]:
    """
    Enable log output for memdata loggers.

    Args:
        namespaces: comma separated logger names, e.g. "model.relation,query".
            Names are relative to the "memdata" package; "*" selects all of it.
            Defaults to the MEMDATA_DEBUG environment variable.
        level: level to set on the selected loggers
        handler: handler attached to the package root logger, a stderr
            stream handler when omitted

    Returns:
        The loggers that were enabled.
    """
    namespaces = namespaces if namespaces is not None else os.environ.get(DEBUG_ENV, "")
    names = [n for n in namespaces.split(",") if n.strip()]
    if not names:
        return []

    root = logging.getLogger(ROOT_LOGGER)
    if handler is None and not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    if handler is not None:
        root.addHandler(handler)

    loggers = []
    for name in names:
        logger = logging.getLogger(_logger_name(name))
        logger.setLevel(level)
        loggers.append(logger)
    return loggers
