"""Logger lookup for otpcatalog components."""

import logging

ROOT_LOGGER_NAME = 'otpcatalog'


def get_logger(name: str) -> logging.Logger:
    """Return the logger for one otpcatalog component.

    Names outside the package namespace are nested under it, so
    'session' and 'otpcatalog.session' are the same logger. Records
    always propagate to the root logger; until the application calls
    basicConfig() (root has no handlers) the component only emits
    WARNING and above.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + '.'):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger
