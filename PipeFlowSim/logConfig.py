# -- Logging Configuration -- #

'''
Console (and optional file) logging for the PipeFlowSim package.

Library modules log through logging.getLogger(__name__); nothing is
printed until setupLogging() attaches a handler to the package logger.

Sean Bowman [02/12/2026]
'''

from __future__ import annotations

import logging
import sys


def setupLogging(level: int = logging.INFO, logFile: str | None = None) -> logging.Logger:
    '''
    Configure the 'PipeFlowSim' package logger.

    Parameters:
    -----------
    level : int
        Logging level (e.g. logging.DEBUG, logging.INFO)
    logFile : str | None
        Optional path to also write logs to

    Returns:
    --------
    logging.Logger : The configured package logger
    '''
    logger = logging.getLogger('PipeFlowSim')
    logger.setLevel(level)

    # Drop handlers from a previous call so messages are not duplicated
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S',
    )

    consoleHandler = logging.StreamHandler(sys.stdout)
    consoleHandler.setLevel(level)
    consoleHandler.setFormatter(formatter)
    logger.addHandler(consoleHandler)

    if logFile:
        fileHandler = logging.FileHandler(logFile, mode='w', encoding='utf-8')
        fileHandler.setLevel(level)
        fileHandler.setFormatter(formatter)
        logger.addHandler(fileHandler)

    logger.debug('Logging initialized.')
    return logger
