"""Journalisation structurée (structlog).

Les événements sont rendus en console sur stderr; l'identifiant de requête lié par
`RequestIDMiddleware` est fusionné dans chaque événement.
"""

import logging
import sys

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # `sys.stderr` relu à chaque création: un flux remplacé puis fermé n'est jamais conservé
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: str = "DEBUG") -> None:
    """Configure structlog pour produire des logs détaillés et filtrables.

    Args:
        level: Niveau minimal (nom standard `logging`, ex. "INFO").
    """
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.DEBUG
    timestamper = structlog.processors.TimeStamper(fmt="ISO")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
