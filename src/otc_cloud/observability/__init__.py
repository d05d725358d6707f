"""Observability helpers for the OTC client.

Quick start::

    from otc_cloud.observability import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("auth_succeeded", region="eu-de")
"""

from .logging import configure_logging, get_logger, mask_secret, operation_id_ctx

__all__ = [
    "configure_logging",
    "get_logger",
    "mask_secret",
    "operation_id_ctx",
]
