"""Celery tasks for ride-related background processing."""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def expire_ride_requests_task():
    """
    Periodic sweep (Celery beat) moving stale ACTIVE ride requests to EXPIRED.

    Read paths sweep lazily as well; this keeps the table tidy between reads.
    """
    from services.matching import sweep_expired

    expired = sweep_expired()
    logger.debug("Ride request sweep finished: %d expired", expired)
    return expired
