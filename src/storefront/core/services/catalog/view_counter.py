"""Best-effort product view counting that never delays or fails a read."""

from fastapi import BackgroundTasks
from loguru import logger

from src.storefront.core.services.database.db_session import DbSessionService
from src.storefront.entities.service.product import ProductRepository


class ViewCountRecorder:
    """Schedules view-count increments to run after the response is sent.

    Each increment uses its own session, so a failure only loses that one
    increment and is logged rather than raised.
    """

    def __init__(
        self,
        db_service: DbSessionService,
        background_tasks: BackgroundTasks | None = None,
    ) -> None:
        self._db_service = db_service
        self._background_tasks = background_tasks

    def record(self, product_id: str) -> None:
        if self._background_tasks is None:
            self.increment(product_id)
            return
        self._background_tasks.add_task(self.increment, product_id)

    def increment(self, product_id: str) -> None:
        try:
            with self._db_service.session_scope() as session:
                ProductRepository(session).increment_view_count(product_id)
        except Exception as e:
            logger.bind(product_id=product_id, error_type=type(e).__name__).warning(
                "Failed to increment view count: {}", e
            )
