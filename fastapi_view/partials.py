"""Concurrent loading of the configured partial templates."""

import asyncio
from collections.abc import Mapping

from fastapi_view.loader import TemplateLoader
from fastapi_view.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


class PartialResolver:
    """Loads every partial of a partials mapping, all or nothing."""

    def __init__(self, loader: TemplateLoader):
        self.loader = loader

    async def resolve_all(self, partials: Mapping[str, str], requested_path: str | None = None) -> dict[str, str]:
        """Load all partials concurrently.

        Waits for every load to settle before reporting, so a failure never
        leaves reads in flight. Partial paths are used as given.

        Args:
            partials: Partial name -> path relative to the template root
            requested_path: Request path, used for minifier exclusion

        Returns:
            Partial name -> template source

        Raises:
            ReadError: The first failed load, in mapping order
        """
        if not partials:
            return {}

        names = list(partials)
        results = await asyncio.gather(
            *(self.loader.read(partials[name], requested_path) for name in names),
            return_exceptions=True,
        )

        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                log_with_context(
                    logger,
                    "warning",
                    "Failed to resolve partial",
                    partial=name,
                    path=partials[name],
                    error=str(result),
                    error_type=type(result).__name__,
                    event_type="partial_error",
                )
                raise result

        log_with_context(
            logger,
            "debug",
            "Partials resolved",
            partials=names,
            event_type="partials_resolved",
        )
        return dict(zip(names, results, strict=True))
