from __future__ import annotations

import logging
from typing import Any

import httpx

from .collection import Collection
from .config import ClientConfig, Settings, get_settings
from .models import AccountModel, EventModel, RegionModel, VenueModel
from .transport import Transport

logger = logging.getLogger(__name__)


class TickeTing:
    """Entry point to the TickeTing API.

    ``api_key`` and ``sandbox`` default to the values in ``Settings``
    (``TICKETING_API_KEY`` / ``TICKETING_SANDBOX``).
    """

    def __init__(
        self,
        api_key: str | None = None,
        sandbox: bool | None = None,
        *,
        config: ClientConfig | None = None,
        settings: Settings | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        if config is None or api_key is None:
            settings = settings or get_settings()
        if config is None:
            config = settings.client_config()
        if sandbox is not None and sandbox != config.sandbox:
            config = config.model_copy(update={"sandbox": sandbox})

        api_key = api_key or (settings.api_key if settings else "")
        if not api_key:
            raise ValueError(
                "An API key is required. Pass api_key or set TICKETING_API_KEY."
            )

        self.config = config
        self.transport = Transport(config, api_key, http_transport=http_transport)

        page_size = config.default_page_size
        self.regions: Collection[RegionModel] = Collection(RegionModel, self.transport, page_size)
        self.venues: Collection[VenueModel] = Collection(VenueModel, self.transport, page_size)
        self.events: Collection[EventModel] = Collection(EventModel, self.transport, page_size)
        self.account: Collection[AccountModel] = Collection(AccountModel, self.transport, page_size)

        logger.info(
            f"Initialized TickeTing client (sandbox={config.sandbox}, "
            f"base_url={config.base_url})"
        )

    async def __aenter__(self) -> TickeTing:
        await self.transport.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    @property
    def sandbox(self) -> bool:
        return self.config.sandbox

    async def aclose(self) -> None:
        await self.transport.aclose()
        logger.info("Closed TickeTing client")


def create_ticketing_client(
    sandbox: bool = True,
    api_key: str | None = None,
) -> TickeTing:
    return TickeTing(api_key=api_key, sandbox=sandbox)
