"""Wiring of the bridge components."""

import logging
from dataclasses import dataclass

from .config import BridgeConfig
from .contacts import ContactsInterface
from .findmy import (
    AppController,
    DeviceCacheReader,
    FriendLocationCache,
    RefreshOrchestrator,
    RefreshTiming,
)
from .privateapi import HelperServer, PrivateApiFindMy, TransactionManager

logger = logging.getLogger(__name__)

LOCATION_EVENT = "new-findmy-location"


@dataclass
class Services:
    """Long-lived components shared by the HTTP routes."""

    config: BridgeConfig
    cache: FriendLocationCache
    reader: DeviceCacheReader
    helper: HelperServer
    orchestrator: RefreshOrchestrator
    contacts: ContactsInterface

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "Services":
        assert config.findmy_dir is not None
        assert config.helper_port is not None

        cache = FriendLocationCache()
        reader = DeviceCacheReader(config.findmy_dir)
        helper = HelperServer(
            host=config.helper_host,
            port=config.helper_port,
            transactions=TransactionManager(timeout=config.rpc_timeout),
        )
        app = AppController(
            app_name=config.app_name,
            timing=RefreshTiming(
                after_quit=config.quit_delay,
                after_launch=config.launch_delay,
                after_show=config.show_delay,
            ),
        )
        orchestrator = RefreshOrchestrator(
            cache=cache,
            reader=reader,
            app=app,
            findmy_api=PrivateApiFindMy(helper),
            private_api_enabled=config.enable_private_api,
            private_api_supported=config.private_api_supported,
        )
        helper.on_event(LOCATION_EVENT, orchestrator.handle_location_event)

        return cls(
            config=config,
            cache=cache,
            reader=reader,
            helper=helper,
            orchestrator=orchestrator,
            contacts=ContactsInterface(helper, enabled=config.enable_contacts_private_api),
        )

    async def start(self) -> None:
        if self.config.enable_private_api or self.config.enable_contacts_private_api:
            await self.helper.start()
        else:
            logger.info("Private API disabled; not listening for the helper")

    async def stop(self) -> None:
        await self.helper.stop()
