"""
Wallet Provider
Protocol the client expects from a wallet, plus a node-backed implementation
"""

import asyncio
from typing import Callable, Dict, List, Optional, Protocol
from web3 import AsyncWeb3, Web3
from loguru import logger

ACCOUNTS_CHANGED = 'accountsChanged'


class Subscription(Protocol):
    """Handle returned by WalletProvider.on()"""

    def unsubscribe(self) -> None:
        ...


class WalletProvider(Protocol):
    """
    What ChainClient needs from a wallet

    network_version is the chain id as a string ('1' for mainnet).
    enable() asks the user to authorize accounts and returns them.
    on() registers an event handler and returns a Subscription.
    """

    network_version: Optional[str]
    is_metamask: bool

    async def enable(self) -> List[str]:
        ...

    def on(self, event: str, handler: Callable) -> Subscription:
        ...


class EventSubscription:
    """Registered handler that can remove itself from its provider"""

    def __init__(self, provider: 'NodeWalletProvider', event: str, handler: Callable):
        self.provider = provider
        self.event = event
        self.handler = handler
        self.active = True

    def unsubscribe(self):
        if self.active:
            self.provider.remove_listener(self.event, self.handler)
            self.active = False


class NodeWalletProvider:
    """
    Wallet provider backed by a node's unlocked accounts
    (Hardhat, Ganache, geth --dev)

    Account changes are detected by polling eth_accounts from watch_accounts().
    """

    is_metamask = False

    def __init__(self, w3: AsyncWeb3, network_version: Optional[str] = None):
        """
        Initialize Node Wallet Provider

        Args:
            w3: AsyncWeb3 instance connected to the node
            network_version: Chain id string as reported by net_version
        """
        self.w3 = w3
        self.network_version = network_version

        self.listeners: Dict[str, List[Callable]] = {}
        self.accounts: List[str] = []

        # Polling state
        self.running = False

        logger.info(f"Node wallet provider initialized (network version: {network_version})")

    @classmethod
    async def connect(cls, w3: AsyncWeb3) -> 'NodeWalletProvider':
        """Create a provider, reading the network version from the node"""
        network_version = await w3.net.version
        return cls(w3, str(network_version))

    async def enable(self) -> List[str]:
        """
        Return the node's unlocked accounts

        Returns:
            List of checksummed addresses (may be empty)
        """
        accounts = await self.w3.eth.accounts
        self.accounts = [Web3.to_checksum_address(a) for a in accounts]

        logger.debug(f"Node reports {len(self.accounts)} accounts")
        return list(self.accounts)

    def on(self, event: str, handler: Callable) -> EventSubscription:
        """
        Register an event handler

        Args:
            event: Event name (e.g. 'accountsChanged')
            handler: Called with the event payload

        Returns:
            Subscription handle
        """
        self.listeners.setdefault(event, []).append(handler)
        logger.debug(f"Handler registered for {event}")
        return EventSubscription(self, event, handler)

    def remove_listener(self, event: str, handler: Callable):
        handlers = self.listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(f"Handler removed for {event}")

    def emit(self, event: str, payload) -> int:
        """
        Dispatch an event to its handlers

        Returns:
            Number of handlers called
        """
        handlers = list(self.listeners.get(event, []))
        for handler in handlers:
            handler(payload)
        return len(handlers)

    async def poll_accounts(self) -> bool:
        """
        Compare the node's accounts with the last known list

        Returns:
            True if the list changed and accountsChanged was emitted
        """
        previous = self.accounts
        current = await self.enable()

        if current == previous:
            return False

        logger.info(f"Accounts changed: {previous[:1]} -> {current[:1]}")
        self.emit(ACCOUNTS_CHANGED, current)
        return True

    async def watch_accounts(self, poll_interval: float = 2.0):
        """
        Poll the node for account changes until stop() is called

        Args:
            poll_interval: Seconds between polls
        """
        self.running = True
        logger.info(f"Watching node accounts every {poll_interval}s")

        while self.running:
            await self.poll_accounts()
            await asyncio.sleep(poll_interval)

        logger.info("Account watcher stopped")

    def stop(self):
        """Stop the account watcher"""
        self.running = False
