"""
Node Wallet Provider Tests
"""

import pytest
from unittest.mock import MagicMock, Mock
from web3 import Web3

from powerchain import ChainClient, NoAccountsError, NodeWalletProvider
from powerchain.wallet_provider import ACCOUNTS_CHANGED

ACCOUNT = Web3.to_checksum_address('0x' + 'a1' * 20)
OTHER_ACCOUNT = Web3.to_checksum_address('0x' + 'b2' * 20)


class FakeEth:
    """AsyncWeb3 eth module exposing an awaitable accounts property"""

    def __init__(self, accounts):
        self.node_accounts = accounts

    @property
    def accounts(self):
        async def _accounts():
            return list(self.node_accounts)
        return _accounts()


class FakeNet:
    @property
    def version(self):
        async def _version():
            return '3'
        return _version()


@pytest.fixture
def node():
    node = Mock()
    node.eth = FakeEth([ACCOUNT.lower()])
    node.net = FakeNet()
    return node


@pytest.fixture
def provider(node):
    return NodeWalletProvider(node, '3')


class TestNodeWalletProvider:
    """Protocol behaviour of the node-backed wallet"""

    @pytest.mark.asyncio
    async def test_connect_reads_network_version(self, node):
        provider = await NodeWalletProvider.connect(node)

        assert provider.network_version == '3'
        assert provider.is_metamask is False

    @pytest.mark.asyncio
    async def test_enable_checksums_accounts(self, provider):
        assert await provider.enable() == [ACCOUNT]

    def test_emit_and_unsubscribe(self, provider):
        received = []
        subscription = provider.on(ACCOUNTS_CHANGED, received.append)

        assert provider.emit(ACCOUNTS_CHANGED, [OTHER_ACCOUNT]) == 1

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert provider.emit(ACCOUNTS_CHANGED, [ACCOUNT]) == 0
        assert received == [[OTHER_ACCOUNT]]

    @pytest.mark.asyncio
    async def test_poll_emits_only_on_change(self, provider, node):
        received = []
        provider.on(ACCOUNTS_CHANGED, received.append)

        await provider.enable()
        assert await provider.poll_accounts() is False

        node.eth.node_accounts = [OTHER_ACCOUNT]
        assert await provider.poll_accounts() is True
        assert received == [[OTHER_ACCOUNT]]

    @pytest.mark.asyncio
    async def test_watch_accounts_until_stopped(self, provider, node):
        node.eth.node_accounts = [OTHER_ACCOUNT]
        provider.on(ACCOUNTS_CHANGED, lambda accounts: provider.stop())

        await provider.watch_accounts(poll_interval=0)

        assert provider.running is False
        assert provider.accounts == [OTHER_ACCOUNT]


class TestClientWithNodeWallet:
    """ChainClient following a node wallet's account changes"""

    @pytest.fixture
    def w3(self):
        w3 = MagicMock()
        w3.provider = Mock()
        return w3

    @pytest.mark.asyncio
    async def test_client_follows_polled_account_change(self, provider, node, w3):
        client = ChainClient(provider, w3)
        await client.login()

        assert client.get_network_name() == 'ropsten'
        assert client.account == ACCOUNT

        node.eth.node_accounts = [OTHER_ACCOUNT]
        await provider.poll_accounts()

        assert client.account == OTHER_ACCOUNT

    @pytest.mark.asyncio
    async def test_close_detaches_client(self, provider, node, w3):
        client = ChainClient(provider, w3)
        await client.login()
        client.close()

        node.eth.node_accounts = [OTHER_ACCOUNT]
        await provider.poll_accounts()

        assert client.account == ACCOUNT
        assert provider.listeners[ACCOUNTS_CHANGED] == []

    @pytest.mark.asyncio
    async def test_node_without_accounts(self, node, w3):
        node.eth.node_accounts = []
        client = ChainClient(NodeWalletProvider(node, '1'), w3)

        with pytest.raises(NoAccountsError):
            await client.login()


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
