"""
ABI and Network Resolution Tests
"""

import json
import pytest
from loguru import logger

from powerchain.abi import (
    DEFAULT_CONTRACTS,
    FALLBACK_NETWORK,
    get_erc20_abi,
    get_erc20_contract_address,
    get_powerchain_registry_abi,
    get_powerchain_registry_address,
    get_registry_output_names,
)
from powerchain.networks import get_network_name, list_network_names


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv('POWERCHAIN_ERC20_ADDRESS', raising=False)
    monkeypatch.delenv('POWERCHAIN_REGISTRY_ADDRESS', raising=False)
    monkeypatch.setenv('POWERCHAIN_ARTIFACTS_DIR', str(tmp_path))


@pytest.fixture
def warnings_logged():
    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


def _function_names(abi):
    return {entry['name'] for entry in abi if entry.get('type') == 'function'}


class TestNetworks:
    """Chain id to network name"""

    def test_known_networks(self):
        assert get_network_name('1') == 'main'
        assert get_network_name('3') == 'ropsten'

    def test_integer_version(self):
        assert get_network_name(1) == 'main'

    def test_unknown_network(self):
        assert get_network_name('42') is None
        assert get_network_name(None) is None

    def test_list_network_names(self):
        assert set(list_network_names()) == {'main', 'ropsten'}


class TestAddresses:
    """Per-network contract addresses"""

    def test_main_addresses(self):
        assert get_erc20_contract_address('main') == DEFAULT_CONTRACTS['main']['erc20']
        assert get_powerchain_registry_address('main') == DEFAULT_CONTRACTS['main']['registry']

    def test_unknown_network_uses_fallback(self):
        fallback = DEFAULT_CONTRACTS[FALLBACK_NETWORK]

        assert get_erc20_contract_address(None) == fallback['erc20']
        assert get_powerchain_registry_address('kovan') == fallback['registry']

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv('POWERCHAIN_ERC20_ADDRESS', '0x' + '55' * 20)
        monkeypatch.setenv('POWERCHAIN_REGISTRY_ADDRESS', '0x' + '66' * 20)

        assert get_erc20_contract_address('main') == '0x' + '55' * 20
        assert get_powerchain_registry_address('ropsten') == '0x' + '66' * 20

    def test_main_placeholder_addresses_warn(self, warnings_logged):
        get_erc20_contract_address('main')

        assert any('placeholder' in message for message in warnings_logged)

    def test_override_does_not_warn(self, monkeypatch, warnings_logged):
        monkeypatch.setenv('POWERCHAIN_ERC20_ADDRESS', '0x' + '55' * 20)

        get_erc20_contract_address('main')

        assert warnings_logged == []


class TestAbis:
    """Built-in and artifact ABIs"""

    def test_minimal_erc20_abi(self):
        names = _function_names(get_erc20_abi('main'))

        assert {'mint', 'approve', 'balanceOf', 'allowance'} <= names

    def test_minimal_registry_abi(self):
        names = _function_names(get_powerchain_registry_abi('main'))

        assert {
            'registerChain', 'getChainStaticDetails', 'getChainDynamicDetails',
            'getUserDetails', 'requestVestInChain', 'confirmVestInChain',
            'requestDepositInChain', 'confirmDepositWithdrawalFromChain',
            'startMining', 'stopMining'
        } <= names

    def test_register_chain_takes_twelve_arguments(self):
        register = next(
            entry for entry in get_powerchain_registry_abi()
            if entry.get('name') == 'registerChain'
        )

        assert len(register['inputs']) == 12

    def test_artifact_abi_preferred(self, tmp_path):
        artifact_dir = tmp_path / 'LitERC20.sol'
        artifact_dir.mkdir()
        abi = [{'type': 'function', 'name': 'burn', 'inputs': [], 'outputs': []}]
        (artifact_dir / 'LitERC20.json').write_text(json.dumps({'abi': abi}))

        assert get_erc20_abi() == abi
        assert 'getUserDetails' in _function_names(get_powerchain_registry_abi())

    def test_registry_output_names(self):
        assert get_registry_output_names('getUserDetails') == ['deposit', 'vesting', 'mining']
        assert get_registry_output_names('getChainDynamicDetails')[1] == 'totalVesting'
        assert get_registry_output_names('unknownRead') == []


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
