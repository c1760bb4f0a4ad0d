"""
Contract ABIs and Addresses
Resolves the LIT token and PowerChain registry bindings for a network
"""

import os
import json
from typing import Dict, List, Optional
from loguru import logger
from dotenv import load_dotenv

load_dotenv()

ZERO_ADDRESS = '0x0000000000000000000000000000000000000000'

ERC20_CONTRACT_NAME = 'LitERC20'
REGISTRY_CONTRACT_NAME = 'PowerChainRegistry'

# Networks without their own deployment use the testnet contracts
FALLBACK_NETWORK = 'ropsten'

# Placeholder addresses, not real deployments. Set POWERCHAIN_ERC20_ADDRESS and
# POWERCHAIN_REGISTRY_ADDRESS to the deployed contracts before sending transactions.
DEFAULT_CONTRACTS: Dict[str, Dict[str, str]] = {
    'main': {
        'erc20': '0x5e2a1a3bbb6e2b8c2e6bd0cd5cb2cbf3d0f95c4f',
        'registry': '0x7d4e6e5f2a1b9c3a0b8f2a7c6d1e4f0b3c9a8e21',
    },
    'ropsten': {
        'erc20': '0x2a1c3f0e8d7b6a5948372615f4e3d2c1b0a99887',
        'registry': '0x9f8e7d6c5b4a39281706f5e4d3c2b1a098765432',
    },
}


def _uint(name: str) -> Dict:
    return {'name': name, 'type': 'uint256'}


def _fn(name: str, inputs: List[Dict], outputs: List[Dict], mutability: str) -> Dict:
    return {
        'inputs': inputs,
        'name': name,
        'outputs': outputs,
        'stateMutability': mutability,
        'type': 'function'
    }


def _get_minimal_erc20_abi() -> List[Dict]:
    """
    Minimal ABI for the LIT token
    Used when compiled artifacts are not available
    """
    return [
        _fn('mint', [{'name': 'to', 'type': 'address'}, _uint('amount')], [], 'nonpayable'),
        _fn(
            'approve',
            [{'name': 'spender', 'type': 'address'}, _uint('amount')],
            [{'name': '', 'type': 'bool'}],
            'nonpayable'
        ),
        _fn(
            'transfer',
            [{'name': 'to', 'type': 'address'}, _uint('amount')],
            [{'name': '', 'type': 'bool'}],
            'nonpayable'
        ),
        _fn('balanceOf', [{'name': 'account', 'type': 'address'}], [_uint('')], 'view'),
        _fn(
            'allowance',
            [{'name': 'owner', 'type': 'address'}, {'name': 'spender', 'type': 'address'}],
            [_uint('')],
            'view'
        ),
        _fn('decimals', [], [{'name': '', 'type': 'uint8'}], 'view'),
    ]


def _get_minimal_registry_abi() -> List[Dict]:
    """
    Minimal ABI for the PowerChain registry
    Used when compiled artifacts are not available
    """
    chain_id = _uint('chainId')

    return [
        _fn(
            'registerChain',
            [
                {'name': 'description', 'type': 'string'},
                {'name': 'initEndpoint', 'type': 'string'},
                {'name': 'chainValidator', 'type': 'address'},
                _uint('minRequiredDeposit'),
                _uint('minRequiredVesting'),
                _uint('rewardBonusRequiredVesting'),
                _uint('rewardBonusPercentage'),
                _uint('notaryPeriod'),
                _uint('maxNumOfValidators'),
                _uint('maxNumOfTransactors'),
                {'name': 'involvedVestingNotaryCond', 'type': 'bool'},
                {'name': 'participationNotaryCond', 'type': 'bool'},
            ],
            [],
            'nonpayable'
        ),
        _fn(
            'getChainStaticDetails',
            [chain_id],
            [
                {'name': 'description', 'type': 'string'},
                {'name': 'creator', 'type': 'address'},
                {'name': 'validator', 'type': 'address'},
                _uint('minRequiredDeposit'),
                _uint('minRequiredVesting'),
                _uint('rewardBonusRequiredVesting'),
                _uint('rewardBonusPercentage'),
                _uint('notaryPeriod'),
                _uint('maxNumOfValidators'),
                _uint('maxNumOfTransactors'),
                {'name': 'involvedVestingNotaryCond', 'type': 'bool'},
                {'name': 'participationNotaryCond', 'type': 'bool'},
            ],
            'view'
        ),
        _fn(
            'getChainDynamicDetails',
            [chain_id],
            [
                {'name': 'active', 'type': 'bool'},
                _uint('totalVesting'),
                _uint('validatorsCount'),
                _uint('transactorsCount'),
                _uint('lastNotaryBlock'),
                _uint('lastNotaryTimestamp'),
            ],
            'view'
        ),
        _fn(
            'getUserDetails',
            [chain_id, {'name': 'user', 'type': 'address'}],
            [
                _uint('deposit'),
                _uint('vesting'),
                {'name': 'mining', 'type': 'bool'},
            ],
            'view'
        ),
        _fn('requestVestInChain', [chain_id, _uint('vesting')], [], 'nonpayable'),
        _fn('confirmVestInChain', [chain_id], [], 'nonpayable'),
        _fn('requestDepositInChain', [chain_id, _uint('deposit')], [], 'nonpayable'),
        _fn('confirmDepositWithdrawalFromChain', [chain_id], [], 'nonpayable'),
        _fn('startMining', [chain_id], [], 'nonpayable'),
        _fn('stopMining', [chain_id], [], 'nonpayable'),
    ]


def _artifacts_dir() -> str:
    return os.getenv('POWERCHAIN_ARTIFACTS_DIR', 'artifacts/contracts')


def _load_artifact_abi(contract_name: str) -> Optional[List[Dict]]:
    """Load an ABI from compiled artifacts, or None if not built"""
    abi_path = os.path.join(_artifacts_dir(), f"{contract_name}.sol", f"{contract_name}.json")

    if not os.path.exists(abi_path):
        return None

    with open(abi_path, 'r') as f:
        contract_json = json.load(f)

    logger.debug(f"Loaded {contract_name} ABI from {abi_path}")
    return contract_json['abi']


def _network_contracts(network: Optional[str]) -> Dict[str, str]:
    if network in DEFAULT_CONTRACTS:
        if network == 'main':
            logger.warning(
                "Using placeholder main network contract addresses - set "
                "POWERCHAIN_ERC20_ADDRESS and POWERCHAIN_REGISTRY_ADDRESS"
            )
        return DEFAULT_CONTRACTS[network]

    logger.warning(f"No contracts configured for network {network!r} - using {FALLBACK_NETWORK}")
    return DEFAULT_CONTRACTS[FALLBACK_NETWORK]


def get_erc20_abi(network: Optional[str] = None) -> List[Dict]:
    """
    Get the LIT token ABI

    Args:
        network: Network name (the same ABI is deployed everywhere)

    Returns:
        ABI as a list of dicts
    """
    return _load_artifact_abi(ERC20_CONTRACT_NAME) or _get_minimal_erc20_abi()


def get_powerchain_registry_abi(network: Optional[str] = None) -> List[Dict]:
    """
    Get the PowerChain registry ABI

    Args:
        network: Network name (the same ABI is deployed everywhere)

    Returns:
        ABI as a list of dicts
    """
    return _load_artifact_abi(REGISTRY_CONTRACT_NAME) or _get_minimal_registry_abi()


def get_erc20_contract_address(network: Optional[str] = None) -> str:
    """
    Get the LIT token address for a network
    POWERCHAIN_ERC20_ADDRESS overrides the network default
    """
    return os.getenv('POWERCHAIN_ERC20_ADDRESS') or _network_contracts(network)['erc20']


def get_powerchain_registry_address(network: Optional[str] = None) -> str:
    """
    Get the PowerChain registry address for a network
    POWERCHAIN_REGISTRY_ADDRESS overrides the network default
    """
    return os.getenv('POWERCHAIN_REGISTRY_ADDRESS') or _network_contracts(network)['registry']


def get_registry_output_names(function_name: str) -> List[str]:
    """
    Output names of a registry read in the built-in ABI

    Used to name results from ABIs that leave outputs unnamed.
    """
    for entry in _get_minimal_registry_abi():
        if entry.get('type') == 'function' and entry.get('name') == function_name:
            return [out['name'] for out in entry.get('outputs', [])]
    return []
