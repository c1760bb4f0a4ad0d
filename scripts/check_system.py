"""
System Check Script
Verifies node connection and contract deployment before running the client

Run from the repository root with `python -m scripts.check_system`, or as
`powerchain-check` after `pip install -e .`
"""

import os
import sys
from web3 import Web3
from loguru import logger
from dotenv import load_dotenv

from powerchain.abi import (
    ERC20_CONTRACT_NAME,
    REGISTRY_CONTRACT_NAME,
    get_erc20_contract_address,
    get_powerchain_registry_address,
)
from powerchain.networks import get_network_name

load_dotenv()


def _connect():
    rpc_url = os.getenv('POWERCHAIN_RPC_URL')
    if not rpc_url:
        return None
    return Web3(Web3.HTTPProvider(rpc_url))


def check_environment_variables():
    """Check if the node endpoint is configured"""
    logger.info("Checking environment variables...")

    if not os.getenv('POWERCHAIN_RPC_URL'):
        logger.error("Missing environment variable: POWERCHAIN_RPC_URL")
        return False

    for var in ('POWERCHAIN_ERC20_ADDRESS', 'POWERCHAIN_REGISTRY_ADDRESS'):
        if os.getenv(var):
            logger.info(f"  {var} overrides the network default")

    logger.success("✓ Environment variables set")
    return True


def check_rpc_connection():
    """Check node connection and report the detected network"""
    logger.info("Checking RPC connection...")

    w3 = _connect()
    if w3 is None:
        logger.warning("No RPC URL - skipping connection check")
        return False

    try:
        if not w3.is_connected():
            logger.error("  ✗ Connection failed")
            return False

        network = get_network_name(w3.net.version)
        logger.success(f"  ✓ Connected (Block: {w3.eth.block_number}, network: {network})")
        return True
    except Exception as e:
        logger.error(f"  ✗ {e}")
        return False


def check_contract_deployment():
    """Check that both contracts have code at their addresses"""
    logger.info("Checking contract deployment...")

    w3 = _connect()
    if w3 is None:
        return False

    try:
        network = get_network_name(w3.net.version)
    except Exception as e:
        logger.error(f"  Error reading network version: {e}")
        return False

    contracts = {
        ERC20_CONTRACT_NAME: get_erc20_contract_address(network),
        REGISTRY_CONTRACT_NAME: get_powerchain_registry_address(network)
    }

    deployed = True
    for name, address in contracts.items():
        try:
            code = w3.eth.get_code(Web3.to_checksum_address(address))
            if code == b'' or code == '0x':
                logger.error(f"  ✗ No {name} contract at {address}")
                deployed = False
            else:
                logger.success(f"  ✓ {name} deployed at {address}")
        except Exception as e:
            logger.error(f"  Error checking {name}: {e}")
            deployed = False

    return deployed


def check_artifacts():
    """Report whether compiled ABIs are available"""
    logger.info("Checking contract artifacts...")

    artifacts_dir = os.getenv('POWERCHAIN_ARTIFACTS_DIR', 'artifacts/contracts')
    for name in (ERC20_CONTRACT_NAME, REGISTRY_CONTRACT_NAME):
        path = os.path.join(artifacts_dir, f"{name}.sol", f"{name}.json")
        if os.path.exists(path):
            logger.success(f"  ✓ {path}")
        else:
            logger.warning(f"  {name} artifact not found - built-in ABI will be used")

    return True


def main():
    """Run all system checks"""
    logger.info("=" * 70)
    logger.info("PowerChain System Check")
    logger.info("=" * 70)

    checks = [
        ("Environment Variables", check_environment_variables),
        ("RPC Connection", check_rpc_connection),
        ("Contract Deployment", check_contract_deployment),
        ("Contract Artifacts", check_artifacts)
    ]

    results = []

    for name, check_func in checks:
        logger.info("")
        try:
            result = check_func()
            results.append((name, result))
        except Exception as e:
            logger.error(f"Error in {name}: {e}")
            results.append((name, False))

    logger.info("")
    logger.info("=" * 70)
    logger.info("Summary")
    logger.info("=" * 70)

    passed = sum(1 for _, result in results if result)
    total = len(results)

    for name, result in results:
        status = "✓ PASS" if result else "✗ FAIL"
        logger.info(f"  {status}: {name}")

    logger.info("")
    logger.info(f"Total: {passed}/{total} checks passed")

    if passed == total:
        logger.success("✅ System ready")
        logger.info("Start client: python main.py")
        return 0

    logger.error("❌ System not ready - fix issues above")
    return 1


if __name__ == "__main__":
    sys.exit(main())
