"""Network detection from the wallet provider's reported chain id."""

from typing import Dict, Optional

# networkVersion string -> network name
NETWORKS: Dict[str, str] = {
    '1': 'main',
    '3': 'ropsten',
}


def get_network_name(network_version: Optional[str]) -> Optional[str]:
    """
    Resolve a provider's network version to a network name

    Unknown versions resolve to None rather than raising.
    """
    if network_version is None:
        return None

    return NETWORKS.get(str(network_version))


def list_network_names() -> list:
    """Return the names of all recognised networks"""
    return list(NETWORKS.values())
