"""
System Check Tests
"""

import json
import pytest

from scripts import check_system


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.delenv('POWERCHAIN_RPC_URL', raising=False)
    monkeypatch.setenv('POWERCHAIN_ARTIFACTS_DIR', str(tmp_path))


class TestChecks:
    """Individual checks without a node"""

    def test_missing_rpc_url(self):
        assert check_system.check_environment_variables() is False
        assert check_system.check_rpc_connection() is False
        assert check_system.check_contract_deployment() is False

    def test_rpc_url_configured(self, monkeypatch):
        monkeypatch.setenv('POWERCHAIN_RPC_URL', 'http://127.0.0.1:8545')

        assert check_system.check_environment_variables() is True

    def test_artifacts_reported(self, tmp_path):
        artifact_dir = tmp_path / 'LitERC20.sol'
        artifact_dir.mkdir()
        (artifact_dir / 'LitERC20.json').write_text(json.dumps({'abi': []}))

        assert check_system.check_artifacts() is True

    def test_main_fails_without_node(self):
        assert check_system.main() == 1


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
