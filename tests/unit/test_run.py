"""Unit tests for the stack entry point."""
from unittest.mock import patch

import run
from chain_indexer.errors import ConfigurationError


def test_configuration_error_exits_with_failure():
    """Test that a bad setting is logged and returns exit code 1."""
    error = ConfigurationError("EXTRACTION_VOLUME_SIZE must be an integer, got 'ten'")
    with patch('run.load_infrastructure_config', side_effect=error):
        with patch.object(run.logger, 'error') as log_error:
            assert run.main() == 1

    log_error.assert_called_once()
    assert "EXTRACTION_VOLUME_SIZE" in log_error.call_args[0][0]


def test_credentials_error_exits_with_failure():
    """Test that an unresolved account is logged and returns exit code 1."""
    with patch('run.resolve_environment', side_effect=ConfigurationError("no credentials")):
        with patch('run.load_infrastructure_config') as load_config:
            load_config.return_value.debug_mode = False
            assert run.main() == 1
