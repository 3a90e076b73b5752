"""
Tests for StubServer CLI

Tests argument parsing and startup failures:
- Usage errors
- Single-dash option forms (-ip, -port, ...)
- Log sink and stub-definition failures
"""

import logging
from unittest.mock import patch

import pytest

from stubserver import cli
from stubserver.cli import main, parse_config
from stubserver.errors import StartupUsageError
from stubserver.logging_setup import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach handlers main() installs on the package logger."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestParseConfig:
    """Test argument parsing."""

    def test_no_arguments(self):
        with pytest.raises(StartupUsageError):
            parse_config([])

    def test_missing_config(self):
        with pytest.raises(StartupUsageError):
            parse_config(['--port', '9000'])

    def test_defaults(self):
        config = parse_config(['--config', 'stubs.yaml'])

        assert config.config_file == 'stubs.yaml'
        assert config.host == 'localhost'
        assert config.port == 8080
        assert config.output_file == 'output.log'
        assert config.verbose is False

    def test_single_dash_forms(self):
        config = parse_config([
            '-ip', '0.0.0.0', '-port', '9000', '-config', 'stubs.yaml',
            '-output', 'run.log', '-verbose', 'true'
        ])

        assert config.host == '0.0.0.0'
        assert config.port == 9000
        assert config.output_file == 'run.log'
        assert config.verbose is True

    @pytest.mark.parametrize('argv, expected', [
        (['--verbose'], True),
        (['--verbose', 'false'], False),
        (['-verbose=true'], True),
        ([], False),
    ])
    def test_verbose_values(self, argv, expected):
        assert parse_config(['--config', 'stubs.yaml'] + argv).verbose is expected

    def test_bad_verbose_value(self):
        with pytest.raises(SystemExit):
            parse_config(['--config', 'stubs.yaml', '--verbose', 'maybe'])

    def test_port_range(self):
        with pytest.raises(StartupUsageError):
            parse_config(['--config', 'stubs.yaml', '--port', '70000'])

    def test_match_query_string(self):
        config = parse_config(['--config', 'stubs.yaml', '--match-query-string', '--max-body-bytes', '1024'])

        assert config.match_query_string is True
        assert config.max_body_bytes == 1024


class TestMain:
    """Test the entry point."""

    def test_usage_error_exit_code(self, capsys):
        assert main([]) == 2

        err = capsys.readouterr().err
        assert 'Usage:' in err

    def test_log_sink_error(self, tmp_path, config_file, capsys):
        output = tmp_path / 'no-such-dir' / 'out.log'

        assert main(['--config', str(config_file), '--output', str(output)]) == 1
        assert 'Cannot open log file' in capsys.readouterr().err

    def test_config_error_aborts(self, tmp_path, capsys):
        output = tmp_path / 'out.log'

        code = main(['--config', str(tmp_path / 'missing.yaml'), '--output', str(output)])

        assert code == 1
        assert 'Failed to load stub definitions' in capsys.readouterr().err
        assert 'Failed to load stub definitions' in output.read_text()

    def test_starts_server(self, tmp_path, config_file):
        output = tmp_path / 'out.log'

        with patch.object(cli.StubServer, 'start') as start:
            code = main(['--config', str(config_file), '--output', str(output), '--verbose'])

        assert code == 0
        start.assert_called_once_with()
        log_text = output.read_text()
        assert 'Command arguments' in log_text
        assert 'Loaded 3 routes' in log_text
