"""
Tests for CLI functionality.
"""

import pytest
from unittest.mock import MagicMock, patch

from branchver.cli import (
    execute_command,
    main,
    parse_arguments,
    print_result,
    run_computation,
    setup_application,
)
from branchver.config import Config
from branchver.engine import ComputationResult
from branchver.errors import DetachedHeadError

RESULT = ComputationResult(
    branch_name='release/1.2',
    branch_prefix='release',
    branch_version='1.2',
    last_matching_version='1.2.3',
    version='1.2.4-release-alpha.0',
)


class TestArgumentParsing:
    """Test command-line argument parsing."""
    
    def test_parse_arguments_basic(self):
        args = parse_arguments(['--branch-name', 'release/1.2', '--tag-prefix', 'v', '--build-number', '42'])
        
        assert args.branch_name == 'release/1.2'
        assert args.tag_prefix == 'v'
        assert args.build_number == 42
    
    def test_flags_unset_by_default(self):
        """Test that unset flags stay None so env vars can apply."""
        args = parse_arguments([])
        
        assert args.pre is None
        assert args.no_increment is None
        assert args.json is False
    
    def test_flags_set(self):
        args = parse_arguments(['--pre', '--suffix', 'alpha', '--no-increment', '--json'])
        
        assert args.pre is True
        assert args.suffix == 'alpha'
        assert args.no_increment is True
        assert args.json is True
    
    def test_parse_arguments_help(self):
        with pytest.raises(SystemExit):
            parse_arguments(['--help'])
    
    def test_invalid_build_number(self):
        with pytest.raises(SystemExit):
            parse_arguments(['--build-number', 'abc'])


class TestPrintResult:
    """Test result output."""
    
    @patch('branchver.cli.stdout_console')
    def test_text_output(self, mock_console):
        print_result(RESULT)
        
        messages = [call.args[0] for call in mock_console.print.call_args_list]
        assert "Branch name is 'release/1.2'" in messages
        assert "Branch prefix is 'release'" in messages
        assert "Branch version is '1.2'" in messages
        assert "Last matching version is '1.2.3'" in messages
        assert "Computed version is '1.2.4-release-alpha.0'" in messages
    
    @patch('branchver.cli.stdout_console')
    def test_json_output(self, mock_console):
        print_result(RESULT, as_json=True)
        
        mock_console.print_json.assert_called_once_with(data=RESULT.as_dict())
    
    @patch('branchver.cli.logger')
    def test_text_output_bypasses_logger(self, mock_logger, capsys):
        """Test that the result block reaches stdout whatever the log level."""
        print_result(RESULT)
        
        mock_logger.info.assert_not_called()
        out = capsys.readouterr().out
        assert "Computed version is '1.2.4-release-alpha.0'" in out
        assert "Branch name is 'release/1.2'" in out


class TestExecuteCommand:
    """Test the post-computation command."""
    
    @patch('branchver.cli.subprocess.run')
    def test_environment_injected(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        
        assert execute_command('npm version $BRANCHVER_VERSION', RESULT, '/repo') == 0
        
        args, kwargs = mock_run.call_args
        assert args[0] == 'npm version $BRANCHVER_VERSION'
        assert kwargs['shell'] is True
        assert kwargs['cwd'] == '/repo'
        assert kwargs['env']['BRANCHVER_VERSION'] == '1.2.4-release-alpha.0'
        assert kwargs['env']['BRANCHVER_BRANCH_PREFIX'] == 'release'
    
    @patch('branchver.cli.subprocess.run')
    def test_exit_code_returned(self, mock_run):
        mock_run.return_value = MagicMock(returncode=3)
        
        assert execute_command('false', RESULT) == 3
    
    @patch('branchver.cli.subprocess.run')
    def test_spawn_failure(self, mock_run):
        mock_run.side_effect = OSError('no shell')
        
        assert execute_command('anything', RESULT) == 1


class TestSetupApplication:
    """Test application setup."""
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.load_config')
    def test_log_level_applied(self, mock_load_config, mock_setup_logging):
        mock_load_config.return_value = Config(log_level='DEBUG')
        
        args, config = setup_application(['--log-level', 'debug'])
        
        assert config.log_level == 'DEBUG'
        levels = [call.args[0] for call in mock_setup_logging.call_args_list if call.args]
        assert 'DEBUG' in levels
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.load_config')
    def test_invalid_config(self, mock_load_config, mock_setup_logging):
        mock_load_config.return_value = None
        
        args, config = setup_application([])
        
        assert config is None


class TestMain:
    """Test the main entry point."""
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.run')
    def test_success(self, mock_run, mock_setup_logging):
        mock_run.return_value = RESULT
        
        with patch.dict('os.environ', {}, clear=True):
            assert main(['--branch-name', 'release/1.2', '--ignore-branch-prefix', 'release/']) == 0
        
        config = mock_run.call_args[0][0]
        assert config.branch_name == 'release/1.2'
        assert config.ignore_branch_prefix == 'release/'
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.run')
    def test_configuration_error_exit_code(self, mock_run, mock_setup_logging):
        with patch.dict('os.environ', {}, clear=True):
            assert main(['--pre']) == 1
        
        mock_run.assert_not_called()
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.run')
    def test_engine_error_exit_code(self, mock_run, mock_setup_logging):
        mock_run.side_effect = DetachedHeadError('HEAD is detached')
        
        with patch.dict('os.environ', {}, clear=True):
            assert main([]) == 1
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.subprocess.run')
    @patch('branchver.cli.run')
    def test_execute_exit_code(self, mock_run, mock_subprocess_run, mock_setup_logging):
        mock_run.return_value = RESULT
        mock_subprocess_run.return_value = MagicMock(returncode=5)
        
        with patch.dict('os.environ', {'PATH': '/usr/bin'}, clear=True):
            assert main(['--execute', 'make release']) == 5
        
        env = mock_subprocess_run.call_args[1]['env']
        assert env['BRANCHVER_VERSION'] == RESULT.version
        assert env['PATH'] == '/usr/bin'
    
    @patch('branchver.cli.setup_logging')
    @patch('branchver.cli.subprocess.run')
    @patch('branchver.cli.run')
    def test_execute_skipped_on_failure(self, mock_run, mock_subprocess_run, mock_setup_logging):
        mock_run.side_effect = DetachedHeadError('HEAD is detached')
        
        with patch.dict('os.environ', {}, clear=True):
            assert main(['--execute', 'make release']) == 1
        
        mock_subprocess_run.assert_not_called()


class TestRunComputation:
    @patch('branchver.cli.run')
    def test_error_logged(self, mock_run):
        mock_run.side_effect = DetachedHeadError('HEAD is detached')
        
        with patch('branchver.cli.logger') as mock_logger:
            assert run_computation(Config()) is None
        
        assert 'Processing failed' in mock_logger.error.call_args[0][0]
