"""
Tests for logging configuration.
"""
from unittest.mock import patch, MagicMock
from branchver.logging_config import setup_logging


class TestLoggingConfig:
    """Test logging configuration."""
    
    @patch('branchver.logging_config.logger')
    def test_setup_logging_default(self, mock_logger):
        """Test setup logging with default level."""
        setup_logging()
        
        mock_logger.remove.assert_called()
        mock_logger.add.assert_called()
        assert mock_logger.add.call_args[1]['level'] == 'INFO'
    
    @patch('branchver.logging_config.logger')
    def test_setup_logging_debug(self, mock_logger):
        """Test setup logging with DEBUG level."""
        setup_logging('DEBUG')
        
        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_args[1]['level'] == 'DEBUG'
    
    @patch('branchver.logging_config.logger')
    def test_setup_logging_with_console(self, mock_logger):
        """Test setup logging with console parameter."""
        mock_console = MagicMock()
        
        setup_logging('INFO', console=mock_console)
        
        mock_logger.remove.assert_called_once()
        sink = mock_logger.add.call_args[0][0]
        sink('message\n')
        mock_console.print.assert_called_once()
