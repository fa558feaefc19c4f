"""
Utility functions for the currency cycle finder.
"""
import logging
import sys
from typing import Dict, Optional


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_terminal_colors() -> Dict[str, str]:
    """
    Get ANSI color codes for terminal output.
    
    Returns empty strings if output is not a TTY (e.g., piped into a file),
    so saved reports stay free of escape codes.
    
    Returns:
        Dictionary with color codes: GREEN, CYAN, YELLOW, RED, DIM, RESET
    """
    use_color = sys.stdout.isatty()
    return {
        'GREEN': '\033[92m' if use_color else '',   # Amounts
        'CYAN': '\033[96m' if use_color else '',    # Currency names and traders
        'YELLOW': '\033[93m' if use_color else '',  # Profit
        'RED': '\033[91m' if use_color else '',     # Losses and errors
        'DIM': '\033[90m' if use_color else '',     # Separators, cache chatter
        'RESET': '\033[0m' if use_color else ''
    }


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> None:
    """
    Configure root logging for a run.
    
    Log lines go to stderr so that the cycle report on stdout stays clean.
    
    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        log_file: Optional path of an additional log file
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
