"""
Plain-text report of found cycles.
"""
import sys
from typing import Dict, List, Mapping, Optional, TextIO

from .currencies import currency_name
from .cycle_finder import Cycle
from .utils import get_terminal_colors

SEPARATOR = "---------"


def format_cycle(cycle: Cycle, currencies: Mapping[int, str], colors: Dict[str, str]) -> str:
    """Format one cycle as a block of steps followed by its profit."""
    lines = [f"{colors['DIM']}{SEPARATOR}{colors['RESET']}"]
    for step, hop in enumerate(cycle.hops):
        line = (
            f"Step {step}: {colors['CYAN']}{currency_name(hop.currency_id, currencies)}{colors['RESET']} "
            f"@ {colors['GREEN']}{hop.amount}{colors['RESET']}"
        )
        if step > 0:
            line += f" (from {hop.counterparty})"
        lines.append(line)
    
    profit_color = colors['YELLOW'] if cycle.is_profitable else colors['RED']
    lines.append(f"Profit: {profit_color}{cycle.profit:+d}{colors['RESET']}")
    return "\n".join(lines)


def format_cycles(
    cycles: List[Cycle],
    currencies: Mapping[int, str],
    colors: Optional[Dict[str, str]] = None
) -> str:
    """
    Format all cycles in discovery order.
    
    Args:
        cycles: Cycles found by a search run
        currencies: Registry used to name currencies
        colors: Color codes (default: get_terminal_colors())
    """
    if colors is None:
        colors = get_terminal_colors()
    
    if not cycles:
        return "No cycles found"
    
    return "\n".join(format_cycle(cycle, currencies, colors) for cycle in cycles)


def format_currency_summary(currencies: Mapping[int, str]) -> str:
    """List every currency name once, in registry order."""
    names = list(dict.fromkeys(currencies.values()))
    return "\n".join(names)


def print_report(
    cycles: List[Cycle],
    currencies: Mapping[int, str],
    stream: Optional[TextIO] = None
) -> None:
    """Write the cycle report to stdout (or the given stream)."""
    print(format_cycles(cycles, currencies), file=stream or sys.stdout)
