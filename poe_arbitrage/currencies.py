"""
Static registry of tradeable currencies on currency.poe.trade.
"""
from typing import Dict, Mapping, Optional


# currency.poe.trade ids -> display names.
# Some names appear twice (legacy ids); lookups by name take the first entry.
DEFAULT_CURRENCIES: Dict[int, str] = {
    1: "alteration",
    2: "fusing",
    3: "alchemy",
    4: "chaos",
    6: "exalted",
    7: "chromatic",
    8: "jewellers",
    9: "chance",
    10: "chisel",
    11: "scouring",
    12: "blessed",
    13: "regret",
    14: "regal",
    16: "vaal",
    17: "wisdom",
    18: "portal",
    19: "armorer",
    20: "whetstone",
    21: "glassblower",
    22: "alteration",
    23: "chance",
    35: "silver",
    27: "sacrifice_at_dusk",
    28: "sacrifice_at_midnight",
    29: "sacrifice_at_dawn",
    30: "sacrifice_at_noon",
}


def build_registry(extra: Optional[Mapping] = None) -> Dict[int, str]:
    """
    Build a currency registry from the defaults plus caller-supplied entries.
    
    Args:
        extra: Optional mapping of id -> name (ids may be strings, as read from JSON)
    
    Returns:
        New dictionary; extra entries override defaults with the same id
    """
    registry = dict(DEFAULT_CURRENCIES)
    for currency_id, name in (extra or {}).items():
        try:
            registry[int(currency_id)] = str(name)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid currency id in registry: {currency_id!r}")
    return registry


def resolve_currency(name: str, currencies: Mapping[int, str]) -> Optional[int]:
    """Return the first currency id whose name matches, or None."""
    wanted = name.strip().lower()
    for currency_id, currency_name in currencies.items():
        if currency_name.lower() == wanted:
            return currency_id
    return None


def currency_name(currency_id: int, currencies: Mapping[int, str]) -> str:
    """Display name for an id, falling back to the raw id."""
    return currencies.get(currency_id, f"#{currency_id}")
