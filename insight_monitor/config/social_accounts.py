"""
Static list of well-known finance accounts used when nothing is tracked.

The acquisition cycle samples a few of these when the social_accounts
table is empty, so a fresh deployment still has something to show.
Override via SOCIAL_FALLBACK_HANDLES (comma-separated).
"""

# Market news and data
NEWS_ACCOUNTS = [
    "WSJmarkets",        # Wall Street Journal markets desk
    "ReutersBiz",        # Reuters business news
    "CNBC",              # CNBC
    "business",          # Bloomberg
    "FT",                # Financial Times
]

# Macro and strategy commentators
STRATEGY_ACCOUNTS = [
    "elerianm",          # Mohamed El-Erian
    "LizAnnSonders",     # Schwab chief investment strategist
    "charliebilello",    # Compound Capital
    "MorganStanley",     # Morgan Stanley research
]

# Market-moving flow
MARKET_ACCOUNTS = [
    "unusual_whales",    # Unusual options activity
    "StockMKTNewz",      # Market news aggregator
    "DeItaone",          # Breaking financial news
]

DEFAULT_FALLBACK_HANDLES = NEWS_ACCOUNTS + STRATEGY_ACCOUNTS + MARKET_ACCOUNTS


def get_default_handles() -> list[str]:
    """
    Get the default fallback handles.

    Returns:
        List of handles (without @ prefix)
    """
    return DEFAULT_FALLBACK_HANDLES.copy()


def normalize_handle(handle: str) -> str:
    """Strip whitespace and a leading @ from a handle."""
    return handle.strip().lstrip("@")


def parse_handles(handles_str: str | None) -> list[str]:
    """
    Parse comma-separated handles string into a list.

    Args:
        handles_str: Comma-separated handles (e.g., "user1,@user2")

    Returns:
        List of handles, or the default list if input is None/empty
    """
    if not handles_str:
        return get_default_handles()

    handles = [normalize_handle(h) for h in handles_str.split(",")]
    return [h for h in handles if h]
