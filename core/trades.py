# =============================================================================
# Crew Trades and Classification
# =============================================================================

import re
from typing import Optional
from models.constants import (
    OFFSHORE_POST_MARKER, ESCORT_POST_MARKER, OFFICE_POST_MARKERS, CLIENT_ORDER
)
from models.data_models import TradeClass

TRADE_FULL_NAMES = {
    TradeClass.OFFSHORE: "OFFSHORE MEDIC",
    TradeClass.ESCORT: "ESCORT MEDIC",
    TradeClass.OFFICE: "IMP / OHN",
}

TRADE_SHORT_CODES = {
    TradeClass.OFFSHORE: "OM",
    TradeClass.ESCORT: "EM",
    TradeClass.OFFICE: "OHN",
}

TRADE_RANKS = {
    TradeClass.OFFSHORE: 1,
    TradeClass.ESCORT: 2,
    TradeClass.OFFICE: 3,
    TradeClass.OTHER: 4,
}

_WORD = re.compile(r"[A-Z0-9]+")

def _has_office_marker(up: str) -> bool:
    return any(word in OFFICE_POST_MARKERS for word in _WORD.findall(up))

def get_trade_class(post: Optional[str]) -> TradeClass:
    """
    Classify a free-text post into a trade class.
    Offshore and escort markers win over the office markers.
    """
    up = (post or "").upper()
    if OFFSHORE_POST_MARKER in up:
        return TradeClass.OFFSHORE
    if ESCORT_POST_MARKER in up:
        return TradeClass.ESCORT
    if _has_office_marker(up):
        return TradeClass.OFFICE
    return TradeClass.OTHER

def is_offshore_trade(post: Optional[str]) -> bool:
    return get_trade_class(post) == TradeClass.OFFSHORE

def is_escort_trade(post: Optional[str]) -> bool:
    return get_trade_class(post) == TradeClass.ESCORT

def is_office_staff(post: Optional[str]) -> bool:
    """
    Check if a post is office-based (IMP / OHN).
    Matches the marker words so office staff are recognised whatever the post spelling.
    """
    return _has_office_marker((post or "").upper())

def get_full_trade_name(post: Optional[str]) -> str:
    trade = get_trade_class(post)
    return TRADE_FULL_NAMES.get(trade, post or "")

def get_trade_short_code(post: Optional[str]) -> str:
    trade = get_trade_class(post)
    return TRADE_SHORT_CODES.get(trade, post or "")

def get_trade_rank(post: Optional[str]) -> int:
    return TRADE_RANKS[get_trade_class(post)]

def get_client_rank(client: Optional[str]) -> int:
    return CLIENT_ORDER.get(client or "", len(CLIENT_ORDER) + 1)

def matches_trade_filter(post: Optional[str], trade: Optional[str]) -> bool:
    """
    Check a post against a trade filter given as a TradeClass, its value,
    or a short code ("OM", "EM", "OHN", "IMP/OHN"). None or "ALL" matches everything.
    """
    if trade is None:
        return True
    if isinstance(trade, TradeClass):
        return get_trade_class(post) == trade

    wanted = str(trade).strip().upper()
    if wanted in ("", "ALL"):
        return True
    if wanted == "OM":
        return is_offshore_trade(post)
    if wanted == "EM":
        return is_escort_trade(post)
    if wanted in ("OHN", "IMP/OHN"):
        return is_office_staff(post)
    try:
        return get_trade_class(post) == TradeClass(wanted.lower())
    except ValueError:
        return False
