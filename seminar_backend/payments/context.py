"""
Jeton de contexte embarqué dans la commande PayPal (purchase_units[0].custom_id).
Format: "<slug>|<sessionId>|<participantCount>", ex: "wset-2|42|3".
Le jeton est construit côté checkout (front); le backend ne fait que le relire.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

CONTEXT_SEPARATOR = "|"


@dataclass(frozen=True)
class OrderContext:
    slug: str
    session_id: int
    participant_count: Optional[int] = None


def parse_context_token(token: Optional[str]) -> Optional[OrderContext]:
    """Retourne None si le jeton est absent ou illisible (pas d'id de session entier positif)."""
    parts = [p.strip() for p in (token or "").split(CONTEXT_SEPARATOR)]
    if len(parts) < 2 or not parts[1].isdigit() or int(parts[1]) < 1:
        return None
    count = int(parts[2]) if len(parts) > 2 and parts[2].isdigit() and int(parts[2]) > 0 else None
    return OrderContext(slug=parts[0], session_id=int(parts[1]), participant_count=count)


def context_from_order(order: Dict[str, Any]) -> Optional[OrderContext]:
    units = (order or {}).get("purchase_units") or []
    if not units or not isinstance(units[0], dict):
        return None
    return parse_context_token(units[0].get("custom_id"))
