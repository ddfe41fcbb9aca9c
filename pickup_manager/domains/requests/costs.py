"""
Per-site pickup costs.
"""
import logging
import math
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


def parse_amount(raw: Optional[str]) -> Optional[float]:
    """Parse "12,50" or "12.50"; returns None unless the input is a finite number."""
    if raw is None:
        return None
    cleaned = str(raw).strip().replace(" ", "").replace(",", ".")
    if not cleaned:
        return None
    try:
        amount = float(cleaned)
    except ValueError:
        logger.warning(f"Ignoring unparsable cost value: {raw}")
        return None
    if not math.isfinite(amount):
        logger.warning(f"Ignoring non-finite cost value: {raw}")
        return None
    return amount


def distribute_costs(locations: Iterable[str], raw_costs: Dict[str, str]) -> Tuple[float, Dict[str, float]]:
    """
    Keep the positive, parsable amount of every site of a request.

    Args:
        locations: Sites of the request
        raw_costs: Amounts as typed, keyed by site

    Returns:
        Tuple of (total, per-site costs)
    """
    location_costs: Dict[str, float] = {}
    for location in locations:
        amount = parse_amount(raw_costs.get(location))
        if amount is None or amount <= 0:
            continue
        location_costs[location] = round(amount, 2)
    return round(sum(location_costs.values()), 2), location_costs
