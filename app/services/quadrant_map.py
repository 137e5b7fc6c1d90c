"""
Correspondance entre quadrants exposés aux bots (q1-q4) et priorités internes.

q1 = DO_FIRST  (urgent + important)
q2 = SCHEDULE  (pas urgent + important)
q3 = DELEGATE  (urgent + pas important)
q4 = ELIMINATE (pas urgent + pas important)
"""

from typing import List, Optional

QUADRANT_TO_PRIORITY = {
    "q1": "DO_FIRST",
    "q2": "SCHEDULE",
    "q3": "DELEGATE",
    "q4": "ELIMINATE",
}

PRIORITY_TO_QUADRANT = {priority: quadrant for quadrant, priority in QUADRANT_TO_PRIORITY.items()}

QUADRANT_NAMES = {
    "DO_FIRST": "Do First",
    "SCHEDULE": "Schedule",
    "DELEGATE": "Delegate",
    "ELIMINATE": "Eliminate",
}

PRIORITIES = tuple(QUADRANT_TO_PRIORITY.values())


def quadrant_to_priority(quadrant: str) -> Optional[str]:
    return QUADRANT_TO_PRIORITY.get(quadrant.lower())


def priority_to_quadrant(priority: Optional[str]) -> Optional[str]:
    if not priority:
        return None
    return PRIORITY_TO_QUADRANT.get(priority)


def quadrant_name(priority: Optional[str]) -> Optional[str]:
    if not priority:
        return None
    return QUADRANT_NAMES.get(priority)


def is_valid_quadrant(quadrant: str) -> bool:
    return quadrant.lower() in QUADRANT_TO_PRIORITY


def valid_quadrants() -> List[str]:
    return list(QUADRANT_TO_PRIORITY)
