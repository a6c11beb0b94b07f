from .models import Category, Entrant, Judge, MovingMode, SessionFormat, SessionUnit, Settings, Severity
from .conflicts import ConflictDetail, ConflictKind, detect_conflicts
from .edits import PlacementError, place_unit, swap_entrants, swap_units, unschedule_unit
from .populate import populate_schedule
from .preferences import PreferenceCheck, preference_check
from .session_units import generate_units, regenerate_units
from .types import GroupPlacement, PopulateResult, PriorityTier

__all__ = [
    "Category",
    "ConflictDetail",
    "ConflictKind",
    "Entrant",
    "GroupPlacement",
    "Judge",
    "MovingMode",
    "PlacementError",
    "PopulateResult",
    "PreferenceCheck",
    "PriorityTier",
    "SessionFormat",
    "SessionUnit",
    "Settings",
    "Severity",
    "detect_conflicts",
    "generate_units",
    "place_unit",
    "populate_schedule",
    "preference_check",
    "regenerate_units",
    "swap_entrants",
    "swap_units",
    "unschedule_unit",
]
