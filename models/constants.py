# =============================================================================
# Constants and Configuration for Crew Rotation Engine
# =============================================================================

import os
from typing import Dict, List

# Settings storage
DATA_DIR = "data"
SETTINGS_FILE = os.path.join(DATA_DIR, "settings.json")

# Default allowance policy (flat daily offshore rate, per-incident medevac rate)
FIXED_OFFSHORE_RATE = 200.0
FIXED_MEDEVAC_RATE = 500.0

# Roster limits
MAX_CYCLES = 24
MAX_MEDEVAC_DATES = 5

# Departure alert window (days before sign-off)
DEPARTURE_ALERT_DAYS = 3

# Strings that mean "no date" in imported rosters
EMPTY_DATE_MARKERS = {"", "-", "N/A"}

MONTH_ABBREVIATIONS = ["jan", "feb", "mar", "apr", "may", "jun",
                       "jul", "aug", "sep", "oct", "nov", "dec"]

MONTH_NAMES = [
    "JANUARY", "FEBRUARY", "MARCH", "APRIL", "MAY", "JUNE",
    "JULY", "AUGUST", "SEPTEMBER", "OCTOBER", "NOVEMBER", "DECEMBER",
]

# Post markers used to classify trades
OFFSHORE_POST_MARKER = "OFFSHORE MEDIC"
ESCORT_POST_MARKER = "ESCORT MEDIC"
# Whole-word tokens; "MARITIME" must not read as IM
OFFICE_POST_MARKERS = ("IM", "IMP", "OHN")

# Display order of clients on rosters and dashboards
CLIENT_ORDER = {"SKA": 1, "SBA": 2}

# Valid client -> post -> locations
CLIENT_LOCATION_MAP: Dict[str, Dict[str, List[str]]] = {
    "SKA": {
        "OFFSHORE MEDIC": [
            "B11", "BARAM", "BARONIA", "BOKOR", "D35", "E11",
            "KANOWIT KAKG", "KASAWARI", "M1", "NC3", "TEMANA", "TUKAU",
        ],
        "ESCORT MEDIC": ["BINTULU", "MIRI"],
        "IM / OHN": ["SKA OFFICE", "BIF /BCOT"],
    },
    "SBA": {
        "OFFSHORE MEDIC": [
            "ERB WEST (EW)", "KINABALU (KNAG)", "SAMARANG (SM)", "SUMANDAK (SUPD)",
        ],
        "ESCORT MEDIC": ["KK", "LABUAN"],
        "IM / OHN": ["SBA OFFICE", "SOGT"],
    },
}
