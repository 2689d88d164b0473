"""Franchise reference data for MLB.

Team codes follow the historical game logs (Retrosheet-style), so each
franchise lists every code it has played under. MLB Stats API team ids map
onto those franchises.
"""

from __future__ import annotations

# franchise code -> (display name, short name, lineage codes, hashtag)
MLB_FRANCHISES: dict[str, tuple[str, str, tuple[str, ...], str]] = {
    "ANA": ("Los Angeles Angels", "Angels", ("ANA", "CAL", "LAA"), "#RepTheHalo"),
    "ARI": ("Arizona Diamondbacks", "Diamondbacks", ("ARI",), "#Dbacks"),
    "ATL": ("Atlanta Braves", "Braves", ("ATL", "MLN", "BSN"), "#BravesCountry"),
    "BAL": ("Baltimore Orioles", "Orioles", ("BAL", "SLA", "MLA"), "#Birdland"),
    "BOS": ("Boston Red Sox", "Red Sox", ("BOS",), "#DirtyWater"),
    "CHA": ("Chicago White Sox", "White Sox", ("CHA",), "#WhiteSox"),
    "CHN": ("Chicago Cubs", "Cubs", ("CHN",), "#BeHereForIt"),
    "CIN": ("Cincinnati Reds", "Reds", ("CIN",), "#ATOBTTR"),
    "CLE": ("Cleveland Guardians", "Guardians", ("CLE",), "#GuardsBall"),
    "COL": ("Colorado Rockies", "Rockies", ("COL",), "#Rockies"),
    "DET": ("Detroit Tigers", "Tigers", ("DET",), "#RepDetroit"),
    "HOU": ("Houston Astros", "Astros", ("HOU",), "#BuiltForThis"),
    "KCA": ("Kansas City Royals", "Royals", ("KCA",), "#FountainsUp"),
    "LAN": ("Los Angeles Dodgers", "Dodgers", ("LAN", "BRO"), "#LetsGoDodgers"),
    "MIA": ("Miami Marlins", "Marlins", ("MIA", "FLO"), "#MarlinsBeisbol"),
    "MIL": ("Milwaukee Brewers", "Brewers", ("MIL", "SE1"), "#ThisIsMyCrew"),
    "MIN": ("Minnesota Twins", "Twins", ("MIN", "WS1"), "#MNTwins"),
    "NYA": ("New York Yankees", "Yankees", ("NYA", "BLA"), "#RepBX"),
    "NYN": ("New York Mets", "Mets", ("NYN",), "#LGM"),
    "OAK": ("Athletics", "Athletics", ("ATH", "OAK", "KC1", "PHA"), "#Athletics"),
    "PHI": ("Philadelphia Phillies", "Phillies", ("PHI",), "#RingTheBell"),
    "PIT": ("Pittsburgh Pirates", "Pirates", ("PIT",), "#LetsGoBucs"),
    "SDN": ("San Diego Padres", "Padres", ("SDN",), "#ForTheFaithful"),
    "SEA": ("Seattle Mariners", "Mariners", ("SEA",), "#TridentsUp"),
    "SFN": ("San Francisco Giants", "Giants", ("SFN", "NY1"), "#SFGiants"),
    "SLN": ("St. Louis Cardinals", "Cardinals", ("SLN",), "#ForTheLou"),
    "TBA": ("Tampa Bay Rays", "Rays", ("TBA",), "#RaysUp"),
    "TEX": ("Texas Rangers", "Rangers", ("TEX", "WS2"), "#AllForTX"),
    "TOR": ("Toronto Blue Jays", "Blue Jays", ("TOR",), "#LightsUpLetsGo"),
    "WAS": ("Washington Nationals", "Nationals", ("WAS", "MON"), "#NATITUDE"),
}

# MLB Stats API team id -> franchise code
MLB_TEAM_ID_TO_FRANCHISE: dict[int, str] = {
    108: "ANA",
    109: "ARI",
    110: "BAL",
    111: "BOS",
    112: "CHN",
    113: "CIN",
    114: "CLE",
    115: "COL",
    116: "DET",
    117: "HOU",
    118: "KCA",
    119: "LAN",
    120: "WAS",
    121: "NYN",
    133: "OAK",
    134: "PIT",
    135: "SDN",
    136: "SEA",
    137: "SFN",
    138: "SLN",
    139: "TBA",
    140: "TEX",
    141: "TOR",
    142: "MIN",
    143: "PHI",
    144: "ATL",
    145: "CHA",
    146: "MIA",
    147: "NYA",
    158: "MIL",
}

# Nicknames longer than one word; everything else uses the last word
MULTI_WORD_NICKNAMES = ("Red Sox", "White Sox", "Blue Jays")
