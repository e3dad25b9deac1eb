"""Static game content: badges, curated maps, roasts and the continent table."""
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from .models.badges import BadgeDefinition
from .models.game import Continent, LatLng


class ShameTier(str, Enum):
    """Mockery tiers, from best to worst guess."""
    SUSPICIOUSLY_GOOD = "SUSPICIOUSLY_GOOD"
    BARE_MINIMUM = "BARE_MINIMUM"
    MEDIOCRE = "MEDIOCRE"
    VAGUELY_IN_THE_AREA = "VAGUELY_IN_THE_AREA"
    WRONG_ZIP_CODE = "WRONG_ZIP_CODE"
    DRUNK_COMPASS = "DRUNK_COMPASS"
    COLUMBUS = "COLUMBUS"
    FLAT_EARTHER = "FLAT_EARTHER"


ROASTS_BY_TIER: Dict[ShameTier, List[str]] = {
    ShameTier.SUSPICIOUSLY_GOOD: [
        "That's... suspiciously good.",
        "You have to be cheating.",
        "This smells like a map open on the side.",
        "Impressive... for once.",
        "Okay Einstein, calm down.",
        "Ok, pop off.",
    ],
    ShameTier.BARE_MINIMUM: [
        "Have you actually been to school?",
        "Barely counts as knowing where you are.",
        "Half a braincell moment.",
        "Congrats, you located the neighborhood.",
        "That's giving lucky guess, not brainpower.",
        "You tried, I guess.",
    ],
    ShameTier.MEDIOCRE: [
        "Not tragic, but not giving genius either.",
        "You missed it like your morning alarm.",
        "Close... but not close enough to brag.",
        "You aimed for smart and landed on mediocre.",
        "That's a B- at best.",
        "Close. Like emotionally, not factually.",
    ],
    ShameTier.VAGUELY_IN_THE_AREA: [
        "This ain't it, chief.",
        "You're like... vaguely in the area.",
        "The confidence? Unreal. The accuracy? Not so much.",
        "You're giving GPS malfunction.",
        "Be serious.",
    ],
    ShameTier.WRONG_ZIP_CODE: [
        "Wow, you know continents exist, I'll give you that.",
        "And you said that with confidence and everything.",
        "If being wrong burned calories, you'd be shredded.",
        "Did you even try?",
        "This guess should be illegal.",
    ],
    ShameTier.DRUNK_COMPASS: [
        "Not you crossing country lines like it's nothing.",
        "Your compass is drunk.",
        "Lowkey impressive how off you are.",
        "That's a long-distance relationship with the truth.",
        "You're treating borders like suggestions.",
        "This ain't geography, this is improv.",
    ],
    ShameTier.COLUMBUS: [
        "Okay Columbus, wrong coast.",
        "Pack it up, Dora the Explorer.",
        "Your sense of direction is in witness protection.",
        "You're basically playing blindfolded.",
    ],
    ShameTier.FLAT_EARTHER: [
        "Geography is just not your aesthetic.",
        "Wrong continent, chief.",
        "Pack it up, Marco Polo.",
        "That's a world tour, not a guess.",
    ],
}

FALLBACK_ROAST = "I'm speechless."


BADGE_DEFINITIONS: List[BadgeDefinition] = [
    BadgeDefinition(id="SMART_ASS", name="Smart Ass", required_progress=5,
                    description="You guessed 5 times in under 30 seconds. Speed isn't the same as accuracy, you know."),
    BadgeDefinition(id="CRITICAL_OVERTHINKER", name="Critical Overthinker", required_progress=5,
                    description="You waited for the timer to run out 5 times. Commitment to indecision, impressive."),
    BadgeDefinition(id="US_AMERICAN", name="U.S. American", required_progress=3,
                    description="Only a true American could land on the wrong continent 3 times."),
    BadgeDefinition(id="FLAT_EARTHER", name="Flat Earther", required_progress=3,
                    description="You picked the wrong hemisphere 3 rounds in a row. Science weeps."),
    BadgeDefinition(id="LOST_TOURIST", name="Lost Tourist", required_progress=5,
                    description="You were 2-25 km off, 5 times. Close enough to smell it, still too far to matter."),
    BadgeDefinition(id="NATIONAL_EMBARRASSMENT", name="National Embarrassment", required_progress=3,
                    description="You missed 3 German locations. Even your homeland wants nothing to do with you."),
    BadgeDefinition(id="EUROCENTRIC_MUCH", name="Eurocentric Much?", required_progress=3,
                    description="You called 3 non-European places 'Europe'."),
    BadgeDefinition(id="CHRONICALLY_WRONG", name="Chronically Wrong", required_progress=10,
                    description="You stayed 100+ km off for 10 rounds in a row. A masterclass in consistent failure."),
    BadgeDefinition(id="GEOGRAPHY_DROPOUT", name="Geography Dropout", required_progress=10,
                    description="You missed by over 100 km, 10 times. Graduation denied."),
    BadgeDefinition(id="CULTURAL_MENACE", name="Cultural Menace", required_progress=3,
                    description="You messed up 3 of the 5 most famous countries. The audacity is impressive."),
    BadgeDefinition(id="COLUMBUS", name="Columbus", required_progress=5,
                    description="You guessed 5 times between 1,000 and 5,000 km off. Boldly wrong."),
    BadgeDefinition(id="GLOBAL_MENACE", name="Global Menace", required_progress=6,
                    description="You got every continent wrong at least once. Uniting the world in disappointment."),
    BadgeDefinition(id="BARE_MINIMUM", name="Bare Minimum", required_progress=5,
                    description="You landed 5 guesses between 25 and 250 km. Congrats on achieving mediocrity."),
    BadgeDefinition(id="LATITUDE_LOSER", name="Latitude Loser", required_progress=5,
                    description="You missed the latitude by 200+ km, 5 times. North? South? Still wrong."),
    BadgeDefinition(id="LONGITUDE_LOSER", name="Longitude Loser", required_progress=5,
                    description="You missed the longitude by 200+ km, 5 times. East, west... who cares, right?"),
    BadgeDefinition(id="CONTINENTAL_DRIFT", name="Continental Drift", required_progress=3,
                    description="You guessed the wrong continent 3 times. Even tectonic plates drift with more accuracy."),
    BadgeDefinition(id="TOURIST_TRAPS_MASTER", name="Tourist Traps", required_progress=1,
                    description="You actually nailed all the tourist traps. Congrats, you fell for all of them."),
    BadgeDefinition(id="POP_CULTURE_MASTER", name="Pop Culture Hotspots", required_progress=1,
                    description="You got every pop culture location right. TV raised you well."),
    BadgeDefinition(id="CANCELLED_DESTINATIONS_MASTER", name="Cancelled Destinations", required_progress=1,
                    description="You guessed every cancelled destination. Problematic, but consistent."),
    BadgeDefinition(id="CONSPIRACY_CORE_MASTER", name="Conspiracy Core", required_progress=1,
                    description="You guessed every conspiracy hotspot. Put the tinfoil hat on already."),
    BadgeDefinition(id="CONSISTENTLY_MID", name="Consistently Mid", required_progress=5,
                    description="You stayed between 50-100 km off for 5 rounds straight. Commitment to mediocrity."),
]

BADGES_BY_ID: Dict[str, BadgeDefinition] = {b.id: b for b in BADGE_DEFINITIONS}


class CuratedMap(NamedTuple):
    id: str
    name: str
    badge_id: str
    locations: List[LatLng]


def _points(*pairs) -> List[LatLng]:
    return [LatLng(latitude=lat, longitude=lng) for lat, lng in pairs]


CURATED_MAPS: Dict[str, CuratedMap] = {
    m.id: m for m in [
        CuratedMap("tourist_traps", "Tourist Traps", "TOURIST_TRAPS_MASTER", _points(
            (40.758141918218215, -73.98556339059482),  # Times Square
            (48.85837, 2.29448),  # Eiffel Tower
            (43.72302, 10.39663),  # Leaning Tower of Pisa
            (36.43211, 25.42274),  # Santorini
            (34.1016, -118.3267),  # Hollywood Walk of Fame
            (-8.431615675788212, 115.27931372545669),  # Bali rice terraces
            (41.90094, 12.48282),  # Trevi Fountain
            (41.88263, -87.62347),  # Cloud Gate
        )),
        CuratedMap("pop_culture_hotspots", "Pop Culture Hotspots", "POP_CULTURE_MASTER", _points(
            (51.53208661844163, -0.17733156427290014),  # Abbey Road crossing
            (51.531662597646516, -0.12359504241888854),  # King's Cross
            (-37.857915721189194, 175.68038076424554),  # Hobbiton
            (47.95960899040987, -124.3927660840214),  # Forks welcome sign
            (39.174966450733045, 23.651502126166665),  # Mamma Mia chapel
        )),
        CuratedMap("cancelled_destinations", "Cancelled Destinations", "CANCELLED_DESTINATIONS_MASTER", _points(
            (28.4112021983323, -81.46125968952879),  # SeaWorld Orlando
            (25.208835973937937, 55.27398067222927),  # Dubai
            (34.044508292092836, -118.25072321819881),  # Cecil Hotel
            (25.289639817407693, 51.53303514499203),  # Doha
            (55.757845632424775, 37.60879438959731),  # Moscow
        )),
        CuratedMap("conspiracy_core", "Conspiracy Core", "CONSPIRACY_CORE_MASTER", _points(
            (57.290986309158036, -4.447722401522474),  # Loch Ness
            (39.84638651968429, -104.67407641614274),  # Denver airport
            (33.392645753115154, -104.5229393417492),  # Roswell
            (51.17889, -1.82611),  # Stonehenge
            (41.90184100097306, 12.457251348781584),  # Vatican
            (-27.12502092798182, -109.27716304844438),  # Moai
            (34.101518239914036, -118.32819749158988),  # Scientology centre
        )),
    ]
}


def get_curated_map(map_id: str) -> Optional[CuratedMap]:
    return CURATED_MAPS.get(map_id)


FAMOUS_COUNTRIES = frozenset({"US", "CN", "IN", "JP", "DE"})

# ISO 3166-1 alpha-2 codes per continent. Transcontinental countries sit
# where their capital is.
_COUNTRIES_BY_CONTINENT: Dict[Continent, str] = {
    Continent.AF: (
        "AO BF BI BJ BW CD CF CG CI CM CV DJ DZ EG EH ER ET GA GH GM GN GQ GW "
        "KE KM LR LS LY MA MG ML MR MU MW MZ NA NE NG RE RW SC SD SH SL SN SO "
        "SS ST SZ TD TG TN TZ UG YT ZA ZM ZW"
    ),
    Continent.AS: (
        "AE AF AM AZ BD BH BN BT CN CY GE HK ID IL IN IQ IR JO JP KG KH KP KR "
        "KW KZ LA LB LK MM MN MO MV MY NP OM PH PK PS QA SA SG SY TH TJ TL TM "
        "TR TW UZ VN YE"
    ),
    Continent.EU: (
        "AD AL AT AX BA BE BG BY CH CZ DE DK EE ES FI FO FR GB GG GI GR HR HU "
        "IE IM IS IT JE LI LT LU LV MC MD ME MK MT NL NO PL PT RO RS RU SE SI "
        "SJ SK SM UA VA XK"
    ),
    Continent.NA: (
        "AG AI AW BB BL BM BQ BS BZ CA CR CU CW DM DO GD GL GP GT HN HT JM KN "
        "KY LC MF MQ MS MX NI PA PM PR SV SX TC TT US VC VG VI"
    ),
    Continent.SA: "AR BO BR CL CO EC FK GF GY PE PY SR UY VE",
    Continent.OC: (
        "AS AU CK FJ FM GU KI MH MP NC NF NR NU NZ PF PG PN PW SB TK TO TV UM "
        "VU WF WS"
    ),
}

COUNTRY_TO_CONTINENT: Dict[str, Continent] = {
    code: continent
    for continent, codes in _COUNTRIES_BY_CONTINENT.items()
    for code in codes.split()
}


def continent_for_country(country_code: Optional[str]) -> Optional[Continent]:
    """Continent of an ISO country code, or None when unknown."""
    if not country_code:
        return None
    return COUNTRY_TO_CONTINENT.get(country_code.upper())
