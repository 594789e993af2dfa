"""
Geographic lookup tables used by the land/sea pre-filter
"""

from typing import Optional


EUROPE = 'Europe'
ASIA = 'Asia'
AFRICA = 'Africa'
NORTH_AMERICA = 'North America'
SOUTH_AMERICA = 'South America'
OCEANIA = 'Oceania'


def _assign(continent: str, codes: str) -> dict[str, str]:
    return {code: continent for code in codes.split()}


COUNTRY_CONTINENT: dict[str, str] = {
    **_assign(EUROPE,
              'AD AL AT BA BE BG BY CH CY CZ DE DK EE ES FI FO FR GB GG GI GR HR HU '
              'IE IM IS IT JE LI LT LU LV MC MD ME MK MT NL NO PL PT RO RS RU SE SI '
              'SK SM UA VA XK'),
    **_assign(ASIA,
              'AE AF AM AZ BD BH BN BT CN GE HK ID IL IN IQ IR JO JP KG KH KP KR KW '
              'KZ LA LB LK MM MN MO MV MY NP OM PH PK PS QA SA SG SY TH TJ TL TM TR '
              'TW UZ VN YE'),
    **_assign(AFRICA,
              'AO BF BI BJ BW CD CF CG CI CM CV DJ DZ EG ER ET GA GH GM GN GQ GW KE '
              'KM LR LS LY MA MG ML MR MU MW MZ NA NE NG RE RW SC SD SL SN SO SS ST '
              'SZ TD TG TN TZ UG YT ZA ZM ZW'),
    **_assign(NORTH_AMERICA,
              'AG AI AW BB BL BM BS BZ CA CR CU CW DM DO GD GL GP GT HN HT JM KN KY '
              'LC MF MQ MS MX NI PA PR SV SX TC TT US VC VG VI'),
    **_assign(SOUTH_AMERICA,
              'AR BO BR CL CO EC FK GF GY PE PY SR UY VE'),
    **_assign(OCEANIA,
              'AS AU CK FJ FM GU KI MH MP NC NF NR NU NZ PF PG PN PW SB TK TO TV VU '
              'WF WS'),
}

# Countries whose territory is split by ocean: overseas regions,
# archipelagos, non-contiguous states.
FRAGMENTED_COUNTRIES = frozenset({
    'US', 'FR', 'GB', 'NO', 'DK', 'ES', 'PT', 'NL', 'IT', 'GR',
    'ID', 'PH', 'JP', 'MY', 'NZ', 'AU', 'CL', 'EC', 'CA', 'RU',
})


def _pairs(*pairs: str) -> frozenset[frozenset[str]]:
    return frozenset(frozenset(pair.split('-')) for pair in pairs)


# Same-continent neighbours separated by open water
OCEAN_SEPARATED = _pairs(
    # Europe
    'GB-FR', 'GB-BE', 'GB-NL', 'GB-DE', 'GB-DK', 'GB-NO', 'GB-IE', 'GB-IS', 'GB-ES',
    'IE-FR', 'IE-ES', 'IS-NO', 'IS-DK',
    'FI-EE', 'FI-DE', 'SE-EE', 'SE-LV', 'SE-LT', 'SE-PL', 'SE-DE', 'NO-DK',
    'IT-GR', 'IT-HR', 'IT-AL', 'IT-MT', 'MT-GR', 'CY-GR', 'CY-IT',
    # Asia
    'JP-KR', 'JP-CN', 'JP-TW', 'JP-PH', 'JP-HK', 'JP-SG',
    'KR-CN', 'KR-TW', 'KR-HK',
    'TW-CN', 'TW-HK', 'TW-PH', 'PH-HK', 'PH-CN', 'PH-VN', 'PH-SG', 'PH-MY',
    'SG-ID', 'SG-HK', 'SG-CN', 'SG-IN', 'SG-LK', 'MY-ID',
    'LK-IN', 'MV-IN', 'MV-LK', 'BH-SA', 'BH-IR', 'QA-IR', 'AE-IR', 'OM-IN', 'AE-IN',
    # Africa
    'MG-MZ', 'MG-ZA', 'MG-KE', 'MU-MG', 'MU-ZA', 'SC-KE', 'CV-SN', 'KM-TZ',
    # Americas
    'CU-US', 'BS-US', 'JM-US', 'DO-US', 'HT-US', 'PR-US', 'KY-US', 'BM-US',
    'CU-MX', 'JM-PA', 'PR-DO', 'TT-US',
    # Oceania
    'AU-NZ', 'AU-PG', 'AU-FJ', 'NZ-FJ', 'AU-NC', 'GU-AU',
)


def continent_of(country_code: Optional[str]) -> Optional[str]:
    """Continent name for an ISO country code, None if unknown"""
    if not country_code:
        return None
    return COUNTRY_CONTINENT.get(country_code.upper())


def is_fragmented(country_code: Optional[str]) -> bool:
    return bool(country_code) and country_code.upper() in FRAGMENTED_COUNTRIES


def is_ocean_separated(code1: Optional[str], code2: Optional[str]) -> bool:
    """Known same-continent pair with open water between them"""
    if not code1 or not code2:
        return False
    return frozenset({code1.upper(), code2.upper()}) in OCEAN_SEPARATED
