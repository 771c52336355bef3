"""
Column-name lookup for Glooko exports in English and German.

Header matching is case-insensitive substring matching, so
'Glucose Value (mmol/L)' matches the 'glucose value' variant.
"""

from typing import Dict, List, Sequence, Literal

SupportedLanguage = Literal['en', 'de']

COLUMN_VARIANTS: Dict[str, Dict[str, List[str]]] = {
    'timestamp': {
        'en': ['timestamp'],
        'de': ['zeitstempel'],
    },
    'glucose_value': {
        'en': ['glucose value', 'glucose'],
        'de': ['glukosewert', 'cgm-glukosewert'],
    },
    'insulin_type': {
        'en': ['insulin type'],
        'de': ['insulin-typ'],
    },
    'dose': {
        'en': ['dose', 'delivered'],
        'de': ['abgegebenes insulin', 'anfängliche abgabe', 'verzögerte abgabe', 'rate'],
    },
    'basal_rate': {
        'en': ['basal rate'],
        'de': ['rate', 'prozentsatz'],
    },
    'duration': {
        'en': ['duration'],
        'de': ['dauer'],
    },
    'total_bolus': {
        'en': ['total bolus'],
        'de': ['bolus gesamt'],
    },
    'total_basal': {
        'en': ['total basal'],
        'de': ['basal gesamt'],
    },
    'total_insulin': {
        'en': ['total insulin'],
        'de': ['insulin gesamt'],
    },
    'carbs': {
        'en': ['carbs'],
        'de': ['kh', 'kohlenhydrataufnahme'],
    },
}

GERMAN_INDICATORS = (
    'zeitstempel',
    'glukosewert',
    'insulin-typ',
    'dauer (minuten)',
    'abgegebenes insulin',
    'kohlenhydrataufnahme',
    'seriennummer',
    'alarm/ereignis',
)

ENGLISH_INDICATORS = (
    'timestamp',
    'glucose value',
    'insulin type',
    'duration (min)',
    'dose (units)',
    'carbs (g)',
    'serial number',
    'alarm/event',
)


def get_column_variants(column_type: str) -> List[str]:
    """All known header fragments for a column type, English first.

    Unknown column types return an empty list.
    """
    mapping = COLUMN_VARIANTS.get(column_type)
    if mapping is None:
        return []
    return mapping['en'] + mapping['de']


def find_column_index(headers: Sequence[str], search_terms: Sequence[str]) -> int:
    """Index of the first header containing any search term, or -1."""
    for index, header in enumerate(headers):
        lower = header.strip().lower()
        if any(term in lower for term in search_terms):
            return index
    return -1


def detect_language(headers: Sequence[str]) -> SupportedLanguage:
    """Guess the export language from indicator headers; defaults to 'en'."""
    lower_headers = [h.lower() for h in headers]

    def hits(indicators):
        return sum(1 for ind in indicators if any(ind in h for h in lower_headers))

    return 'de' if hits(GERMAN_INDICATORS) > hits(ENGLISH_INDICATORS) else 'en'


def find_column(headers: Sequence[str], column_type: str) -> int:
    """Locate a column, trying the detected language's variants first.

    English basal exports carry both 'Rate' and 'Insulin Delivered (U)';
    searching the detected language first keeps the German 'rate' variant
    from matching the English rate column.
    """
    mapping = COLUMN_VARIANTS.get(column_type)
    if mapping is None:
        return -1
    index = find_column_index(headers, mapping[detect_language(headers)])
    if index != -1:
        return index
    return find_column_index(headers, get_column_variants(column_type))
