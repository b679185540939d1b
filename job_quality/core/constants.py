"""Rule tables and policy constants for the job data quality engine."""

import re
from typing import Dict, List, Pattern, Tuple


PIPELINE_STEPS: Tuple[str, ...] = (
    'scraper', 'extractor', 'geo', 'jobexp', 'lang',
    'clean', 'labelor', 'bertizer', 'categorizer', 'import',
)

PIPELINE_STEP_LABELS: Dict[str, str] = {
    'scraper': 'Scraper',
    'extractor': 'Extractor',
    'geo': 'Geo',
    'jobexp': 'JobExp',
    'lang': 'Lang',
    'clean': 'Clean',
    'labelor': 'Labelor',
    'bertizer': 'BERT',
    'categorizer': 'Categorizer',
    'import': 'Import',
}

# Detection order matters: the first language wins a tie.
LANGUAGE_ORDER: Tuple[str, ...] = ('en', 'fr', 'es', 'ar', 'pt', 'zh', 'ru', 'other', 'unknown')

# Thresholds
SHORT_DESCRIPTION_LENGTH = 100
BOILERPLATE_MAX_LENGTH = 300
TRUNCATION_MIN_LENGTH = 50
LOW_CONFIDENCE_THRESHOLD = 40.0
DEFAULT_CLASSIFICATION_CONFIDENCE = 50.0
LANGUAGE_CONFIDENCE_FLOOR = 0.3
LANGUAGE_FALLBACK_CONFIDENCE = 0.5
DUPLICATE_WINDOW_DAYS = 30
SIMILARITY_THRESHOLD = 90
RATE_LIMIT_MIN_FAILURES = 3
MISSING_REQUIREMENTS_LENGTH = 50

# Result caps
MAX_DUPLICATE_GROUPS = 50
MAX_UNMAPPED_LOCATIONS = 30
MAX_UNRECOGNIZED_GRADES = 20
MAX_DATE_ANOMALIES = 100
MAX_CONTENT_SAMPLES = 10
MAX_SCRAPER_SAMPLES = 20
PREVIEW_LENGTH = 50

# Score policy
SCORE_CEILING = 100.0

SEVERITY_PENALTIES: Dict[str, float] = {
    'critical': 15.0,
    'warning': 8.0,
    'info': 3.0,
}

COMPLETENESS_WEIGHTS: Dict[str, float] = {
    'title': 25.0,
    'description': 20.0,
    'duty_station': 15.0,
    'duty_country': 10.0,
    'up_grade': 10.0,
    'job_labels': 10.0,
    'posting_date': 5.0,
    'apply_until': 5.0,
}

EXPERIENCE_FIELDS: Tuple[str, ...] = ('hs_min_exp', 'bachelor_min_exp', 'master_min_exp')

# Stage-level enrichment failures watched by the failure pattern analysis
LABEL_FAILURE_TYPES: Tuple[str, ...] = ('empty_labels', 'null_sectoral_category')
ENRICHMENT_FAILURE_TYPES: Tuple[str, ...] = (
    'empty_labels', 'null_sectoral_category', 'null_experience_fields', 'empty_languages',
)

BOILERPLATE_PHRASES: Tuple[str, ...] = (
    'see attached',
    'see the attached',
    'refer to the attached',
    'refer to attached',
    'tor attached',
    'terms of reference available',
    'for full job description',
    'please consult',
    'please refer to',
    'see job description',
)

TRUNCATION_SUFFIXES: Tuple[str, ...] = ('...', '…')
DANGLING_ENDING = re.compile(r'[a-z,]\s*$')

LANGUAGE_PATTERNS: Dict[str, List[Pattern]] = {
    'en': [
        re.compile(r'\b(the|a|an|is|are|was|were|will|would|could|should|have|has|had|been)\b', re.IGNORECASE),
        re.compile(r'\b(responsibilities|qualifications|requirements|experience|position|candidate)\b', re.IGNORECASE),
    ],
    'fr': [
        re.compile(r'\b(le|la|les|un|une|des|du|de|et|ou|avec|pour|dans|sur|est|sont|fait|être|avoir)\b', re.IGNORECASE),
        re.compile(r'\b(responsabilités|qualifications|compétences|expérience|poste|candidat)\b', re.IGNORECASE),
        re.compile(r'\bà\s+l[ae]?\b', re.IGNORECASE),
        re.compile(r'ç|é|è|ê|ë|ô|û|î|ï|œ', re.IGNORECASE),
    ],
    'es': [
        re.compile(r'\b(el|la|los|las|un|una|unos|unas|de|del|en|con|por|para|que|como)\b', re.IGNORECASE),
        re.compile(r'\b(responsabilidades|requisitos|experiencia|puesto|candidato|trabajo)\b', re.IGNORECASE),
        re.compile(r'ñ|á|é|í|ó|ú|¿|¡', re.IGNORECASE),
    ],
    'ar': [
        re.compile(r'[\u0600-\u06FF]'),
    ],
    'pt': [
        re.compile(r'\b(o|a|os|as|um|uma|de|do|da|em|com|por|para|que|como|não|são)\b', re.IGNORECASE),
        re.compile(r'ã|õ|ç', re.IGNORECASE),
    ],
    'zh': [
        re.compile(r'[\u4E00-\u9FFF]'),
    ],
    'ru': [
        re.compile(r'[\u0400-\u04FF]'),
    ],
    'other': [],
    'unknown': [],
}

VALID_GRADE_PATTERNS: Tuple[Pattern, ...] = (
    re.compile(r'^P-?[1-7]$', re.IGNORECASE),
    re.compile(r'^D-?[1-2]$', re.IGNORECASE),
    re.compile(r'^G-?[1-7]$', re.IGNORECASE),
    re.compile(r'^NO-?[A-E]$', re.IGNORECASE),
    re.compile(r'^SB-?[1-5]$', re.IGNORECASE),
    re.compile(r'^LICA-?\d+$', re.IGNORECASE),
    re.compile(r'^IPSA-?\d+$', re.IGNORECASE),
    re.compile(r'^SC-?\d+$', re.IGNORECASE),
    re.compile(r'^UNV', re.IGNORECASE),
    re.compile(r'^Consultant', re.IGNORECASE),
    re.compile(r'^Intern', re.IGNORECASE),
    re.compile(r'^JPO', re.IGNORECASE),
    re.compile(r'^ASG', re.IGNORECASE),
    re.compile(r'^USG', re.IGNORECASE),
)

# Checked in order, first substring hit wins
GRADE_INTERPRETATIONS: Tuple[Tuple[str, str], ...] = (
    ('professional', 'P-level (unspecified)'),
    ('senior', 'Senior level'),
    ('junior', 'Junior level'),
    ('entry', 'Entry level'),
    ('level not', 'Unknown'),
)

LOCATION_ALIASES: Dict[str, Dict[str, str]] = {
    'genève': {'city': 'Geneva', 'country': 'Switzerland', 'continent': 'Europe'},
    'geneve': {'city': 'Geneva', 'country': 'Switzerland', 'continent': 'Europe'},
    'bruxelles': {'city': 'Brussels', 'country': 'Belgium', 'continent': 'Europe'},
    'vienne': {'city': 'Vienna', 'country': 'Austria', 'continent': 'Europe'},
    'copenhague': {'city': 'Copenhagen', 'country': 'Denmark', 'continent': 'Europe'},
    'addis abeba': {'city': 'Addis Ababa', 'country': 'Ethiopia', 'continent': 'Africa'},
}

REMOTE_KEYWORDS: Tuple[str, ...] = ('home', 'remote')
MULTIPLE_KEYWORDS: Tuple[str, ...] = ('multiple', 'various')
