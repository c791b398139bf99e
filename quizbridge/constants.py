"""
Constants and default configuration values for the quiz import pipeline.

This module centralizes vocabularies, field aliases, heuristic weights and
the default fetch agent ladder so they can be re-tuned without touching
pipeline logic.
"""

# Canonical question type vocabulary
QUESTION_TYPES = {
    'multiple_choice': 'multiple-choice',
    'true_false': 'true-false',
    'multi_select': 'multi-select',
    'fill_in_blank': 'fill-in-blank',
    'open_ended': 'open-ended',
    'poll': 'poll',
    'draw': 'draw'
}

# Quality flag reasons
ENHANCE_REASONS = {
    'few_options': 'less_than_2_options',
    'no_correct': 'no_correct_exposed'
}

# Report statuses
REPORT_STATUS = {
    'success': 'success',
    'partial': 'partial_data',
    'parsed_empty': 'parsed_empty',
    'blocked': 'transport_blocked',
    'no_structure': 'no_structure_found',
    'not_handled': 'not_handled'
}

# Fetch attempt outcomes
FETCH_OUTCOMES = {
    'success': 'success',
    'blocked': 'blocked',
    'insufficient': 'insufficient_length',
    'network_error': 'network_error'
}

DEFAULT_QUESTION_TEXT = "Untitled Question"

# True/False detection
TRUE_FALSE_SYNONYMS = {
    'true': ['true', 't', 'yes', 'y', 'correct', 'right', 'verdadero', 'vrai', 'wahr'],
    'false': ['false', 'f', 'no', 'n', 'incorrect', 'wrong', 'falso', 'faux', 'falsch']
}

# Bot/challenge detection
BOT_DETECTION = {
    'prefix_chars': 5000,
    # Markup that only appears on challenge pages
    'structural_markers': [
        'challenge-form',
        'cf-chl',
        'cf-browser-verification',
        'g-recaptcha',
        'h-captcha',
        'hcaptcha',
        '_incapsula_resource',
        'px-captcha'
    ],
    # Human-readable phrases, skipped for JSON payloads
    'phrases': [
        'verify you are human',
        "verify that you're not a robot",
        'verifying you are human',
        'just a moment...',
        'checking your browser',
        'attention required',
        'access denied',
        'enable javascript and cookies to continue',
        'security check',
        'are you a robot',
        'request blocked'
    ]
}

# Deep structural finder
FINDER_DEFAULTS = {
    'max_depth': 12,
    'min_valid_ratio': 0.3,
    'skip_keys': [
        'config', 'settings', 'theme', 'experiments', 'features',
        'meta', 'assets', 'locales', 'i18n'
    ],
    'weights': {
        'question_like': 10,
        'text_and_choices': 10,
        'correct_marker': 40,
        'image': 5,
        'typing_answers': 15,
        'time_limit': 2
    }
}

TEXT_ALIASES = ['question', 'title', 'query', 'text', 'questionText', 'prompt']
CHOICE_ALIASES = ['choices', 'answers', 'options', 'typingAnswers', 'correctAnswers']
OPTION_CORRECT_FLAGS = ['correct', 'isCorrect', 'right']
ANSWER_INDEX_KEYS = ['correctIndex', 'correctAnswerIndex']
CORRECT_TEXT_KEYS = ['correctAnswer', 'correctAnswers', 'typingAnswers']
TIME_KEYS = ['timeLimit', 'time']

# Normalizer defaults
TIME_LIMITS = {
    'min_seconds': 5,
    'max_seconds': 300
}

# Fetch ladder defaults. Order is reliability order and can be overridden
# in config/settings.json.
DEFAULT_FETCH_AGENTS = [
    {
        'name': 'CorsProxy',
        'kind': 'proxy',
        'template': 'https://corsproxy.io/?{url_encoded}'
    },
    {
        'name': 'AllOrigins Raw',
        'kind': 'proxy',
        'template': 'https://api.allorigins.win/raw?url={url_encoded}'
    },
    {
        'name': 'AllOrigins Wrapper',
        'kind': 'wrapper',
        'template': 'https://api.allorigins.win/get?url={url_encoded}'
    },
    {
        'name': 'Jina Reader',
        'kind': 'reader',
        'template': 'https://r.jina.ai/{url}',
        'headers': {'X-No-Cache': 'true', 'X-With-Images-Summary': 'true'}
    },
    {
        'name': 'Headless Browser',
        'kind': 'browser',
        'enabled': False
    }
]

FETCH_DEFAULTS = {
    'timeout_seconds': 15,
    'min_bytes': 500,
    'platform_min_bytes': {
        'kahoot': 200,
        'blooket': 200,
        'gimkit': 200,
        'wayground': 3000
    }
}

# User Agents
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0"
]

BROWSER_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache'
}

# Platform URL patterns, tested in this order
PLATFORM_PATTERNS = [
    ('kahoot', [r'^https?://([a-z0-9-]+\.)*kahoot\.(it|com)(:\d+)?(/|$)']),
    ('blooket', [r'^https?://([a-z0-9-]+\.)*blooket\.com(:\d+)?(/|$)']),
    ('wayground', [r'^https?://([a-z0-9-]+\.)*(wayground|quizizz)\.com(:\d+)?(/|$)']),
    ('gimkit', [r'^https?://([a-z0-9-]+\.)*gimkit\.com(:\d+)?(/|$)'])
]

# Media CDN templates
MEDIA_TEMPLATES = {
    'kahoot': 'https://images-cdn.kahoot.it/{id}',
    'blooket': 'https://media.blooket.com/image/upload/{id}',
    'wayground': 'https://media.quizizz.com{path}',
    'gimkit': 'https://res.cloudinary.com/gimkit/image/upload/{id}'
}

# Image enrichment
ENRICHMENT_DEFAULTS = {
    'images_enabled': False,
    'requests_per_minute': 20,
    'query_words': 3,
    'pexels_api_key': '',
    'pixabay_api_key': ''
}

# File Paths
DEFAULT_PATHS = {
    'config_file': 'config/settings.json',
    'logs_dir': 'logs',
    'output_dir': 'output'
}

LOGGING_DEFAULTS = {
    'level': 'INFO',
    'file': 'logs/quizbridge.log',
    'max_size': 10485760,
    'backup_count': 5
}

# Flat question table columns
CSV_COLUMNS = [
    'Platform', 'QuestionId', 'QuestionType', 'Question',
    'Option1', 'Option2', 'Option3', 'Option4', 'Option5', 'Option6',
    'CorrectAnswers', 'TimeLimit', 'ImageUrl', 'NeedsEnhanceAI', 'EnhanceReason'
]
