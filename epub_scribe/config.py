"""
Settings for epub-scribe, read from the environment and an optional .env file
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

_config_logger = logging.getLogger('config')

# DEBUG_MODE from the process environment, before .env is read
_debug_mode = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
if _debug_mode:
    logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    _config_logger.setLevel(logging.DEBUG)
    _config_logger.debug("🔍 DEBUG_MODE enabled - verbose logging active")

# .env is looked up in the current working directory
_env_file = Path.cwd() / '.env'
_dotenv_result = load_dotenv(_env_file)
if _debug_mode:
    _config_logger.debug(f"📁 Looking for .env at: {_env_file.absolute()}")
    _config_logger.debug(f"📁 load_dotenv() returned: {_dotenv_result}")

# Translation backend selection: 'direct', 'google' or 'openrouter'
BACKEND = os.getenv('BACKEND', 'direct')
BACKEND_ENDPOINT = os.getenv('BACKEND_ENDPOINT', 'http://localhost:3000/api/translate')
GOOGLE_TRANSLATE_ENDPOINT = 'https://translate.googleapis.com/translate_a/single'
# The gtx endpoint tends to refuse requests without a browser User-Agent
GOOGLE_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'
OPENROUTER_API_KEY = os.getenv('OPENROUTER_API_KEY', '')
OPENROUTER_MODEL = os.getenv('OPENROUTER_MODEL', 'anthropic/claude-3.5-sonnet')
OPENROUTER_API_ENDPOINT = 'https://openrouter.ai/api/v1/chat/completions'

# Translation client
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '10'))
MAX_RETRIES = int(os.getenv('MAX_RETRIES', '2'))
RETRY_BACKOFF_BASE = float(os.getenv('RETRY_BACKOFF_BASE', '0.5'))
TRANSLATION_CACHE_SIZE = int(os.getenv('TRANSLATION_CACHE_SIZE', '1000'))

# Batch scheduling
MAX_CONCURRENT = int(os.getenv('MAX_CONCURRENT', '3'))
BATCH_DELAY = float(os.getenv('BATCH_DELAY', '0.2'))

# Chunking and shielding
MAX_CHUNK_SIZE = int(os.getenv('MAX_CHUNK_SIZE', '2000'))
MIN_VISIBLE_CHARS = int(os.getenv('MIN_VISIBLE_CHARS', '10'))

# Content validation heuristics
MAX_SIZE_LOSS_RATIO = float(os.getenv('MAX_SIZE_LOSS_RATIO', '0.5'))
MIN_TRANSLATED_LENGTH = int(os.getenv('MIN_TRANSLATED_LENGTH', '100'))
LARGE_ORIGINAL_LENGTH = int(os.getenv('LARGE_ORIGINAL_LENGTH', '1000'))

# Diff report: size changes at or below this many characters are noise
DIFF_SIZE_THRESHOLD = int(os.getenv('DIFF_SIZE_THRESHOLD', '100'))

# Default languages from environment
DEFAULT_SOURCE_LANGUAGE = os.getenv('DEFAULT_SOURCE_LANGUAGE', 'auto')
DEFAULT_TARGET_LANGUAGE = os.getenv('DEFAULT_TARGET_LANGUAGE', 'es')

SUPPORTED_LANGUAGES = {
    'auto': 'Auto-detect',
    'es': 'Spanish',
    'en': 'English',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'ru': 'Russian',
    'ja': 'Japanese',
    'ko': 'Korean',
    'zh': 'Chinese',
    'ar': 'Arabic',
    'hi': 'Hindi',
}
"""Language codes accepted by the backends ('auto' is only valid as source)"""

# EPUB container constants
MIMETYPE_ENTRY = 'mimetype'
CONTAINER_XML_ENTRY = 'META-INF/container.xml'

# .env may switch debug mode on
DEBUG_MODE = os.getenv('DEBUG_MODE', 'false').lower() == 'true'

if DEBUG_MODE or _debug_mode:
    _config_logger.setLevel(logging.DEBUG)
    _config_logger.debug("📋 epub-scribe settings:")
    for _name in ('BACKEND', 'BACKEND_ENDPOINT', 'OPENROUTER_MODEL', 'REQUEST_TIMEOUT', 'MAX_RETRIES',
                  'MAX_CONCURRENT', 'BATCH_DELAY', 'MAX_CHUNK_SIZE', 'TRANSLATION_CACHE_SIZE',
                  'DEFAULT_SOURCE_LANGUAGE', 'DEFAULT_TARGET_LANGUAGE'):
        _config_logger.debug(f"   {_name}: {globals()[_name]}")
    _config_logger.debug(f"   OPENROUTER_API_KEY: {'set' if OPENROUTER_API_KEY else '(not set)'}")


@dataclass
class TranslationConfig:
    """Per-run settings shared by the CLI and library callers"""

    # Core settings
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE

    # Backend settings
    backend: str = BACKEND
    endpoint: Optional[str] = None  # None: the backend's own default
    openrouter_api_key: str = OPENROUTER_API_KEY
    model: str = OPENROUTER_MODEL

    # Translation client
    timeout: float = REQUEST_TIMEOUT
    max_retries: int = MAX_RETRIES
    backoff_base: float = RETRY_BACKOFF_BASE
    cache_size: int = TRANSLATION_CACHE_SIZE

    # Scheduling and chunking
    max_concurrent: int = MAX_CONCURRENT
    batch_delay: float = BATCH_DELAY
    max_chunk_size: int = MAX_CHUNK_SIZE
    min_visible_chars: int = MIN_VISIBLE_CHARS

    # Validation heuristics
    max_size_loss_ratio: float = MAX_SIZE_LOSS_RATIO
    min_translated_length: int = MIN_TRANSLATED_LENGTH
    large_original_length: int = LARGE_ORIGINAL_LENGTH
    require_markup: bool = True

    # Diff report
    diff_size_threshold: int = DIFF_SIZE_THRESHOLD

    # Interface-specific
    enable_colors: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if self.max_chunk_size < 1:
            raise ValueError("max_chunk_size must be >= 1")
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if not 0 < self.max_size_loss_ratio <= 1:
            raise ValueError("max_size_loss_ratio must be in (0, 1]")
        if self.target_language == 'auto':
            raise ValueError("target_language cannot be 'auto'")

    @classmethod
    def from_cli_args(cls, args) -> 'TranslationConfig':
        """Create config from CLI arguments"""
        return cls(
            source_language=args.source_lang,
            target_language=args.target_lang,
            backend=args.backend,
            endpoint=getattr(args, 'endpoint', None),
            openrouter_api_key=getattr(args, 'openrouter_api_key', OPENROUTER_API_KEY),
            model=getattr(args, 'model', OPENROUTER_MODEL),
            max_concurrent=getattr(args, 'max_concurrent', MAX_CONCURRENT),
            max_chunk_size=getattr(args, 'chunk_size', MAX_CHUNK_SIZE),
            enable_colors=not args.no_color,
        )
