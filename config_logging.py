#!/usr/bin/env python3
"""
spellcore Configuration & Logging Module
========================================
Centralized runtime configuration, structured logging, and the error
hierarchy shared by every spellcore module.

Version: 1.0
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_MAX_TEXT_MB = 10            # Largest text body accepted by the HTTP surface
MAX_SAFE_TEXT_MB = 100              # Upper bound for the configurable limit
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

DEFAULT_MAX_TEXT_BYTES = DEFAULT_MAX_TEXT_MB * 1024 * 1024
MAX_SAFE_TEXT_BYTES = MAX_SAFE_TEXT_MB * 1024 * 1024

__version__ = "1.0.0"
VERSION = __version__
APP_NAME = "spellcore"

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Process-level configuration (logging targets and HTTP settings)."""

    # HTTP surface
    host: str = "127.0.0.1"
    port: int = 5060
    debug: bool = False
    max_content_length: int = DEFAULT_MAX_TEXT_BYTES

    # Paths
    base_dir: Path = field(default_factory=lambda: Path(__file__).parent)
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        # Force debug=False in production environment
        if os.environ.get('SPELLCORE_ENV', 'development').lower() == 'production':
            self.debug = False
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        return cls(
            host=os.environ.get('SPELLCORE_HOST', '127.0.0.1'),
            port=int(os.environ.get('SPELLCORE_PORT', '5060')),
            debug=os.environ.get('SPELLCORE_DEBUG', 'false').lower() == 'true',
            max_content_length=int(os.environ.get('SPELLCORE_MAX_TEXT', str(DEFAULT_MAX_TEXT_BYTES))),
            log_dir=Path(os.environ.get('SPELLCORE_LOG_DIR', str(Path(__file__).parent / 'logs'))),
            log_level=os.environ.get('SPELLCORE_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('SPELLCORE_LOG_FORMAT', 'json'),
            log_to_file=os.environ.get('SPELLCORE_LOG_TO_FILE', 'false').lower() == 'true',
            log_to_console=os.environ.get('SPELLCORE_LOG_TO_CONSOLE', 'true').lower() == 'true',
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if self.debug and os.environ.get('SPELLCORE_ENV') == 'production':
            errors.append("Debug mode cannot be enabled in production")

        if self.max_content_length > MAX_SAFE_TEXT_BYTES:
            errors.append(f"Max content length exceeds safe limit ({MAX_SAFE_TEXT_MB}MB)")

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        if self.log_level.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _build_log_record(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        """Build a structured log record."""
        return {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **kwargs
        }

    def _render(self, level: str, message: str, **kwargs) -> str:
        if self.config.log_format != 'json':
            return message
        return json.dumps(self._build_log_record(level, message, **kwargs), default=str)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(self._render('DEBUG', message, **kwargs), extra=kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._render('INFO', message, **kwargs), extra=kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._render('WARNING', message, **kwargs), extra=kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self.logger.error(self._render('ERROR', message, **kwargs), exc_info=exc_info, extra=kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    RESERVED = frozenset((
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'pathname', 'process', 'processName', 'relativeCreated',
        'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
        'message', 'taskName',
    ))

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self.RESERVED:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING UTILITIES
# =============================================================================

class SpellCoreError(Exception):
    """Base exception for spellcore."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(SpellCoreError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None,
                 code: str = "VALIDATION_ERROR", status_code: int = 400, **kwargs):
        super().__init__(message, code=code, status_code=status_code,
                         details={'field': field, **kwargs})


class InvalidWordError(ValidationError):
    """Word is empty or shorter than the dictionary minimum after normalization."""
    def __init__(self, word: str, min_length: int = 0):
        super().__init__(f"Invalid word: {word!r}", field='word', code="INVALID_WORD",
                         word=word, min_length=min_length)


class UnsupportedFormatError(ValidationError):
    """Word-list file extension is neither .csv nor .txt."""
    def __init__(self, path: str):
        super().__init__(f"Unsupported word list format: {path}", field='path',
                         code="UNSUPPORTED_FORMAT", status_code=415, path=str(path))


class FileError(SpellCoreError):
    """File handling error."""
    def __init__(self, message: str, path: Optional[str] = None,
                 code: str = "FILE_ERROR", **kwargs):
        super().__init__(message, code=code, status_code=500,
                         details={'path': str(path) if path else None, **kwargs})


class InvalidEncodingError(FileError):
    """Word-list content could not be decoded with any supported encoding."""
    def __init__(self, path: Optional[str] = None, tried: tuple = ()):
        super().__init__(f"Could not decode {path or 'content'} with any supported encoding",
                         path=path, code="INVALID_ENCODING", tried=list(tried))
        self.status_code = 400


class DictionaryNotFoundError(SpellCoreError):
    """No base word list for the language and no fallback available."""
    def __init__(self, language: str, searched: Optional[list] = None):
        super().__init__(f"Dictionary not found for language: {language}",
                         code="DICTIONARY_NOT_FOUND", status_code=404,
                         details={'language': language,
                                  'searched': [str(p) for p in (searched or [])]})


class EmptyDictionaryError(SpellCoreError):
    """Operation produced or required a word list with zero usable words."""
    def __init__(self, message: str = "Empty dictionary", **kwargs):
        super().__init__(message, code="EMPTY_DICTIONARY", status_code=422, details=kwargs)


class ProcessingError(SpellCoreError):
    """Unexpected failure while processing a request."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR", status_code=500,
                         details={'stage': stage, **kwargs})


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator translating OS and decode failures into SpellCoreError."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except SpellCoreError:
                raise
            except FileNotFoundError as e:
                _logger.error(f"File not found: {e}")
                raise FileError(f"File not found: {e}", path=e.filename, code="FILE_NOT_FOUND") from e
            except PermissionError as e:
                _logger.error(f"Permission denied: {e}")
                raise FileError(f"Permission denied: {e}", path=e.filename) from e
            except UnicodeError as e:
                _logger.error(f"Decode error in {func.__name__}: {e}")
                raise InvalidEncodingError() from e
            except OSError as e:
                _logger.error(f"IO error in {func.__name__}: {e}", exc_info=True)
                raise FileError(f"IO error: {e}", path=getattr(e, 'filename', None)) from e
        return wrapper
    return decorator
