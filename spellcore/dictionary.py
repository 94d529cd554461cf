"""
Dictionary Store
================
Per-language word lists with user-added and ignored words, plus a manager
that keeps one loaded Dictionary per language.

Word list formats:
- .csv: first column = word, optional second column = integer frequency,
  optional ``word`` header row
- .txt: one word per line. ``word<TAB>count`` or a two-field
  ``word count`` line carries a frequency; ``#`` followed by whitespace
  starts a comment

User state lives under ``<user_data_dir>/user_dictionaries`` as
``user_words(<code>).txt`` and ``ignored_words(<code>).txt``.
"""

import csv
import io
import time
import codecs
import threading
from concurrent.futures import ThreadPoolExecutor
from importlib import resources
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

import regex as re

from config_logging import (
    get_logger, handle_errors, ValidationError, InvalidWordError,
    UnsupportedFormatError, FileError, InvalidEncodingError,
    DictionaryNotFoundError,
)

from .classifier import looks_like_code_identifier
from .config import DictionaryConfig
from .language import Language, ENGLISH, normalize, detect_language, all_languages

logger = get_logger('spellcore.dictionary')

# Frequency list shipped inside the symspellpy distribution
BUNDLED_ENGLISH = "frequency_dictionary_en_82_765.txt"

SUPPORTED_FORMATS = ('.csv', '.txt')
FALLBACK_ENCODINGS = ('utf-8-sig', 'cp1252')
USER_DIR_NAME = 'user_dictionaries'
LOAD_CHUNK_SIZE = 5000
MIN_LETTERS_WITH_DIGITS = 3

# "#" alone or followed by whitespace; "#hashtag" is a word
COMMENT_LINE = re.compile(r"#(?:\s|$)")

WordEntry = Tuple[str, Optional[int]]


# =============================================================================
# WORD LIST FILES
# =============================================================================

def decode_bytes(data: bytes, path: Optional[Path] = None) -> str:
    """
    Decode word list content.

    UTF-16 is only attempted when a UTF-16 BOM is present. UTF-8 (with or
    without BOM) comes next, then cp1252.
    """
    encodings = list(FALLBACK_ENCODINGS)
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        encodings.insert(0, 'utf-16')

    for encoding in encodings:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue

    raise InvalidEncodingError(str(path) if path else None, tried=tuple(encodings))


def check_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(str(path))
    return suffix


def _parse_frequency(value: str) -> Optional[int]:
    value = value.strip()
    return int(value) if value.isdigit() else None


def parse_word_list(text: str, fmt: str) -> List[WordEntry]:
    """Parse decoded word list text into (word, frequency) entries."""
    entries = []
    if fmt == '.csv':
        for index, row in enumerate(csv.reader(io.StringIO(text))):
            if not row or not row[0].strip():
                continue
            word = row[0].strip()
            if index == 0 and word.lower() == 'word':
                continue
            frequency = _parse_frequency(row[1]) if len(row) > 1 else None
            entries.append((word, frequency))
    else:
        for line in text.splitlines():
            entry = _parse_txt_line(line)
            if entry is not None:
                entries.append(entry)
    return entries


def _parse_txt_line(line: str) -> Optional[WordEntry]:
    """
    One .txt line as (word, frequency), or None for blanks and comments.

    A tab separates an explicit frequency. Without a tab, a second field is
    a frequency only when the line has exactly two fields and the second is
    all digits; otherwise the whole line is the word.
    """
    if '\t' in line:
        word, _, tail = line.rpartition('\t')
        frequency = _parse_frequency(tail)
        if frequency is not None and word.strip():
            return word.strip(), frequency
    line = line.strip()
    if not line or COMMENT_LINE.match(line):
        return None
    parts = line.split()
    if len(parts) == 2 and parts[1].isdigit():
        return parts[0], int(parts[1])
    return line, None


def _format_txt_line(word: str, frequency: Optional[int]) -> str:
    """word<TAB>frequency, or the plain word when it has no frequency and reads back unchanged."""
    if frequency is None and _parse_txt_line(word) == (word, None):
        return word
    return f"{word}\t{1 if frequency is None else frequency}"


@handle_errors(logger)
def read_word_file(path) -> List[WordEntry]:
    """Read a .csv or .txt word list."""
    path = Path(path)
    fmt = check_format(path)
    return parse_word_list(decode_bytes(path.read_bytes(), path), fmt)


@handle_errors(logger)
def write_word_file(path, words: Iterable[str],
                    frequencies: Optional[Dict[str, int]] = None) -> int:
    """Write words sorted; .csv gets a word,frequency header. Returns rows written."""
    path = Path(path)
    fmt = check_format(path)
    frequencies = frequencies or {}
    ordered = sorted(words)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        if fmt == '.csv':
            writer = csv.writer(f)
            writer.writerow(['word', 'frequency'])
            for word in ordered:
                writer.writerow([word, frequencies.get(word, 1)])
        else:
            for word in ordered:
                f.write(_format_txt_line(word, frequencies.get(word)) + '\n')
    return len(ordered)


def bundled_english_path() -> Optional[Path]:
    """Path of the English frequency list that ships with symspellpy."""
    resource = resources.files('symspellpy').joinpath(BUNDLED_ENGLISH)
    path = Path(str(resource))
    return path if path.is_file() else None


def candidate_directories(config: DictionaryConfig) -> List[Path]:
    """Directories searched for base word lists, in priority order."""
    dirs = list(config.search_paths)
    if config.include_default_dirs:
        dirs.extend([
            Path(__file__).parent / 'dictionaries',
            Path('src') / 'dictionary',
            Path('dictionary'),
            config.user_data_path,
            Path('.'),
        ])
    return dirs


def _normalize_chunk(entries: List[WordEntry], language: Language,
                     min_length: int) -> Tuple[Set[str], Dict[str, int]]:
    words = set()
    frequencies = {}
    for word, frequency in entries:
        norm = normalize(word, language)
        if len(norm) < min_length:
            continue
        words.add(norm)
        if frequency is not None:
            frequencies[norm] = max(frequency, frequencies.get(norm, 0))
    return words, frequencies


# =============================================================================
# DICTIONARY
# =============================================================================

class Dictionary:
    """
    Word store for one language.

    The base word set is read-only after load(); user and ignore mutations
    are serialized by a per-dictionary lock and bump ``revision``.
    """

    def __init__(self, language: Language, config: Optional[DictionaryConfig] = None):
        if language.is_auto:
            raise ValidationError("AutoDetect has no dictionary; resolve the language first",
                                  field='language')
        self.language = language
        self.config = config or DictionaryConfig()
        self.min_word_length = self.config.min_word_length

        self._words: Set[str] = set()
        self._user_words: Set[str] = set()
        self._ignored: Set[str] = set()
        self.frequencies: Dict[str, int] = {}

        self.is_loaded = False
        self.source_path: Optional[Path] = None
        self.revision = 0
        self._lock = threading.RLock()

    def __repr__(self):
        return f"Dictionary({self.language.code}, words={len(self._words)}, loaded={self.is_loaded})"

    # -- properties ---------------------------------------------------------

    @property
    def words(self) -> FrozenSet[str]:
        return frozenset(self._words)

    @property
    def user_words(self) -> FrozenSet[str]:
        return frozenset(self._user_words)

    @property
    def ignored(self) -> FrozenSet[str]:
        return frozenset(self._ignored)

    @property
    def word_count(self) -> int:
        return len(self._words)

    @property
    def user_dir(self) -> Path:
        return self.config.user_data_path / USER_DIR_NAME

    @property
    def user_words_path(self) -> Path:
        return self.user_dir / f"user_words({self.language.code}).txt"

    @property
    def ignored_words_path(self) -> Path:
        return self.user_dir / f"ignored_words({self.language.code}).txt"

    # -- loading ------------------------------------------------------------

    def find_word_list(self, language: Optional[Language] = None) -> Optional[Path]:
        """First base list for language: CSV anywhere, then TXT, then bundled English."""
        language = language or self.language
        dirs = candidate_directories(self.config)
        for ext in ('csv', 'txt'):
            filename = language.dictionary_filename(ext)
            for directory in dirs:
                path = directory / filename
                if path.is_file():
                    return path
        if language == ENGLISH and self.config.use_bundled_english:
            return bundled_english_path()
        return None

    def load(self) -> 'Dictionary':
        """
        Load the base word list and merge user state. Idempotent.

        Raises:
            DictionaryNotFoundError: no list for the language or the default
        """
        with self._lock:
            if self.is_loaded:
                return self

            start = time.time()
            path = self.find_word_list()
            if path is None:
                default = Language.from_code(self.config.default_language)
                if default != self.language:
                    path = self.find_word_list(default)
                    if path is not None:
                        logger.warning("Dictionary not found, using default language",
                                       language=self.language.code,
                                       fallback=default.code, path=str(path))
            if path is None:
                raise DictionaryNotFoundError(self.language.code,
                                              searched=candidate_directories(self.config))

            words, frequencies = self._load_entries(read_word_file(path))
            self._words = words
            self.frequencies = frequencies
            self.source_path = path
            self._merge_user_state()
            self.is_loaded = True
            self.revision += 1

            if not self._words:
                logger.warning("Empty dictionary loaded", code="EMPTY_DICTIONARY",
                               language=self.language.code, path=str(path))
            logger.info("Dictionary loaded", language=self.language.code, path=str(path),
                        word_count=len(self._words),
                        duration_ms=round((time.time() - start) * 1000, 2))
            return self

    def _load_entries(self, entries: List[WordEntry]) -> Tuple[Set[str], Dict[str, int]]:
        workers = self.config.load_workers
        if workers <= 1 or len(entries) <= LOAD_CHUNK_SIZE:
            return _normalize_chunk(entries, self.language, self.min_word_length)

        chunks = [entries[i:i + LOAD_CHUNK_SIZE]
                  for i in range(0, len(entries), LOAD_CHUNK_SIZE)]
        words: Set[str] = set()
        frequencies: Dict[str, int] = {}
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = executor.map(
                lambda chunk: _normalize_chunk(chunk, self.language, self.min_word_length),
                chunks)
            for chunk_words, chunk_freq in results:
                words |= chunk_words
                for word, frequency in chunk_freq.items():
                    frequencies[word] = max(frequency, frequencies.get(word, 0))
        return words, frequencies

    def _read_user_file(self, path: Path) -> Set[str]:
        if not path.is_file():
            return set()
        try:
            entries = read_word_file(path)
        except FileError as e:
            logger.warning(f"Could not read user word file: {e.message}", path=str(path))
            return set()
        words, _ = _normalize_chunk(entries, self.language, 1)
        return words

    def _merge_user_state(self):
        self._user_words = self._read_user_file(self.user_words_path)
        self._ignored = self._read_user_file(self.ignored_words_path) - self._user_words
        self._words |= self._user_words

    # -- lookup -------------------------------------------------------------

    def contains(self, word: str, case_sensitive: bool = False,
                 is_code_context: bool = False) -> bool:
        """
        True when the token should not be flagged.

        Short, ignored, digit-heavy and (in code context) identifier-shaped
        tokens pass without a membership test.
        """
        if not word:
            return True
        token = word.strip()
        if len(token) < self.min_word_length:
            return True

        norm = normalize(token, self.language)
        if norm in self._ignored:
            return True

        if not self.language.is_cjk and any(c.isdigit() for c in token):
            if sum(1 for c in token if c.isalpha()) < MIN_LETTERS_WITH_DIGITS:
                return True

        if is_code_context and looks_like_code_identifier(token):
            return True

        if case_sensitive:
            return token in self._words
        # CJK keeps norm verbatim, so Latin words need the lower-cased form too
        return norm in self._words or token.lower() in self._words

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    def is_ignored(self, word: str) -> bool:
        return normalize(word, self.language) in self._ignored

    def is_user_word(self, word: str) -> bool:
        return normalize(word, self.language) in self._user_words

    # -- mutation -----------------------------------------------------------

    def _validated(self, word: str) -> str:
        norm = normalize(word or '', self.language)
        if not norm or len(norm) < self.min_word_length:
            raise InvalidWordError(word or '', self.min_word_length)
        return norm

    def _persist(self, path: Path, words: Iterable[str]):
        try:
            write_word_file(path, words)
        except FileError as e:
            logger.error("Could not persist user word list", path=str(path),
                         language=self.language.code, error=e.message)
            raise

    def add_word(self, word: str) -> str:
        """
        Add word to the known and user sets and persist the user list.

        Raises:
            InvalidWordError: empty or too short after normalization
            FileError: the user list could not be written (the word stays
                usable for this session)
        """
        norm = self._validated(word)
        with self._lock:
            self._words.add(norm)
            self._user_words.add(norm)
            self._ignored.discard(norm)
            self.revision += 1
            user_words = sorted(self._user_words)
            ignored = sorted(self._ignored)
        self._persist(self.user_words_path, user_words)
        if self.ignored_words_path.exists():
            self._persist(self.ignored_words_path, ignored)
        return norm

    def ignore_word(self, word: str) -> str:
        """Add word to the ignored set and persist the ignored list."""
        norm = self._validated(word)
        with self._lock:
            self._ignored.add(norm)
            self.revision += 1
            ignored = sorted(self._ignored)
        self._persist(self.ignored_words_path, ignored)
        return norm

    def clear_ignored(self):
        with self._lock:
            self._ignored.clear()
            self.revision += 1
        self._persist(self.ignored_words_path, [])

    def remove_word(self, word: str) -> bool:
        """Remove word from the known and user sets. Returns True if it was known."""
        norm = normalize(word or '', self.language)
        with self._lock:
            present = norm in self._words
            self._words.discard(norm)
            was_user = norm in self._user_words
            self._user_words.discard(norm)
            self.frequencies.pop(norm, None)
            if present:
                self.revision += 1
            user_words = sorted(self._user_words)
        if was_user:
            self._persist(self.user_words_path, user_words)
        return present

    def export_to_file(self, path) -> int:
        """Write the known word set to a .csv or .txt file."""
        path = Path(path)
        check_format(path)
        with self._lock:
            words = set(self._words)
            frequencies = dict(self.frequencies)
        count = write_word_file(path, words, frequencies)
        logger.info("Dictionary exported", language=self.language.code,
                    path=str(path), word_count=count)
        return count

    def import_from_file(self, path) -> int:
        """Merge a .csv or .txt word list into the known set. Returns new words added."""
        path = Path(path)
        words, frequencies = self._load_entries(read_word_file(path))
        with self._lock:
            new_words = words - self._words
            self._words |= words
            for word, frequency in frequencies.items():
                self.frequencies[word] = max(frequency, self.frequencies.get(word, 0))
            self.revision += 1
        logger.info("Dictionary imported", language=self.language.code,
                    path=str(path), added=len(new_words))
        return len(new_words)

    @classmethod
    def from_file(cls, path, language: Language,
                  config: Optional[DictionaryConfig] = None) -> 'Dictionary':
        """Build a loaded dictionary straight from one word list file."""
        dictionary = cls(language, config)
        path = Path(path)
        with dictionary._lock:
            words, frequencies = dictionary._load_entries(read_word_file(path))
            dictionary._words = words
            dictionary.frequencies = frequencies
            dictionary.source_path = path
            dictionary._merge_user_state()
            dictionary.is_loaded = True
            dictionary.revision += 1
        if not dictionary._words:
            logger.warning("Empty dictionary loaded", code="EMPTY_DICTIONARY",
                           language=language.code, path=str(path))
        return dictionary

    def stats(self) -> Dict[str, object]:
        return {
            'language': self.language.code,
            'word_count': len(self._words),
            'user_words': len(self._user_words),
            'ignored_words': len(self._ignored),
            'is_loaded': self.is_loaded,
            'source_path': str(self.source_path) if self.source_path else None,
        }


# =============================================================================
# DICTIONARY MANAGER
# =============================================================================

class DictionaryManager:
    """
    One live Dictionary per language.

    Load-or-fetch is atomic per language: a per-language lock (created
    under the global lock) guards the lazy load, so concurrent callers for
    the same language wait for a single load.
    """

    def __init__(self, config: Optional[DictionaryConfig] = None):
        self.config = config or DictionaryConfig()
        self._dictionaries: Dict[Language, Dictionary] = {}
        self._locks: Dict[Language, threading.Lock] = {}
        self._global_lock = threading.Lock()

    def _lock_for(self, language: Language) -> threading.Lock:
        with self._global_lock:
            lock = self._locks.get(language)
            if lock is None:
                lock = self._locks[language] = threading.Lock()
            return lock

    @staticmethod
    def _require_concrete(language: Language):
        if language.is_auto:
            raise ValidationError("AutoDetect must be resolved before dictionary lookup",
                                  field='language')

    def get_dictionary(self, language: Language) -> Dictionary:
        """Cached dictionary for language, loading it on first use."""
        self._require_concrete(language)
        cached = self._dictionaries.get(language)
        if cached is not None:
            return cached
        with self._lock_for(language):
            cached = self._dictionaries.get(language)
            if cached is None:
                cached = Dictionary(language, self.config).load()
                self._dictionaries[language] = cached
            return cached

    def reload_dictionary(self, language: Language) -> Dictionary:
        """Fresh load that replaces the cache slot."""
        self._require_concrete(language)
        with self._lock_for(language):
            dictionary = Dictionary(language, self.config).load()
            self._dictionaries[language] = dictionary
        logger.info("Dictionary reloaded", language=language.code,
                    word_count=dictionary.word_count)
        return dictionary

    def add_custom_dictionary(self, path, language: Language) -> Dictionary:
        """Install a dictionary built from a word list file for language."""
        self._require_concrete(language)
        with logger.log_operation("install_custom_dictionary", language=language.code,
                                  path=str(path)):
            dictionary = Dictionary.from_file(path, language, self.config)
            with self._lock_for(language):
                self._dictionaries[language] = dictionary
        return dictionary

    def get_cached_dictionary(self, language: Language) -> Optional[Dictionary]:
        return self._dictionaries.get(language)

    def evict(self, language: Language) -> bool:
        with self._lock_for(language):
            return self._dictionaries.pop(language, None) is not None

    def cached_languages(self) -> List[Language]:
        return list(self._dictionaries)

    def available_languages(self) -> List[Language]:
        """Catalog languages that have a base list on disk (or bundled)."""
        finder = Dictionary(ENGLISH, self.config)
        available = []
        for language in all_languages():
            if language.is_auto:
                continue
            if language in self._dictionaries or finder.find_word_list(language) is not None:
                available.append(language)
        return available

    @staticmethod
    def detect_language(text: str) -> Language:
        return detect_language(text)
