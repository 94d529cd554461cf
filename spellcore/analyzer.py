"""
Document Analyzer
=================
Runs classify -> skip -> resolve -> score -> suggest over every token of a
document and aggregates the results.

State that outlives a single check (dictionary manager, correctness cache,
suggestion indexes, session ignore list) is owned by a SpellChecker and
can be injected, so tests and embedding applications control its scope.
"""

import time
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, NamedTuple, Optional, Union

from config_logging import get_logger, ProcessingError, SpellCoreError

from .classifier import classify, CODE_PREFIXES, CODE_SUFFIXES
from .config import CheckerConfig, SpellCoreConfig, get_config
from .dictionary import Dictionary, DictionaryManager
from .language import Language, ENGLISH, normalize, resolve_language
from .models import WordCategory, WordCheck, DocumentAnalysis
from .resolver import CorrectnessCache, CorrectnessResolver
from .scorer import calculate_confidence
from .suggestions import SuggestionGenerator
from .textstats import calculate_accuracy
from .tokenizer import Tokenizer, is_code_file, is_likely_code, starts_sentence

logger = get_logger('spellcore.analyzer')

MAX_SKIPPED_CODE_LENGTH = 3

Options = Union[CheckerConfig, Dict, None]


class _CheckContext(NamedTuple):
    language: Language
    dictionary: Dictionary
    tokenizer: Tokenizer
    is_code: bool
    options: CheckerConfig
    session_ignored: frozenset
    common_acronyms: frozenset


class _LineResult(NamedTuple):
    words: List[WordCheck]
    total: int
    misspelled: int
    suggestions: int


class SpellChecker:
    """
    Spell checker bound to an active language.

    Args:
        language: Active language (AutoDetect resolves per document)
        options: Checker options; defaults come from the global config
        dictionary_manager: Shared dictionary cache
        cache: Correctness cache
        suggester: Suggestion generator
        common_acronyms: Acronyms that are never checked
        proper_nouns: Known names that are never checked
        config: Full configuration used to build missing collaborators
    """

    def __init__(
        self,
        language: Language = ENGLISH,
        options: Optional[CheckerConfig] = None,
        dictionary_manager: Optional[DictionaryManager] = None,
        cache: Optional[CorrectnessCache] = None,
        suggester: Optional[SuggestionGenerator] = None,
        common_acronyms: Optional[Iterable[str]] = None,
        proper_nouns: Optional[Iterable[str]] = None,
        config: Optional[SpellCoreConfig] = None,
    ):
        config = config or get_config()
        self.options = (options or config.checker).validate()
        self.dictionary_manager = dictionary_manager or DictionaryManager(config.dictionary)
        self.cache = cache if cache is not None else CorrectnessCache()
        self.resolver = CorrectnessResolver(self.cache)
        self.suggester = suggester or SuggestionGenerator(
            max_edit_distance=config.dictionary.max_edit_distance,
            prefix_length=config.dictionary.prefix_length
        )

        if common_acronyms is None:
            common_acronyms = self.options.common_acronyms
        self.common_acronyms = {a.lower() for a in common_acronyms}
        self._added_acronyms = set()
        self.proper_nouns = {n.lower() for n in (proper_nouns or ())}
        self._session_ignored = set()
        self._lock = threading.RLock()

        self.language = Language.from_code(language, allow_custom=True) \
            if isinstance(language, str) else language
        if not self.language.is_auto:
            try:
                self.dictionary_manager.get_dictionary(self.language)
            except SpellCoreError as e:
                logger.warning(f"Could not load dictionary: {e.message}",
                               language=self.language.code)

    # -- language -----------------------------------------------------------

    def set_language(self, language: Language):
        """
        Switch the active language.

        The dictionary is loaded first (errors propagate); the correctness
        cache is then cleared before any further lookup.
        """
        if isinstance(language, str):
            language = Language.from_code(language, allow_custom=True)
        if not language.is_auto:
            self.dictionary_manager.get_dictionary(language)
        with self._lock:
            if language != self.language:
                self.language = language
                self.cache.clear()
                logger.info("Language changed", language=language.code)

    def _dictionary(self, language: Optional[Language] = None) -> Dictionary:
        with self._lock:
            language = language or self.language
        if isinstance(language, str):
            language = Language.from_code(language, allow_custom=True)
        return self.dictionary_manager.get_dictionary(language)

    # -- analysis -----------------------------------------------------------

    def _resolve_options(self, options: Options) -> CheckerConfig:
        if options is None:
            return self.options
        if isinstance(options, CheckerConfig):
            return options.validate()
        return self.options.replace(**options)

    def _acronyms_for(self, options: Options, opts: CheckerConfig) -> frozenset:
        """
        Acronyms for one call. An explicit per-call list replaces the
        configured one; acronyms added with add_acronym() always apply.
        """
        explicit = (isinstance(options, dict) and 'common_acronyms' in options) \
            or (isinstance(options, CheckerConfig) and options is not self.options)
        with self._lock:
            if not explicit:
                return frozenset(self.common_acronyms)
            return frozenset(a.lower() for a in opts.common_acronyms) | self._added_acronyms

    def should_skip(self, token: str, category: WordCategory,
                    common_acronyms: Optional[frozenset] = None) -> bool:
        """Tokens that are reported correct without being counted."""
        if category == WordCategory.ACRONYM:
            if common_acronyms is None:
                common_acronyms = self.common_acronyms
            return token.lower() in common_acronyms
        if category == WordCategory.CODE_IDENTIFIER:
            return (len(token) <= MAX_SKIPPED_CODE_LENGTH
                    or token.isdigit()
                    or token.startswith('0x')
                    or '__' in token
                    or token.startswith(CODE_PREFIXES)
                    or token.endswith(CODE_SUFFIXES))
        if category == WordCategory.PROPER_NOUN:
            return token.lower() in self.proper_nouns
        return False

    def analyze(self, text: str, language: Optional[Language] = None,
                filename: Optional[str] = None, options: Options = None) -> DocumentAnalysis:
        """
        Check text and return a DocumentAnalysis.

        Never raises for document content: when the dictionary cannot be
        loaded or checking fails, the result has zero totals and 100%
        accuracy.

        Raises:
            ValidationError: options are out of range
        """
        opts = self._resolve_options(options)
        start = time.time()
        text = text or ''

        with self._lock:
            requested = language or self.language
            session_ignored = frozenset(self._session_ignored)
        if isinstance(requested, str):
            requested = Language.from_code(requested, allow_custom=True)

        resolved = ENGLISH
        try:
            resolved = resolve_language(requested, text)
            dictionary = self.dictionary_manager.get_dictionary(resolved)
        except SpellCoreError as e:
            logger.warning(f"Analysis skipped: {e.message}", language=resolved.code,
                           error_code=e.code)
            return DocumentAnalysis.empty(resolved, filename, error=e.code)

        try:
            is_code = is_code_file(filename) or is_likely_code(text)
            ctx = _CheckContext(
                language=resolved,
                dictionary=dictionary,
                tokenizer=Tokenizer.for_context(resolved, is_code),
                is_code=is_code,
                options=opts,
                session_ignored=session_ignored,
                common_acronyms=self._acronyms_for(options, opts),
            )
            lines = text.splitlines()
            results = self._check_lines(lines, ctx)
        except Exception as e:
            error = ProcessingError(f"Analysis failed: {e}", stage="check_lines")
            logger.exception(error.message, language=resolved.code)
            return DocumentAnalysis.empty(resolved, filename, error=error.code)

        words: List[WordCheck] = []
        total = misspelled = suggestions = 0
        for result in results:
            words.extend(result.words)
            total += result.total
            misspelled += result.misspelled
            suggestions += result.suggestions

        duration_ms = (time.time() - start) * 1000
        logger.debug("Document analyzed", language=resolved.code, lines=len(lines),
                     total_words=total, misspelled_words=misspelled,
                     duration_ms=round(duration_ms, 2))

        return DocumentAnalysis(
            total_words=total,
            misspelled_words=misspelled,
            accuracy=calculate_accuracy(total - misspelled, total),
            words=tuple(words),
            suggestions_count=suggestions,
            language=resolved,
            lines_checked=len(lines),
            check_duration_ms=duration_ms,
            likely_code=is_code,
            file_type=filename,
        )

    def _check_lines(self, lines: List[str], ctx: _CheckContext) -> List[_LineResult]:
        workers = ctx.options.workers
        if workers > 1 and len(lines) >= ctx.options.parallel_line_threshold:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order, which keeps document order
                return list(executor.map(
                    lambda item: self._check_line(item[0], item[1], ctx),
                    enumerate(lines, start=1)))
        return [self._check_line(number, line, ctx)
                for number, line in enumerate(lines, start=1)]

    def _check_line(self, line_number: int, line: str, ctx: _CheckContext) -> _LineResult:
        opts = ctx.options
        words = []
        total = misspelled = suggestion_count = 0

        for token in ctx.tokenizer.tokenize(line):
            sentence_start = not ctx.is_code and starts_sentence(line, token.start)
            category = classify(token.text, ctx.is_code, sentence_start)
            norm = normalize(token.text, ctx.language)

            if self.should_skip(token.text, category, ctx.common_acronyms):
                words.append(WordCheck(
                    word=norm, original=token.text, start=token.start, end=token.end,
                    line=line_number, column=token.start + 1, is_correct=True,
                    confidence=1.0, category=category,
                ))
                continue

            is_correct = self.resolver.resolve(
                token.text, category, ctx.dictionary,
                is_code_context=ctx.is_code,
                case_sensitive=opts.case_sensitive,
                session_ignored=ctx.session_ignored,
            )
            confidence = calculate_confidence(token.text, category, is_correct)
            flagged = not is_correct and confidence >= opts.confidence_threshold

            total += 1
            suggestions = ()
            if flagged:
                misspelled += 1
                if opts.suggestions_enabled:
                    suggestions = tuple(self.suggester.suggest(
                        token.text, ctx.dictionary, opts.max_suggestions))
                    suggestion_count += len(suggestions)

            words.append(WordCheck(
                word=norm, original=token.text, start=token.start, end=token.end,
                line=line_number, column=token.start + 1, is_correct=not flagged,
                confidence=confidence, category=category, suggestions=suggestions,
            ))

        return _LineResult(words, total, misspelled, suggestion_count)

    # -- word list mutation -------------------------------------------------

    def add_word(self, word: str, language: Optional[Language] = None) -> str:
        return self._dictionary(language).add_word(word)

    def ignore_word(self, word: str, language: Optional[Language] = None) -> str:
        return self._dictionary(language).ignore_word(word)

    def ignore_for_session(self, word: str) -> str:
        """
        Ignore word in this checker only; nothing is persisted.

        Entries are stored lower-cased, independent of the active language,
        and match tokens of any analysis language.
        """
        key = (word or '').strip().lower()
        if key:
            with self._lock:
                self._session_ignored.add(key)
        return key

    @property
    def session_ignored(self) -> frozenset:
        return frozenset(self._session_ignored)

    def clear_ignored(self, language: Optional[Language] = None, include_session: bool = True):
        self._dictionary(language).clear_ignored()
        if include_session:
            with self._lock:
                self._session_ignored.clear()

    def remove_word(self, word: str, language: Optional[Language] = None) -> bool:
        dictionary = self._dictionary(language)
        removed = dictionary.remove_word(word)
        self.cache.clear_language(dictionary.language)
        return removed

    def import_dictionary(self, path, language: Optional[Language] = None) -> int:
        dictionary = self._dictionary(language)
        added = dictionary.import_from_file(path)
        self.cache.clear_language(dictionary.language)
        return added

    def export_dictionary(self, path, language: Optional[Language] = None) -> int:
        return self._dictionary(language).export_to_file(path)

    def reload_dictionary(self, language: Optional[Language] = None) -> Dictionary:
        """Reload from disk; every cached verdict is dropped."""
        with self._lock:
            language = language or self.language
        if isinstance(language, str):
            language = Language.from_code(language, allow_custom=True)
        dictionary = self.dictionary_manager.reload_dictionary(language)
        self.cache.clear()
        return dictionary

    def add_proper_noun(self, name: str):
        with self._lock:
            self.proper_nouns.add(name.strip().lower())

    def add_acronym(self, acronym: str):
        key = acronym.strip().lower()
        with self._lock:
            self.common_acronyms.add(key)
            self._added_acronyms.add(key)


# =============================================================================
# MODULE-LEVEL ENTRY POINTS
# =============================================================================

_default_checker: Optional[SpellChecker] = None
_default_lock = threading.Lock()


def default_checker() -> SpellChecker:
    """Lazily created checker built from the global configuration."""
    global _default_checker
    with _default_lock:
        if _default_checker is None:
            _default_checker = SpellChecker()
        return _default_checker


def reset_default_checker():
    global _default_checker
    with _default_lock:
        _default_checker = None


def analyze(text: str, language: Language = ENGLISH, filename_hint: Optional[str] = None,
            config: Options = None, checker: Optional[SpellChecker] = None) -> DocumentAnalysis:
    """Check text under language; see SpellChecker.analyze."""
    checker = checker or default_checker()
    return checker.analyze(text, language, filename_hint, options=config)


def add_word(word: str, language: Language, checker: Optional[SpellChecker] = None) -> str:
    return (checker or default_checker()).add_word(word, language)


def ignore_word(word: str, language: Language, checker: Optional[SpellChecker] = None) -> str:
    return (checker or default_checker()).ignore_word(word, language)


def clear_ignored(language: Language, checker: Optional[SpellChecker] = None):
    (checker or default_checker()).clear_ignored(language)


def import_dictionary(path, language: Language, checker: Optional[SpellChecker] = None) -> int:
    return (checker or default_checker()).import_dictionary(path, language)


def export_dictionary(language: Language, path, checker: Optional[SpellChecker] = None) -> int:
    return (checker or default_checker()).export_dictionary(path, language)
