"""
Tests for Dictionary Store
==========================
Loading, lookup rules, persisted mutations, import/export and the manager.
"""

import codecs
import threading

import pytest

from config_logging import (
    DictionaryNotFoundError, FileError, InvalidEncodingError, InvalidWordError,
    UnsupportedFormatError, ValidationError,
)
from spellcore.config import DictionaryConfig
from spellcore.dictionary import (
    Dictionary, DictionaryManager, decode_bytes, read_word_file, parse_word_list,
    write_word_file,
)
from spellcore.language import (
    ENGLISH, FRENCH, JAPANESE, AUTO_DETECT, Language,
)


class TestDecoding:
    """Tests for decode fallback."""

    def test_utf8_with_bom(self):
        assert decode_bytes(codecs.BOM_UTF8 + "café".encode('utf-8')) == "café"

    def test_utf16_with_bom(self):
        assert decode_bytes("naïve\n".encode('utf-16')) == "naïve\n"

    def test_cp1252_fallback(self):
        assert decode_bytes("résumé".encode('cp1252')) == "résumé"

    def test_undecodable(self):
        # 0x81 is undefined in cp1252 and invalid as a UTF-8 start byte
        with pytest.raises(InvalidEncodingError):
            decode_bytes(b"\x81\x81")


class TestWordListFiles:
    """Tests for word list parsing."""

    def test_csv_with_header_and_frequency(self):
        entries = parse_word_list("word,frequency\nhello,10\nworld\n", '.csv')
        assert entries == [("hello", 10), ("world", None)]

    def test_txt_comments_and_frequency(self):
        entries = parse_word_list("# comment\nthe 500\n\nfox\n", '.txt')
        assert entries == [("the", 500), ("fox", None)]

    def test_txt_whole_line_words(self):
        text = "#hashtag\n# comment\nnew york\nfox\t7\nyork 5\t1\n"
        assert parse_word_list(text, '.txt') == [
            ("#hashtag", None), ("new york", None), ("fox", 7), ("york 5", 1),
        ]

    def test_txt_writer_escapes_ambiguous_words(self, tmp_path):
        path = tmp_path / "out.txt"
        words = ["# note", "#hashtag", "new york", "york 5"]
        write_word_file(path, words)
        assert sorted(word for word, _ in read_word_file(path)) == sorted(words)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("[]")
        with pytest.raises(UnsupportedFormatError):
            read_word_file(path)


class TestLoad:
    """Tests for Dictionary.load()."""

    def test_load_txt(self, english):
        assert english.is_loaded
        assert "quick" in english.words
        assert english.source_path.name == "dictionary(eng).txt"

    def test_csv_preferred_over_txt(self, dictionary_dir, dict_config):
        (dictionary_dir / "dictionary(eng).csv").write_text("word,frequency\nalpha,3\nbeta,1\n")
        dictionary = Dictionary(ENGLISH, dict_config).load()
        assert dictionary.words == {"alpha", "beta"}
        assert dictionary.frequencies["alpha"] == 3

    def test_load_is_idempotent(self, dict_config):
        dictionary = Dictionary(ENGLISH, dict_config)
        dictionary.load()
        count = dictionary.word_count
        dictionary.load()
        assert dictionary.word_count == count

    def test_words_are_normalized(self, dictionary_dir, dict_config):
        (dictionary_dir / "dictionary(fra).txt").write_text("Bonjour\nÉTÉ\n", encoding='utf-8')
        dictionary = Dictionary(FRENCH, dict_config).load()
        assert dictionary.words == {"bonjour", "été"}

    def test_cjk_words_verbatim(self, dictionary_dir, dict_config):
        (dictionary_dir / "dictionary(jpn).txt").write_text("日本語\nカタカナ\n", encoding='utf-8')
        dictionary = Dictionary(JAPANESE, dict_config).load()
        assert dictionary.contains("日本語")

    def test_fallback_to_default_language(self, dict_config):
        dictionary = Dictionary(FRENCH, dict_config).load()
        assert dictionary.language == FRENCH
        assert "quick" in dictionary.words

    def test_not_found(self, tmp_path):
        config = DictionaryConfig(search_dirs=[str(tmp_path)], include_default_dirs=False,
                                  user_data_dir=str(tmp_path / "u"), use_bundled_english=False)
        with pytest.raises(DictionaryNotFoundError):
            Dictionary(ENGLISH, config).load()

    def test_empty_dictionary_is_not_an_error(self, dictionary_dir, dict_config):
        (dictionary_dir / "dictionary(eng).txt").write_text("# nothing here\n")
        dictionary = Dictionary(ENGLISH, dict_config).load()
        assert dictionary.is_loaded
        assert dictionary.word_count == 0

    def test_parallel_load_matches_sequential(self, dictionary_dir, dict_config):
        words = [f"word{chr(97 + i % 26)}{i:05d}x" for i in range(12000)]
        (dictionary_dir / "dictionary(eng).txt").write_text("\n".join(words))
        sequential = Dictionary(ENGLISH, dict_config).load()
        dict_config.load_workers = 4
        parallel = Dictionary(ENGLISH, dict_config).load()
        assert parallel.words == sequential.words
        assert parallel.word_count == 12000

    def test_auto_detect_rejected(self, dict_config):
        with pytest.raises(ValidationError):
            Dictionary(AUTO_DETECT, dict_config)


class TestContains:
    """Tests for Dictionary.contains() skip rules."""

    def test_known_word_any_case(self, english):
        assert english.contains("Quick")
        assert english.contains("QUICK")

    def test_unknown_word(self, english):
        assert not english.contains("quikc")

    def test_empty_and_short(self, english):
        assert english.contains("")
        assert english.contains("q")

    def test_digit_heavy(self, english):
        assert english.contains("ab12")
        assert not english.contains("abcz9")

    def test_code_shape_only_in_code_context(self, english):
        assert english.contains("parseValue", is_code_context=True)
        assert english.contains("get_thing", is_code_context=True)
        assert not english.contains("parsevalu", is_code_context=True)
        assert not english.contains("parseValue")

    def test_case_sensitive_uses_verbatim_token(self, english):
        assert english.contains("quick", case_sensitive=True)
        assert not english.contains("Quick", case_sensitive=True)

    def test_ignored(self, english):
        english.ignore_word("zzyzx")
        assert english.contains("Zzyzx")

    def test_latin_word_in_cjk_dictionary(self, dictionary_dir, dict_config):
        (dictionary_dir / "dictionary(jpn).txt").write_text("日本語\nhello\n", encoding='utf-8')
        dictionary = Dictionary(JAPANESE, dict_config).load()
        assert dictionary.contains("Hello")
        assert dictionary.contains("HELLO")
        assert not dictionary.contains("Hello", case_sensitive=True)


class TestMutations:
    """Tests for persisted add/ignore/clear/remove."""

    def test_add_word_persists(self, english):
        assert english.add_word("  Kubernetes ") == "kubernetes"
        assert english.contains("kubernetes")
        assert english.user_words_path.read_text(encoding='utf-8').split() == ["kubernetes"]

    def test_add_word_rejects_short(self, english):
        before = english.word_count
        with pytest.raises(InvalidWordError):
            english.add_word(" x ")
        with pytest.raises(InvalidWordError):
            english.add_word("   ")
        assert english.word_count == before

    def test_add_removes_from_ignored(self, english):
        english.ignore_word("grok")
        english.add_word("grok")
        assert "grok" not in english.ignored
        assert "grok" in english.user_words

    def test_user_state_merged_on_load(self, english, dict_config):
        english.add_word("grok")
        english.ignore_word("blorp")
        fresh = Dictionary(ENGLISH, dict_config).load()
        assert fresh.contains("grok")
        assert fresh.is_user_word("grok")
        assert fresh.is_ignored("blorp")

    def test_user_word_wins_over_ignored_on_load(self, english, dict_config):
        english.user_dir.mkdir(parents=True, exist_ok=True)
        english.user_words_path.write_text("both\n")
        english.ignored_words_path.write_text("both\n")
        fresh = Dictionary(ENGLISH, dict_config).load()
        assert "both" in fresh.user_words
        assert "both" not in fresh.ignored

    def test_clear_ignored(self, english):
        english.ignore_word("blorp")
        english.clear_ignored()
        assert not english.ignored
        assert english.ignored_words_path.read_text() == ""

    def test_remove_word(self, english):
        english.add_word("grok")
        assert english.remove_word("grok")
        assert not english.contains("grok")
        assert not english.remove_word("grok")

    def test_revision_bumps(self, english):
        revision = english.revision
        english.add_word("grok")
        assert english.revision > revision

    def test_persistence_failure_keeps_memory_change(self, english, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        english.config.user_data_dir = str(blocker)
        with pytest.raises(FileError):
            english.add_word("grok")
        assert english.contains("grok")

    def test_multi_word_entry_persists(self, english, dict_config):
        english.add_word("New York")
        english.add_word("#hashtag")
        fresh = Dictionary(ENGLISH, dict_config).load()
        assert fresh.is_user_word("new york")
        assert fresh.is_user_word("#hashtag")


class TestImportExport:
    """Tests for export_to_file / import_from_file."""

    @pytest.mark.parametrize("name", ["out.txt", "out.csv"])
    def test_round_trip(self, english, dict_config, tmp_path, name):
        path = tmp_path / name
        english.export_to_file(path)
        fresh = Dictionary(Language.custom("xyz"), dict_config)
        fresh.import_from_file(path)
        assert fresh.words == english.words

    @pytest.mark.parametrize("name", ["out.txt", "out.csv"])
    def test_round_trip_keeps_unusual_words(self, english, dict_config, tmp_path, name):
        source = tmp_path / "extra.csv"
        source.write_text("word\nnew york\n#hashtag\nyork 5\n# note\n", encoding='utf-8')
        english.import_from_file(source)
        path = tmp_path / name
        english.export_to_file(path)
        fresh = Dictionary(Language.custom("xyz"), dict_config)
        fresh.import_from_file(path)
        assert {"new york", "#hashtag", "york 5", "# note"} <= fresh.words
        assert fresh.words == english.words

    def test_export_sorted_csv(self, english, tmp_path):
        path = tmp_path / "out.csv"
        english.export_to_file(path)
        lines = path.read_text().splitlines()
        assert lines[0] == "word,frequency"
        words = [line.split(",")[0] for line in lines[1:]]
        assert words == sorted(words)

    def test_unsupported_export(self, english, tmp_path):
        with pytest.raises(UnsupportedFormatError):
            english.export_to_file(tmp_path / "out.xml")

    def test_import_counts_new_words(self, english, tmp_path):
        path = tmp_path / "extra.txt"
        path.write_text("fox\nnewword\nAnother\n")
        assert english.import_from_file(path) == 2
        assert english.contains("another")


class TestDictionaryManager:
    """Tests for DictionaryManager."""

    def test_same_instance_per_language(self, manager):
        assert manager.get_dictionary(ENGLISH) is manager.get_dictionary(ENGLISH)

    def test_auto_detect_rejected(self, manager):
        with pytest.raises(ValidationError):
            manager.get_dictionary(AUTO_DETECT)

    def test_reload_replaces_slot(self, manager):
        first = manager.get_dictionary(ENGLISH)
        second = manager.reload_dictionary(ENGLISH)
        assert first is not second
        assert manager.get_dictionary(ENGLISH) is second

    def test_concurrent_first_load_is_single(self, manager):
        results = []

        def worker():
            results.append(manager.get_dictionary(ENGLISH))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len({id(d) for d in results}) == 1

    def test_add_custom_dictionary(self, manager, tmp_path):
        path = tmp_path / "klingon.csv"
        path.write_text("word\nqapla\nbatlh\n")
        lang = Language.custom("tlh")
        dictionary = manager.add_custom_dictionary(path, lang)
        assert manager.get_dictionary(lang) is dictionary
        assert dictionary.contains("Qapla")

    def test_cache_management(self, manager):
        manager.get_dictionary(ENGLISH)
        assert manager.cached_languages() == [ENGLISH]
        assert manager.get_cached_dictionary(FRENCH) is None
        assert manager.evict(ENGLISH)
        assert manager.cached_languages() == []

    def test_available_languages(self, manager):
        assert manager.available_languages() == [ENGLISH]
