"""
Shared fixtures: a temporary dictionary directory, a user-data directory,
and checkers wired to them so no test touches the real home directory.
"""

import pytest

from spellcore.analyzer import SpellChecker
from spellcore.config import CheckerConfig, DictionaryConfig, SpellCoreConfig
from spellcore.dictionary import Dictionary, DictionaryManager
from spellcore.language import ENGLISH

BASE_WORDS = [
    "the", "quick", "brown", "fox", "jumps", "over", "lazy", "dog",
    "system", "shall", "process", "all", "incoming", "data", "hello",
    "world", "value", "spelling", "sentence", "contains", "error",
    "this", "is", "a", "test", "and", "check", "word", "words",
]


@pytest.fixture
def dictionary_dir(tmp_path):
    path = tmp_path / "dictionaries"
    path.mkdir()
    lines = ["# test word list"] + BASE_WORDS
    (path / "dictionary(eng).txt").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def user_dir(tmp_path):
    return tmp_path / "userdata"


@pytest.fixture
def dict_config(dictionary_dir, user_dir):
    return DictionaryConfig(
        search_dirs=[str(dictionary_dir)],
        include_default_dirs=False,
        user_data_dir=str(user_dir),
        use_bundled_english=False,
    )


@pytest.fixture
def spell_config(dict_config):
    return SpellCoreConfig(checker=CheckerConfig(), dictionary=dict_config)


@pytest.fixture
def english(dict_config):
    return Dictionary(ENGLISH, dict_config).load()


@pytest.fixture
def manager(dict_config):
    return DictionaryManager(dict_config)


@pytest.fixture
def checker(spell_config, manager):
    return SpellChecker(ENGLISH, dictionary_manager=manager, config=spell_config)
