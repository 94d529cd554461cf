"""
Spell Check Flask Routes
========================
JSON API over the two collaborator calls: analyze text, and mutate the
persistent word lists.

All endpoints return ``{'success': True, ...}`` or
``{'success': False, 'error': {...}}``.
"""

import time
from functools import wraps
from flask import Blueprint, request, jsonify, g, current_app

from config_logging import (
    get_logger, StructuredLogger, SpellCoreError, ValidationError
)

from .analyzer import SpellChecker
from .language import Language, all_languages, detect_from_text, detect_language

logger = get_logger('spellcore.routes')

# Create blueprint
spelling_blueprint = Blueprint('spelling', __name__, url_prefix='/api/spelling')

SLOW_CALL_SECONDS = 5.0


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def handle_spelling_errors(f):
    """
    Decorator for standardized API error handling in spelling routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > SLOW_CALL_SECONDS:
                logger.warning(f"Slow spelling API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except SpellCoreError as e:
            if e.status_code >= 500:
                logger.error(f"{e.code} in {f.__name__}: {e.message}")
            else:
                logger.warning(f"{e.code} in {f.__name__}: {e.message}")
            payload = e.to_dict()
            payload['error']['correlation_id'] = getattr(g, 'correlation_id', 'unknown')
            return jsonify(payload), e.status_code
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return jsonify({
                'success': False,
                'error': {
                    'code': 'INTERNAL_ERROR',
                    'message': 'An unexpected error occurred',
                    'correlation_id': getattr(g, 'correlation_id', 'unknown')
                }
            }), 500

    return decorated


@spelling_blueprint.before_request
def assign_correlation_id():
    g.correlation_id = request.headers.get('X-Correlation-ID') \
        or StructuredLogger.new_correlation_id()
    StructuredLogger.set_correlation_id(g.correlation_id)


# =============================================================================
# HELPERS
# =============================================================================

def _checker() -> SpellChecker:
    return current_app.extensions['spellcore']


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", field='body')
    return data


def _language(value, required: bool = False):
    if value is None or value == '':
        if required:
            raise ValidationError("language is required", field='language')
        return None
    if not isinstance(value, str):
        raise ValidationError("language must be a string code", field='language')
    return Language.from_code(value, allow_custom=True)


def _word(data: dict) -> str:
    word = data.get('word')
    if not isinstance(word, str) or not word.strip():
        raise ValidationError("word is required", field='word')
    return word


# =============================================================================
# ROUTES
# =============================================================================

@spelling_blueprint.route('/languages', methods=['GET'])
@handle_spelling_errors
def list_languages():
    """Catalog plus the languages with a dictionary available."""
    checker = _checker()
    return jsonify({
        'success': True,
        'languages': [lang.to_dict() for lang in all_languages()],
        'available': [lang.code for lang in checker.dictionary_manager.available_languages()],
        'active': checker.language.code,
    })


@spelling_blueprint.route('/detect', methods=['POST'])
@handle_spelling_errors
def detect():
    data = _json_body()
    text = data.get('text', '')
    if not isinstance(text, str):
        raise ValidationError("text must be a string", field='text')
    return jsonify({
        'success': True,
        'language': detect_language(text).to_dict(),
        'candidates': [{'code': lang.code, 'score': round(score, 2)}
                       for lang, score in detect_from_text(text)],
    })


@spelling_blueprint.route('/analyze', methods=['POST'])
@handle_spelling_errors
def analyze_text():
    """
    Check a text body.

    Body: {"text": str, "language": code, "filename": str, "options": {...}}
    """
    data = _json_body()
    text = data.get('text')
    if not isinstance(text, str):
        raise ValidationError("text is required", field='text')
    options = data.get('options')
    if options is not None and not isinstance(options, dict):
        raise ValidationError("options must be an object", field='options')

    analysis = _checker().analyze(
        text,
        language=_language(data.get('language')),
        filename=data.get('filename'),
        options=options,
    )
    return jsonify({'success': True, 'analysis': analysis.to_dict()})


@spelling_blueprint.route('/words', methods=['POST'])
@handle_spelling_errors
def add_word():
    data = _json_body()
    language = _language(data.get('language'))
    stored = _checker().add_word(_word(data), language)
    return jsonify({'success': True, 'word': stored}), 201


@spelling_blueprint.route('/words/<word>', methods=['DELETE'])
@handle_spelling_errors
def remove_word(word):
    language = _language(request.args.get('language'))
    removed = _checker().remove_word(word, language)
    return jsonify({'success': True, 'word': word, 'removed': removed})


@spelling_blueprint.route('/ignored', methods=['POST'])
@handle_spelling_errors
def ignore_word():
    data = _json_body()
    checker = _checker()
    if data.get('session'):
        stored = checker.ignore_for_session(_word(data))
    else:
        stored = checker.ignore_word(_word(data), _language(data.get('language')))
    return jsonify({'success': True, 'word': stored}), 201


@spelling_blueprint.route('/ignored', methods=['DELETE'])
@handle_spelling_errors
def clear_ignored():
    _checker().clear_ignored(_language(request.args.get('language')))
    return jsonify({'success': True})


@spelling_blueprint.route('/reload', methods=['POST'])
@handle_spelling_errors
def reload_dictionary():
    data = request.get_json(silent=True) or {}
    dictionary = _checker().reload_dictionary(_language(data.get('language')))
    return jsonify({'success': True, 'dictionary': dictionary.stats()})
