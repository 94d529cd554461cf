"""
spellcore Flask Application
===========================
Application factory for the spell check HTTP API.
"""

from typing import Optional

from flask import Flask, jsonify

from config_logging import get_config as get_app_config, get_logger, VERSION

from .analyzer import SpellChecker
from .routes import spelling_blueprint

logger = get_logger('spellcore.app')


def create_app(checker: Optional[SpellChecker] = None) -> Flask:
    """Build the Flask app; a checker is created from config when none is given."""
    app_config = get_app_config()

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = app_config.max_content_length
    app.extensions['spellcore'] = checker or SpellChecker()
    app.register_blueprint(spelling_blueprint)

    @app.route('/api/health')
    def health():
        active = app.extensions['spellcore']
        return jsonify({
            'success': True,
            'status': 'ok',
            'version': VERSION,
            'language': active.language.code,
            'cached_languages': [lang.code for lang in active.dictionary_manager.cached_languages()],
        })

    logger.info("spellcore app created", version=VERSION)
    return app


def main():
    """Run the development server."""
    app_config = get_app_config()
    create_app().run(host=app_config.host, port=app_config.port, debug=app_config.debug)


if __name__ == '__main__':
    main()
