"""
Flask application for HTTP API.

Provides:
- GET /health: Service health check
- GET /api/search?q=: Name autocomplete
- GET /api/identities: Registered identities
- GET /api/identities/<name>: Single identity
- POST /api/identities: Register from embedding samples
- DELETE /api/identities/<name>: Delete identity
- POST /api/match: Match one embedding
- GET /api/recognitions: Recent recognition results
- POST /api/reload: Reload identities from backend
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from .config import Config
from .errors import DuplicateNameError, PersistenceError
from .logging_config import get_logger
from .session import RecognitionSession

logger = get_logger(__name__)


def create_app(session: RecognitionSession, config: Config) -> Flask:
    """
    Create and configure Flask application.

    Args:
        session: Recognition session backing the endpoints
        config: Service configuration

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    CORS(app)

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({
            'status': 'ok',
            'state': session.state.value,
            'identities': len(session.registry),
            'service': config.service_name,
        })

    @app.route('/api/search')
    def search():
        """Autocomplete names by prefix."""
        query = request.args.get('q', '')
        return jsonify({'query': query, 'results': session.search(query)})

    @app.route('/api/identities', methods=['GET'])
    def list_identities():
        return jsonify([record.as_dict() for record in session.identities()])

    @app.route('/api/identities/<name>', methods=['GET'])
    def get_identity(name):
        record = session.lookup(name)
        if record is None:
            return jsonify({'error': f'Unknown identity: {name}'}), 404
        return jsonify(record.as_dict())

    @app.route('/api/identities', methods=['POST'])
    def register_identity():
        """Register an identity from precomputed embedding samples."""
        payload = request.get_json(silent=True) or {}
        name = payload.get('name')
        samples = payload.get('embeddings')

        if not isinstance(name, str) or not isinstance(samples, list):
            return jsonify({'error': 'Expected {"name": str, "embeddings": [[float, ...], ...]}'}), 400

        try:
            record = session.register(name, samples)
        except DuplicateNameError as e:
            return jsonify({'error': str(e)}), 409
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        except PersistenceError as e:
            logger.error(f'Registration failed: {e}')
            return jsonify({'error': str(e)}), 502

        return jsonify(record.as_dict()), 201

    @app.route('/api/identities/<name>', methods=['DELETE'])
    def delete_identity(name):
        try:
            deleted = session.delete(name)
        except PersistenceError as e:
            return jsonify({'error': str(e)}), 502

        if not deleted:
            return jsonify({'error': f'Unknown identity: {name}'}), 404
        return '', 204

    @app.route('/api/match', methods=['POST'])
    def match():
        """Match one embedding against registered identities."""
        payload = request.get_json(silent=True) or {}
        embedding = payload.get('embedding')

        if not isinstance(embedding, list):
            return jsonify({'error': 'Expected {"embedding": [float, ...]}'}), 400

        threshold = payload.get('threshold')
        if threshold is not None and (isinstance(threshold, bool) or not isinstance(threshold, (int, float))):
            return jsonify({'error': 'threshold must be a number'}), 400

        try:
            result = session.match(embedding, threshold)
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        return jsonify({'match': result.as_dict() if result else None})

    @app.route('/api/recognitions')
    def recognitions():
        return jsonify([result.as_dict() for result in session.recent_results()])

    @app.route('/api/reload', methods=['POST'])
    def reload():
        try:
            session.reload()
        except PersistenceError as e:
            return jsonify({'error': str(e)}), 502
        return jsonify({'status': 'ok', 'identities': len(session.registry)})

    return app
