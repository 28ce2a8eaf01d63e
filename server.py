#!/usr/bin/env python3
"""
Script Studio - Flask API server.
Wraps script generation and range edits for the studio client.
"""

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

import llm_utils
from build_script import generate_script
from config import PORT
from edit_script import edit_range
from script_errors import (
    InvalidArgument,
    ScriptStudioError,
    ServiceUnavailable,
    UpstreamFailure,
    error_status,
)

app = Flask(__name__)


def _log(msg: str) -> None:
    print(f"[SERVER] {msg}")


def _json_body() -> dict:
    """Request body as a dict; anything else (missing, invalid, non-object JSON) is {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.errorhandler(InvalidArgument)
def handle_invalid_argument(e):
    return jsonify({'error': str(e)}), 400


@app.errorhandler(ServiceUnavailable)
def handle_service_unavailable(e):
    _log(f"ERROR: {e}")
    return jsonify({'error': 'Server is not configured with an LLM API key.'}), 500


@app.errorhandler(UpstreamFailure)
def handle_upstream_failure(e):
    _log(f"ERROR: Upstream failure on {request.path}: {e}")
    return jsonify({'error': 'The language model request failed. Please try again.'}), 500


@app.errorhandler(ScriptStudioError)
def handle_studio_error(e):
    return jsonify({'error': str(e)}), error_status(e)


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    _log(f"ERROR: Unhandled {type(e).__name__} on {request.path}: {e}")
    return jsonify({'error': 'Internal server error'}), 500


# =============================================================================
# Health Check
# =============================================================================

@app.route('/health')
def health_check():
    """Liveness check."""
    return jsonify({'status': 'ok'})


# =============================================================================
# Script Endpoints
# =============================================================================

@app.route('/api/generate', methods=['POST'])
def api_generate():
    """
    Generate a script.
    Body: {prompt: str, lengthMinutes?: number} -> {script: str}
    """
    data = _json_body()
    script = generate_script(data.get('prompt'), data.get('lengthMinutes'))
    return jsonify({'script': script})


@app.route('/api/edit', methods=['POST'])
def api_edit():
    """
    Rewrite script[start:end].
    Body: {script, start, end, selectedText?, instruction?} -> {replacement: str}
    """
    data = _json_body()
    replacement = edit_range(
        data.get('script'),
        data.get('start'),
        data.get('end'),
        selected_text=data.get('selectedText'),
        instruction=data.get('instruction'),
    )
    return jsonify({'replacement': replacement})


def main():
    if not llm_utils.is_configured():
        _log("WARNING: No LLM API key configured; /api endpoints will return 500.")
    _log(f"Listening on port {PORT} ({llm_utils.get_text_model_display()})")
    app.run(host='0.0.0.0', port=PORT, threaded=True)


if __name__ == '__main__':
    main()
