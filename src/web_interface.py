#!/usr/bin/env python3
"""
Web interface for the temperature converter
Simple Flask-based JSON API for local network access
"""

import os
from datetime import datetime
from typing import Dict, Optional
from flask import Flask, jsonify, request
from threading import Lock

from conversion_models import ConversionDirection, ConversionModelError
from temperature_utils import get_input_hint_text, get_input_suffix

app = Flask(__name__)
app.config['SECRET_KEY'] = os.urandom(24)

# The session is not thread-safe; every request holds this lock while using it
session_lock = Lock()
session = None  # ConverterSession, set by the converter app


def set_session(converter_session) -> None:
    """Set the converter session served by the API"""
    global session
    session = converter_session


def _session_unavailable():
    return jsonify({'error': 'Converter session not available'}), 503


def _entry_json(entry) -> Dict:
    record = entry.to_dict()
    record['display_text'] = entry.display_text
    record['detailed_display_text'] = entry.detailed_display_text
    return record


def _json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _request_body() -> Optional[Dict]:
    # A missing or unparseable body reads as an empty object
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _invalid_body():
    return jsonify({'error': 'Request body must be a JSON object'}), 400


def _request_direction(data: Dict) -> Optional[ConversionDirection]:
    name = data.get('direction')
    if name is None:
        return None
    return ConversionDirection.from_display_name(name)


@app.route('/api/status')
def api_status():
    """API endpoint for current session status"""
    if not session:
        return _session_unavailable()

    with session_lock:
        return jsonify(session.get_status())


@app.route('/api/directions')
def api_directions():
    """API endpoint listing the available conversion directions"""
    directions = []
    for direction in ConversionDirection:
        directions.append({
            'name': direction.display_name,
            'from_scale': direction.from_scale.display_name,
            'to_scale': direction.to_scale.display_name,
            'input_hint': get_input_hint_text(direction.display_name),
            'input_suffix': get_input_suffix(direction.display_name)
        })
    return jsonify({'directions': directions})


@app.route('/api/direction', methods=['POST'])
def api_set_direction():
    """API endpoint to select the conversion direction"""
    if not session:
        return _session_unavailable()

    try:
        data = _request_body()
        if data is None:
            return _invalid_body()
        direction = _request_direction(data)
        if direction is None:
            return jsonify({'error': 'Missing direction'}), 400

        with session_lock:
            session.set_direction(direction)
            return jsonify({'success': True, 'status': session.get_status()})

    except ConversionModelError as e:
        return jsonify({'error': str(e)}), 400


@app.route('/api/convert', methods=['POST'])
def api_convert():
    """API endpoint to convert a temperature"""
    if not session:
        return _session_unavailable()

    try:
        data = _request_body()
        if data is None:
            return _invalid_body()
        direction = _request_direction(data)

        with session_lock:
            if direction is not None:
                session.set_direction(direction)
            text = data.get('text')
            outcome = session.perform_conversion('' if text is None else str(text))

            if not outcome.success:
                return jsonify({
                    'error': outcome.message,
                    'kind': outcome.error.value
                }), 400

            return jsonify({
                'success': True,
                'entry': _entry_json(outcome.entry),
                'result_text': session.result_text,
                'warning': outcome.warning
            })

    except ConversionModelError as e:
        return jsonify({'error': str(e)}), 400


# ==================== HISTORY ENDPOINTS ====================

@app.route('/api/history', methods=['GET'])
def api_get_history():
    """Get conversion history, optionally for one direction"""
    if not session:
        return _session_unavailable()

    try:
        direction = _request_direction(request.args)

        with session_lock:
            if direction is None:
                entries = session.history.entries
            else:
                entries = session.history.filter_by_direction(direction)
            return jsonify({
                'history': [_entry_json(entry) for entry in entries],
                'max_entries': session.history.max_entries
            })

    except ConversionModelError as e:
        return jsonify({'error': str(e)}), 400


@app.route('/api/history', methods=['DELETE'])
def api_clear_history():
    """Clear conversion history"""
    if not session:
        return _session_unavailable()

    with session_lock:
        session.clear_history()
    return jsonify({'success': True})


@app.route('/api/history/<int:index>', methods=['DELETE'])
def api_remove_history_entry(index):
    """Remove one history entry by position"""
    if not session:
        return _session_unavailable()

    try:
        with session_lock:
            entry = session.history.remove_at(index)
        return jsonify({'success': True, 'removed': _entry_json(entry)})
    except IndexError as e:
        return jsonify({'error': str(e)}), 404


@app.route('/api/history/stats', methods=['GET'])
def api_history_stats():
    """Get history statistics"""
    if not session:
        return _session_unavailable()

    with session_lock:
        stats = session.history.statistics()
    return jsonify({key: _json_value(value) for key, value in stats.items()})


@app.route('/api/history/export', methods=['GET'])
def api_export_history():
    """Export history records"""
    if not session:
        return _session_unavailable()

    with session_lock:
        return jsonify({'history': session.export_history()})


@app.route('/api/history/import', methods=['POST'])
def api_import_history():
    """Import history records"""
    if not session:
        return _session_unavailable()

    data = _request_body()
    if data is None:
        return _invalid_body()
    records = data.get('history')
    if not isinstance(records, list):
        return jsonify({'error': 'history must be a list of records'}), 400

    clear_existing = data.get('clear_existing', True)
    if not isinstance(clear_existing, bool):
        return jsonify({'error': 'clear_existing must be true or false'}), 400

    with session_lock:
        loaded = session.import_history(records, clear_existing=clear_existing)
        count = len(session.history)
    return jsonify({'success': True, 'imported': loaded, 'history_count': count})


def run_web_server(host='127.0.0.1', port=5000, debug=False):
    """Run Flask web server"""
    app.run(host=host, port=port, debug=debug, use_reloader=False)
