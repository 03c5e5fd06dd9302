"""
web/routes/admin.py
===================
Admin routes for configuration management (nilai kontrak, AI settings)
"""

import copy
from flask import Blueprint, request, jsonify, current_app
import logging

from modules.budget.value_parser import parse_amount

# Create blueprint
admin_bp = Blueprint('admin', __name__, url_prefix='/admin')

# Setup logger
logger = logging.getLogger(__name__)


def get_budget_config():
    return current_app.extensions['budget_config']


# ============================================================================
# CONFIG API
# ============================================================================

@admin_bp.route('/api/config', methods=['GET'])
def get_config_api():
    """Get active budget config"""
    try:
        config = get_budget_config()
        return jsonify({
            'success': True,
            'config': config.as_dict(),
            'summary': config.summary()
        })

    except Exception as e:
        logger.error(f"Error getting budget config: {e}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@admin_bp.route('/api/config', methods=['PUT'])
def update_config_api():
    """
    Update nilai kontrak dan/atau setting AI.

    Body JSON: {"nilai_kontrak": ..., "mata_uang": ..., "nama": ..., "ai": {...}}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({
            'success': False,
            'error': 'Request body must be a JSON object'
        }), 400

    config = get_budget_config()

    # Build complete config structure, preserve semua section lain
    config_data = copy.deepcopy(config.as_dict())
    kontrak = config_data.setdefault('kontrak', {})

    if 'nilai_kontrak' in data:
        raw = data['nilai_kontrak']
        nilai = raw if isinstance(raw, int) and not isinstance(raw, bool) else parse_amount(raw)
        if nilai < 0:
            return jsonify({
                'success': False,
                'error': 'Field "nilai_kontrak" must be a non-negative number'
            }), 400
        kontrak['nilai_kontrak'] = nilai

    for field in ('mata_uang', 'nama'):
        if field in data:
            kontrak[field] = str(data[field])

    if isinstance(data.get('ai'), dict):
        config_data.setdefault('ai', {}).update(data['ai'])

    success = config.save_config(config_data)

    if success:
        logger.info(f"✅ Updated budget config: nilai_kontrak={kontrak.get('nilai_kontrak'):,}")
        return jsonify({
            'success': True,
            'message': 'Config updated successfully',
            'summary': config.summary()
        })

    return jsonify({
        'success': False,
        'error': 'Failed to save config'
    }), 400


# ============================================================================
# UTILITY ENDPOINTS
# ============================================================================

@admin_bp.route('/api/reload-config', methods=['POST'])
def reload_config_api():
    """Force reload budget configuration"""
    if get_budget_config().reload():
        logger.info("🔄 Budget configuration reloaded successfully")
        return jsonify({
            'success': True,
            'message': 'Configuration reloaded successfully'
        })

    return jsonify({
        'success': False,
        'error': 'Failed to reload configuration'
    }), 500
