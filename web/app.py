"""
web/app.py
==========
Flask application factory for Budget Monitoring
"""

from flask import Flask, render_template
import os
import logging

from modules.budget.config import get_config
from modules.budget.state import StateStore
from modules.budget.utils import (
    format_currency,
    format_currency_compact,
    format_months,
    format_number,
    format_percent,
)

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)


def create_app(config_path: str = None):
    """
    Create and configure Flask application

    Args:
        config_path: path config JSON (default: env BUDGET_CONFIG atau
            config/budget.json)

    Returns:
        Flask app instance
    """

    app = Flask(__name__)

    # ===================================================================
    # CONFIGURATION
    # ===================================================================

    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'secret key')

    # File upload settings
    app.config['MAX_CONTENT_LENGTH'] = int(os.getenv('MAX_FILE_SIZE_MB', 50)) * 1024 * 1024

    # Dataset hanya di memori proses; file upload dihapus setelah diproses
    budget_config = get_config(config_path)
    app.extensions['budget_config'] = budget_config
    app.extensions['budget_store'] = StateStore()

    logger.info(f"✅ Budget config: {budget_config.path}")

    # Filter Jinja untuk format Rupiah
    app.jinja_env.filters['rupiah'] = format_currency
    app.jinja_env.filters['rupiah_compact'] = format_currency_compact
    app.jinja_env.filters['number'] = format_number
    app.jinja_env.filters['percent'] = format_percent
    app.jinja_env.filters['months'] = format_months

    # ===================================================================
    # REGISTER BLUEPRINTS
    # ===================================================================

    logger.info("Registering blueprints...")

    from web.routes import main_bp, budget_bp
    from web.routes.admin import admin_bp

    # Main routes (homepage, about)
    app.register_blueprint(main_bp)
    logger.info("✓ Registered: main_bp → /")

    # Budget module
    app.register_blueprint(budget_bp, url_prefix='/budget')
    logger.info("✓ Registered: budget_bp → /budget")

    app.register_blueprint(admin_bp, url_prefix='/admin')
    logger.info("✓ Registered: admin_bp → /admin")

    # ===================================================================
    # GLOBAL ERROR HANDLERS
    # ===================================================================

    @app.errorhandler(404)
    def not_found(e):
        return render_template('error.html',
                               error_code=404,
                               error_title="Halaman Tidak Ditemukan",
                               error="URL yang Anda cari tidak ada."), 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f"Server error: {e}", exc_info=True)
        return render_template('error.html',
                               error_code=500,
                               error_title="Kesalahan Server",
                               error=str(e)), 500

    @app.errorhandler(413)
    def file_too_large(e):
        max_size = app.config['MAX_CONTENT_LENGTH'] / 1024 / 1024
        return render_template('error.html',
                               error_code=413,
                               error_title="File Terlalu Besar",
                               error=f"Ukuran file maksimal: {max_size:.0f}MB"), 413

    # ===================================================================
    # STARTUP INFO
    # ===================================================================

    logger.info("=" * 70)
    logger.info("📊 BUDGET MONITORING - Application Created")
    logger.info("=" * 70)
    logger.info(f"Debug mode: {os.getenv('FLASK_DEBUG', 'False')}")
    logger.info(f"Max upload size: {app.config['MAX_CONTENT_LENGTH']/1024/1024:.0f}MB")
    logger.info(f"Nilai kontrak: {format_currency(budget_config.get_contract_value())}")
    logger.info("Data storage: IN-MEMORY ONLY (hilang saat server restart)")
    logger.info("=" * 70)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=5000)
