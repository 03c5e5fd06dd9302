"""
web/routes/main.py
==================
Main routes: Homepage, About
"""

from flask import Blueprint, render_template, redirect, url_for, current_app
import logging

logger = logging.getLogger(__name__)

# Create blueprint
main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Homepage langsung ke dashboard budget"""
    return redirect(url_for('budget.dashboard'))


@main_bp.route('/about')
def about():
    """About page - System information"""
    config = current_app.extensions['budget_config']
    store = current_app.extensions['budget_store']

    module = {
        'name': 'Budget Monitoring',
        'icon': 'fa-chart-pie',
        'description': 'Monitoring serapan anggaran tagihan per tim, user, dan status billing',
        'storage': 'In-memory (tanpa database)',
        'features': [
            'Import Excel / CSV dengan deteksi header otomatis',
            'Pivot tim x user x status2',
            'Estimasi sisa bulan berdasarkan run-rate',
            'Analisis AI dari ringkasan per tim'
        ]
    }

    return render_template('about.html',
                           module=module,
                           config_summary=config.summary(),
                           record_count=len(store.state.records))
