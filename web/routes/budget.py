"""
web/routes/budget.py
====================
Routes untuk modul Budget Monitoring
Storage: in-memory (StateStore), tanpa database
"""

import os
import io
import tempfile
from flask import (
    Blueprint, render_template, request, flash, redirect, url_for,
    send_file, jsonify, current_app
)
from werkzeug.utils import secure_filename
from datetime import datetime
import logging

# Import budget modules
from modules.budget.aggregator import (
    build_pivot,
    budget_overview,
    status2_detail,
    status2_distribution,
    status_summaries,
    team_totals,
)
from modules.budget.ai_insight import get_insights_for_records
from modules.budget.importer import import_file
from modules.budget.models import STATUS2_CATEGORIES, STATUS_VALUES
from modules.budget.output_writer import OutputWriter
from modules.budget.period_index import ALL_PERIODE_VALUE, build_period_index
from modules.budget.row_mapper import build_manual_record
from modules.budget.state import add_record, apply_import, clear_data, set_filter
from modules.budget.utils import BudgetMonitorError, ValidationError, format_duration

# Create blueprint
budget_bp = Blueprint('budget', __name__, url_prefix='/budget')

# Setup logger
logger = logging.getLogger(__name__)

# Batas baris tabel detail di halaman dashboard
DASHBOARD_ROW_LIMIT = 500


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def get_store():
    return current_app.extensions['budget_store']


def get_budget_config():
    return current_app.extensions['budget_config']


def allowed_file(filename):
    """Check if file extension is allowed"""
    allowed = set(get_budget_config().get_allowed_extensions())
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def apply_filter_args():
    """
    Terapkan query arg ?periode= dan ?q= (jika ada) ke state, lalu kembalikan
    state terbaru.
    """
    store = get_store()
    periode = request.args.get('periode')
    query = request.args.get('q')

    if periode is not None or query is not None:
        store.dispatch(set_filter, periode=periode, query=query)

    return store.state


def build_overview_payload(state) -> dict:
    filtered = state.filtered()
    overview = budget_overview(get_budget_config().get_contract_value(), state.records, filtered)

    return {
        'filter': {
            'periode': state.filter_periode,
            'q': state.search_query,
        },
        'record_count': len(state.records),
        'filtered_count': len(filtered),
        'overview': overview.to_dict(),
        'status_summary': status_summaries(filtered),
        # list, bukan dict: urutan desc harus tetap di JSON
        'status2_distribution': [
            {'status2': k, 'total': v} for k, v in status2_distribution(filtered).items()
        ],
        'team_totals': [
            {'tim': k, 'total': v} for k, v in team_totals(filtered).items()
        ],
    }


def cleanup_temp_file(path):
    if path and os.path.exists(path):
        try:
            os.remove(path)
            logger.info("   ✅ Deleted uploaded file")
        except OSError as e:
            logger.warning(f"   ⚠️  Failed to delete: {e}")


# ============================================================================
# PAGES
# ============================================================================

@budget_bp.route('/')
@budget_bp.route('/dashboard')
def dashboard():
    """Dashboard utama: kartu ringkasan, pivot, tabel detail"""
    state = apply_filter_args()
    filtered = state.filtered()
    payload = build_overview_payload(state)

    return render_template('budget/dashboard.html',
                           state=state,
                           periode_options=build_period_index(state.records),
                           all_periode=ALL_PERIODE_VALUE,
                           overview=payload['overview'],
                           status_summary=payload['status_summary'],
                           team_totals=team_totals(filtered),
                           pivot=build_pivot(filtered),
                           records=filtered[:DASHBOARD_ROW_LIMIT],
                           hidden_count=max(len(filtered) - DASHBOARD_ROW_LIMIT, 0),
                           status_values=STATUS_VALUES,
                           status2_categories=STATUS2_CATEGORIES,
                           allowed_extensions=get_budget_config().get_allowed_extensions())


@budget_bp.route('/import', methods=['POST'])
def import_data():
    """
    Import worksheet pertama dari file upload, merge tanpa duplikat.
    File upload disimpan sementara di temp folder lalu dihapus.
    """
    uploaded_file_path = None

    try:
        # === Validate Input ===
        if 'file' not in request.files:
            flash('No file uploaded', 'error')
            return redirect(url_for('budget.dashboard'))

        file = request.files['file']
        if not file or file.filename == '':
            flash('No file selected', 'error')
            return redirect(url_for('budget.dashboard'))

        if not allowed_file(file.filename):
            extensions = ', '.join(f".{e}" for e in get_budget_config().get_allowed_extensions())
            flash(f'File harus berformat {extensions}', 'error')
            return redirect(url_for('budget.dashboard'))

        # Save to TEMP folder
        filename = secure_filename(file.filename) or 'upload.xlsx'
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        name, ext = os.path.splitext(filename)
        unique_filename = f"{name}_{timestamp}{ext}"

        uploaded_file_path = os.path.join(tempfile.gettempdir(), unique_filename)
        file.save(uploaded_file_path)

        logger.info(f"🔄 Processing budget file: {uploaded_file_path}")

        result = import_file(uploaded_file_path, original_filename=file.filename)
        merge = get_store().dispatch(apply_import, result.records)
        logger.info(f"⏱️  Duration: {format_duration(result.duration)}")

        flash(merge.message(), 'success')

    except BudgetMonitorError as e:
        logger.warning(f"⚠️  Import rejected: {e}")
        flash(str(e), 'error')

    except Exception as e:
        logger.error(f"❌ Unexpected error: {e}", exc_info=True)
        flash("Gagal membaca file Excel. Pastikan format file benar.", 'error')

    finally:
        cleanup_temp_file(uploaded_file_path)

    return redirect(url_for('budget.dashboard'))


@budget_bp.route('/records', methods=['POST'])
def create_record():
    """Tambah satu record dari form input manual (form atau JSON)"""
    data = request.get_json(silent=True) if request.is_json else request.form

    try:
        record = build_manual_record(data or {})
    except ValidationError as e:
        if request.is_json:
            return jsonify({'success': False, 'error': str(e)}), 400
        flash(str(e), 'error')
        return redirect(url_for('budget.dashboard'))

    get_store().dispatch(add_record, record)

    if request.is_json:
        return jsonify({'success': True, 'record': record.to_dict()}), 201

    flash(f"Data {record.nama_user} ({record.tim}) berhasil ditambahkan", 'success')
    return redirect(url_for('budget.dashboard'))


@budget_bp.route('/clear', methods=['POST'])
def clear():
    """Hapus seluruh dataset dan reset filter"""
    get_store().dispatch(clear_data)
    logger.info("🧹 Dataset cleared")
    flash('Semua data berhasil dihapus', 'success')
    return redirect(url_for('budget.dashboard'))


@budget_bp.route('/export')
def export():
    """Download data (sesuai filter aktif) + pivot sebagai Excel"""
    state = apply_filter_args()
    filtered = state.filtered()

    if not filtered:
        flash('Tidak ada data untuk diexport', 'warning')
        return redirect(url_for('budget.dashboard'))

    try:
        writer = OutputWriter()
        file_bytes = writer.write_excel_to_bytes(filtered, build_pivot(filtered))
    except Exception as e:
        logger.error(f"❌ Error exporting file: {e}", exc_info=True)
        flash(f"Error exporting file: {str(e)}", 'error')
        return redirect(url_for('budget.dashboard'))

    periode_part = state.filter_periode if state.filter_periode != ALL_PERIODE_VALUE else 'semua'
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    filename = f"budget_monitoring_{periode_part}_{timestamp}.xlsx"

    logger.info(f"📥 Downloading export: {filename}")

    return send_file(
        io.BytesIO(file_bytes),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=filename
    )


# ============================================================================
# JSON API
# ============================================================================

@budget_bp.route('/api/overview')
def api_overview():
    """Kartu ringkasan: serapan, sisa, estimasi bulan (overall + filter)"""
    state = apply_filter_args()
    payload = build_overview_payload(state)
    payload['success'] = True
    return jsonify(payload)


@budget_bp.route('/api/pivot')
def api_pivot():
    state = apply_filter_args()
    return jsonify({
        'success': True,
        'pivot': build_pivot(state.filtered()).to_dict()
    })


@budget_bp.route('/api/records')
def api_records():
    state = apply_filter_args()
    filtered = state.filtered()
    return jsonify({
        'success': True,
        'records': [r.to_dict() for r in filtered],
        'total': len(filtered),
        'total_nilai': sum(r.nilai_tagihan for r in filtered),
    })


@budget_bp.route('/api/periodes')
def api_periodes():
    state = get_store().state
    return jsonify({
        'success': True,
        'periodes': [p.to_dict() for p in build_period_index(state.records)],
        'selected': state.filter_periode,
    })


@budget_bp.route('/api/status2/<path:category>')
def api_status2_detail(category):
    """Drill-down satu kategori status2 dari data terfilter"""
    state = apply_filter_args()
    detail = status2_detail(state.filtered(), category)
    return jsonify({
        'success': True,
        'detail': detail.to_dict()
    })


@budget_bp.route('/api/insight', methods=['POST'])
def api_insight():
    """Analisis AI atas ringkasan per tim dari data terfilter"""
    state = apply_filter_args()
    insight = get_insights_for_records(state.filtered(), get_budget_config().get_ai_settings())
    return jsonify({
        'success': True,
        'insight': insight
    })
