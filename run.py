"""
run.py
======
Main launcher for Budget Monitoring
Jalankan file ini untuk start aplikasi: python run.py
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

# Load environment variables
load_dotenv()

# Import Flask app
from web.app import create_app
from modules.budget.utils import format_currency

if __name__ == '__main__':
    print("\n" + "="*70)
    print("📊 BUDGET MONITORING")
    print("="*70)
    print("Starting application...")

    # Create app
    app = create_app()

    # Server settings from .env
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))
    debug = os.getenv('FLASK_DEBUG', 'True').lower() == 'true'

    config = app.extensions['budget_config']
    summary = config.summary()

    print(f"\n📍 Server Configuration:")
    print(f"   URL: http://localhost:{port}/budget")
    print(f"   Host: {host}")
    print(f"   Debug: {'ON' if debug else 'OFF'}")

    print(f"\n📂 Active Contract:")
    print(f"   Nama: {summary['nama_kontrak'] or '-'}")
    print(f"   Nilai: {format_currency(summary['nilai_kontrak'])} ({summary['mata_uang']})")
    print(f"   Config: {summary['config_path']}")

    ai_key = os.getenv('API_KEY') or os.getenv('GEMINI_API_KEY')
    if ai_key:
        print(f"   ✓ AI insight ({summary['ai_model']})")
    else:
        print(f"   ✗ AI insight (API_KEY belum diset)")

    print(f"\n{'='*70}")
    print("🚀 Starting Flask development server...")
    print("   Press CTRL+C to quit")
    print(f"{'='*70}\n")

    try:
        # Run Flask app
        app.run(
            host=host,
            port=port,
            debug=debug,
            use_reloader=debug  # Auto-reload on code changes if debug=True
        )
    except KeyboardInterrupt:
        print("\n\n" + "="*70)
        print("👋 Server stopped by user")
        print("="*70)
        sys.exit(0)
