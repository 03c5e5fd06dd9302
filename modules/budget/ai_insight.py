"""
modules/budget/ai_insight.py
============================
Asisten AI: kirim ringkasan total per tim ke Gemini, terima teks analisis.

Hanya ringkasan (tim -> total) yang dikirim, bukan data mentah. Fungsi
di sini tidak pernah raise; semua kegagalan dikembalikan sebagai teks
yang bisa langsung ditampilkan.
"""

import json
import os
import logging
from typing import Dict, Any, Optional

import requests

from modules.budget.aggregator import team_totals

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"
DEFAULT_TIMEOUT = 30

MSG_NO_DATA = "Silakan impor data terlebih dahulu untuk mendapatkan analisis AI."
MSG_NOT_CONFIGURED = (
    "Konfigurasi AI belum lengkap. Pastikan 'API_KEY' sudah ditambahkan "
    "di Environment Variables (file .env)."
)
MSG_INVALID_KEY = "Kunci API tidak valid. Periksa kembali konfigurasi API_KEY Anda."
MSG_CONNECTION = (
    "Terjadi kesalahan koneksi saat menghubungi asisten AI. "
    "Silakan coba lagi nanti."
)
MSG_EMPTY_ANSWER = "Asisten AI tidak memberikan jawaban."


def get_api_key() -> Optional[str]:
    """API key dari env; dianggap tidak ada jika kosong / terlalu pendek."""
    api_key = os.getenv('API_KEY') or os.getenv('GEMINI_API_KEY')
    if not api_key or api_key == 'undefined' or len(api_key) < 10:
        return None
    return api_key


def build_prompt(summary: Dict[str, int]) -> str:
    return (
        f"Analisis ringkasan budget berikut: {json.dumps(summary, ensure_ascii=False)}. \n"
        "Berikan analisis singkat dalam Bahasa Indonesia mengenai tim dengan "
        "pengeluaran tertinggi dan saran efisiensi. Jangan terlalu panjang."
    )


def _extract_text(payload: Dict[str, Any]) -> str:
    candidates = payload.get('candidates') or []
    if not candidates:
        return ''
    parts = (candidates[0].get('content') or {}).get('parts') or []
    return ''.join(part.get('text', '') for part in parts).strip()


def get_budget_insights(
    summary: Dict[str, int],
    settings: Dict[str, Any] = None
) -> str:
    """
    Minta analisis AI untuk ringkasan tim -> total nilai tagihan.

    Args:
        summary: mapping nama tim -> total nilai tagihan
        settings: dict config 'ai' (model, endpoint, timeout)

    Returns:
        str: teks jawaban AI, atau pesan error yang siap ditampilkan
    """
    if not summary:
        return MSG_NO_DATA

    api_key = get_api_key()
    if not api_key:
        logger.warning("⚠️  AI API key not configured")
        return MSG_NOT_CONFIGURED

    settings = settings or {}
    model = settings.get('model', DEFAULT_MODEL)
    endpoint = settings.get('endpoint', DEFAULT_ENDPOINT).rstrip('/')
    timeout = settings.get('timeout', DEFAULT_TIMEOUT)

    url = f"{endpoint}/{model}:generateContent"
    body = {"contents": [{"parts": [{"text": build_prompt(summary)}]}]}

    try:
        response = requests.post(
            url,
            params={"key": api_key},
            json=body,
            timeout=timeout
        )
    except requests.RequestException as e:
        logger.error(f"❌ AI request failed: {e}")
        return MSG_CONNECTION

    if response.status_code != 200:
        error_text = response.text or ''
        logger.error(f"❌ AI error {response.status_code}: {error_text[:200]}")
        if response.status_code in (401, 403) or 'API key' in error_text:
            return MSG_INVALID_KEY
        return MSG_CONNECTION

    try:
        text = _extract_text(response.json())
    except ValueError as e:
        logger.error(f"❌ AI response is not JSON: {e}")
        return MSG_CONNECTION

    return text or MSG_EMPTY_ANSWER


def get_insights_for_records(records, settings: Dict[str, Any] = None) -> str:
    """Shortcut: ringkas record per tim lalu minta analisis."""
    return get_budget_insights(team_totals(records), settings)
