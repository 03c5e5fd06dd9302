"""
modules/budget/config.py
========================
Configuration loader for Budget module with hot-reload support
"""

import json
import os
import shutil
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from modules.budget.value_parser import parse_amount

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/budget.json"
DEFAULT_ALLOWED_EXTENSIONS = ['xlsx', 'xlsm', 'csv']


class ConfigLoader:

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self._config_path = Path(config_path)
        self._config_data: Optional[Dict[str, Any]] = None
        self._last_modified = None

        self._load_and_validate()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load_and_validate(self, force: bool = False) -> None:

        try:
            # Check if file exists
            if not self._config_path.exists():
                raise FileNotFoundError(f"Config file not found: {self._config_path}")

            # Check file modification time
            current_mtime = os.path.getmtime(self._config_path)

            # Skip reload if file hasn't changed (unless forced)
            if not force and self._last_modified == current_mtime and self._config_data is not None:
                return

            with open(self._config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            # Validasi dulu, baru dipakai
            self._validate_config_structure(config_data)

            self._config_data = config_data
            self._last_modified = current_mtime

            if force:
                logger.info(f"🔄 Config force reloaded from: {self._config_path}")
            else:
                logger.info(f"✓ Config loaded from: {self._config_path}")

            logger.info(f"  - Nilai kontrak: {self._config_data['kontrak']['nilai_kontrak']:,}")
            logger.info(f"  - AI model: {self._config_data['ai']['model']}")

        except FileNotFoundError:
            error_msg = f"Config file not found: {self._config_path}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in config file: {e}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        except ValueError as e:
            logger.error(f"Invalid config structure: {e}")
            raise

    @staticmethod
    def _validate_config_structure(config_data: Any) -> None:
        """Validasi struktur config JSON"""
        if not isinstance(config_data, dict):
            raise ValueError("Config must be a dictionary")

        required_keys = ['kontrak', 'ai']
        for key in required_keys:
            if key not in config_data:
                raise ValueError(f"Missing required key in config: {key}")

        kontrak = config_data['kontrak']
        if not isinstance(kontrak, dict):
            raise ValueError("'kontrak' must be a dictionary")
        for field in ['nilai_kontrak', 'mata_uang']:
            if field not in kontrak:
                raise ValueError(f"Missing '{field}' in kontrak")

        nilai = kontrak['nilai_kontrak']
        if isinstance(nilai, bool) or not isinstance(nilai, int) or nilai < 0:
            raise ValueError(f"'nilai_kontrak' must be a non-negative integer, got: {nilai!r}")

        ai = config_data['ai']
        if not isinstance(ai, dict):
            raise ValueError("'ai' must be a dictionary")
        for field in ['model', 'endpoint', 'timeout']:
            if field not in ai:
                raise ValueError(f"Missing '{field}' in ai")
        if not isinstance(ai['timeout'], int) or ai['timeout'] <= 0:
            raise ValueError("'ai.timeout' must be a positive integer")

        import_cfg = config_data.get('import', {})
        if not isinstance(import_cfg, dict):
            raise ValueError("'import' must be a dictionary")
        extensions = import_cfg.get('allowed_extensions', DEFAULT_ALLOWED_EXTENSIONS)
        if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
            raise ValueError("'import.allowed_extensions' must be a list of strings")

    def reload(self) -> bool:

        try:
            self._load_and_validate(force=True)
            return True
        except Exception as e:
            logger.error(f"❌ Reload failed: {e}")
            return False

    def auto_reload_if_changed(self) -> bool:

        try:
            if not self._config_path.exists():
                return False

            current_mtime = os.path.getmtime(self._config_path)

            if current_mtime != self._last_modified:
                logger.info("📝 Budget config file changed, auto-reloading...")
                self._load_and_validate(force=True)
                return True

            return False

        except Exception as e:
            logger.warning(f"⚠️  Auto-reload check failed: {e}")
            return False

    def save_config(self, config_data: Dict[str, Any]) -> bool:

        backup_path = str(self._config_path) + '.backup'
        try:
            self._validate_config_structure(config_data)

            # Backup current file
            if self._config_path.exists():
                shutil.copy2(self._config_path, backup_path)

            with open(self._config_path, 'w', encoding='utf-8') as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)

            # Force reload
            self._load_and_validate(force=True)

            logger.info("💾 Budget config saved successfully")
            return True

        except Exception as e:
            logger.error(f"❌ Save budget config failed: {e}")
            # Restore backup if save failed
            if os.path.exists(backup_path):
                shutil.copy2(backup_path, self._config_path)
            return False

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def as_dict(self) -> Dict[str, Any]:
        self.auto_reload_if_changed()
        return json.loads(json.dumps(self._config_data))

    def get_kontrak(self) -> Dict[str, Any]:
        self.auto_reload_if_changed()
        return self._config_data.get('kontrak', {})

    def get_contract_value(self) -> int:
        """
        Nilai kontrak (plafon anggaran). Env CONTRACT_VALUE_IDR, jika ada dan
        berisi angka, menimpa nilai di config.
        """
        env_value = os.getenv('CONTRACT_VALUE_IDR', '').strip()
        if env_value:
            override = parse_amount(env_value)
            if override > 0:
                return override
        return int(self.get_kontrak().get('nilai_kontrak', 0))

    def get_ai_settings(self) -> Dict[str, Any]:
        self.auto_reload_if_changed()
        return self._config_data.get('ai', {})

    def get_allowed_extensions(self) -> List[str]:
        self.auto_reload_if_changed()
        import_cfg = self._config_data.get('import', {})
        extensions = import_cfg.get('allowed_extensions', DEFAULT_ALLOWED_EXTENSIONS)
        return [e.lower().lstrip('.') for e in extensions]

    def summary(self) -> Dict[str, Any]:

        kontrak = self.get_kontrak()
        ai = self.get_ai_settings()

        return {
            'nilai_kontrak': self.get_contract_value(),
            'mata_uang': kontrak.get('mata_uang'),
            'nama_kontrak': kontrak.get('nama', ''),
            'ai_model': ai.get('model'),
            'allowed_extensions': self.get_allowed_extensions(),
            'config_path': str(self._config_path),
        }


_config_instance = None


def get_config(config_path: str = None) -> ConfigLoader:
    """Get shared config instance"""
    global _config_instance

    if config_path:
        if _config_instance is None or _config_instance.path != Path(config_path):
            _config_instance = ConfigLoader(config_path)
    elif _config_instance is None:
        _config_instance = ConfigLoader(os.getenv('BUDGET_CONFIG', DEFAULT_CONFIG_PATH))

    return _config_instance
