"""
Datenbank-Hilfsfunktionen für die Settings.

Der Verbindungs-Timeout heißt je nach Treiber anders: psycopg erwartet
``connect_timeout``, sqlite3 ``timeout``. Andere Engines bekommen keinen.
"""

from typing import Any, Dict


def apply_connect_timeout(config: Dict[str, Any], timeout: int) -> Dict[str, Any]:
    """Setzt den Timeout passend zur Engine in ``config["OPTIONS"]``."""
    engine = config.get("ENGINE", "")
    if "postgresql" in engine:
        config.setdefault("OPTIONS", {})["connect_timeout"] = timeout
    elif engine.endswith("sqlite3"):
        config.setdefault("OPTIONS", {})["timeout"] = timeout
    return config
