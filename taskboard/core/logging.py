"""
➡️ But : Configurer les logs de l'application (console + fichier optionnel).

Appelé une seule fois au démarrage (taskboard.main).
Ailleurs : logger = logging.getLogger(__name__)
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure le logger racine.

    Args:
        log_level: niveau de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: chemin du fichier de log (aucun fichier si None)
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
