"""
Configuration de l'application.

Les valeurs sont lues dans les variables d'environnement, avec
des valeurs par défaut adaptées à un usage local. Les options de
la ligne de commande, quand elles sont fournies, ont priorité.
"""

import os


def get_poll_interval() -> float:
    """Attente initiale (secondes) quand le flux de commandes est à sec."""
    return float(os.environ.get("FULFILLMENT_POLL_INTERVAL", "0.1"))


def get_max_poll_interval() -> float:
    """Plafond de l'attente entre deux relectures du flux."""
    return float(os.environ.get("FULFILLMENT_MAX_POLL_INTERVAL", "2.0"))


def get_poll_backoff() -> float:
    """Facteur multiplicatif appliqué à l'attente à chaque relecture vide."""
    return float(os.environ.get("FULFILLMENT_POLL_BACKOFF", "2.0"))


def get_log_level() -> str:
    return os.environ.get("FULFILLMENT_LOG_LEVEL", "WARNING").upper()
