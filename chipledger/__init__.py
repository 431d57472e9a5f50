"""chipledger : statistiques, faits marquants et pronostics d'un registre de soirées."""

__version__ = "0.1.0"
