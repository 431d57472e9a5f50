"""Couche données : modèles de domaine et accès au stockage."""
