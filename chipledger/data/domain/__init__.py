"""Couche domaine : entités du registre."""
