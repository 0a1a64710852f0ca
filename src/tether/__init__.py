"""Tether - reconcile Vault identity entity aliases."""
