"""Taller Charli: backend de gestión de usuarios y autenticación."""

__version__ = "1.0.0"
