"""Modelos, errores y entidades del dominio.

El dominio no conoce HTTP, CLI ni DNS: solo conceptos del problema.
"""
