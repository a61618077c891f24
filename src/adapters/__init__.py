"""Adaptadores de I/O: plataforma remota (HTTP), DNS y superficie web."""
