"""Servicios: descubrimiento de assets, estado optimista y reconciliación."""
