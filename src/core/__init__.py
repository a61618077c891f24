"""Core del bridge: configuración, dominio y servicios de sincronización."""
