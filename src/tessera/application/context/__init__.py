from tessera.application.context.principal import ClientInfo, Principal

__all__ = ["ClientInfo", "Principal"]
