from filmroom.config.settings import settings

__all__ = ["settings"]
