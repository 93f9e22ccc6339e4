from clubflow.config.settings import settings

__all__ = ["settings"]
