from docqa.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
