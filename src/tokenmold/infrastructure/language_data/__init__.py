from .file_language_source import FileLanguageSource
from .http_language_source import HttpLanguageSource

__all__ = ["FileLanguageSource", "HttpLanguageSource"]
