"""
Locale service and per-record locale context.

The locale service answers which locale is current for the process and which
one is the default. Every translatable record keeps its own ``LocaleContext``
seeded from the service, so switching one record's locale never affects
another record.
"""

from typing import Callable, List, Optional, Protocol

from translatable.config.settings import get_settings


class LocaleService(Protocol):
    """Anything that can tell the current and default locale."""

    def current_locale(self) -> str: ...

    def default_locale(self) -> str: ...


class Translator:
    """Process-wide locale service backed by settings."""

    def __init__(self, default_locale: str, locale: Optional[str] = None):
        self._default = default_locale
        self._locale = locale or default_locale

    def current_locale(self) -> str:
        return self._locale

    def default_locale(self) -> str:
        return self._default

    def set_locale(self, locale: str) -> str:
        """Switch the current locale and return the previous one."""
        previous, self._locale = self._locale, locale
        return previous

    def set_default_locale(self, locale: str) -> None:
        self._default = locale

    def is_default(self, locale: Optional[str] = None) -> bool:
        return (locale or self._locale) == self._default


_translator: Optional[Translator] = None


def get_translator() -> Translator:
    """Get the shared locale service, creating it from settings on first use"""
    global _translator
    if _translator is None:
        settings = get_settings()
        _translator = Translator(settings.default_locale, settings.initial_locale())
    return _translator


def set_translator(translator: Optional[Translator]) -> None:
    """Replace the shared locale service; ``None`` rebuilds it from settings on next use"""
    global _translator
    _translator = translator


class LocaleContext:
    """Active/default locale pair for one record instance. Pure state."""

    def __init__(self, active: str, default: str):
        self._active = active
        self._default = default
        self._listeners: List[Callable[[str, str], None]] = []

    @classmethod
    def from_service(cls, service: LocaleService) -> "LocaleContext":
        return cls(service.current_locale(), service.default_locale())

    def active(self) -> str:
        return self._active

    def default(self) -> str:
        return self._default

    def should_translate(self) -> bool:
        return self._active != self._default

    def is_default(self, locale: Optional[str] = None) -> bool:
        return (locale or self._active) == self._default

    def on_switch(self, listener: Callable[[str, str], None]) -> None:
        """Register ``listener(previous, new)``, called before every switch."""
        self._listeners.append(listener)

    def set_active(self, locale: str) -> str:
        """Switch the active locale and return the previous one.

        Listeners run on every explicit switch, even to the same locale, so
        relations depending on translated values are always reloaded.
        """
        previous = self._active
        for listener in self._listeners:
            listener(previous, locale)
        self._active = locale
        return previous
