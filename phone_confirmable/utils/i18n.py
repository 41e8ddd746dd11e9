from __future__ import annotations

"""
Internationalization (i18n) utility module for error and notification messages.

Catalogs live in ``phone_confirmable/locales/<lang>/LC_MESSAGES/messages.po``
and are parsed with Babel on first use. Messages are ``str.format`` templates;
a duration passed as ``period`` is humanised for the target locale
("3 days", "3 días") the way the confirmation-expired message needs it.
"""

from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
from babel.dates import format_timedelta
from babel.messages.pofile import read_po

logger = structlog.get_logger(__name__)

LOCALES_PATH = Path(__file__).resolve().parent.parent / "locales"
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "es")

_catalogs: Dict[str, Dict[str, str]] = {}


def _load_catalog(lang: str) -> Dict[str, str]:
    """Parse the .po catalog for ``lang`` into a msgid -> msgstr dict."""
    po_path = LOCALES_PATH / lang / "LC_MESSAGES" / "messages.po"
    catalog: Dict[str, str] = {}
    if not po_path.exists():
        logger.warning("i18n_catalog_missing", lang=lang, path=str(po_path))
        return catalog

    with po_path.open("rb") as po_file:
        for message in read_po(po_file, locale=lang):
            if message.id and message.string:
                catalog[str(message.id)] = str(message.string)
    logger.debug("i18n_initialized", language=lang, entries=len(catalog))
    return catalog


def get_catalog(lang: str) -> Dict[str, str]:
    if lang not in _catalogs:
        _catalogs[lang] = _load_catalog(lang)
    return _catalogs[lang]


def format_period(period: timedelta, lang: str = DEFAULT_LANGUAGE) -> str:
    """Humanise a duration, e.g. ``timedelta(days=3)`` -> ``"3 days"``."""
    return format_timedelta(period, threshold=1, locale=lang)


def get_translated_message(key: str, lang: Optional[str] = None, **kwargs: Any) -> str:
    """
    Retrieve the message for ``key`` in ``lang``, falling back to English.

    Keyword arguments are interpolated into the template; a ``period``
    timedelta is humanised first. Unknown keys return the key itself so a
    missing translation is visible rather than fatal.
    """
    lang = lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE
    template = get_catalog(lang).get(key) or get_catalog(DEFAULT_LANGUAGE).get(key)
    if template is None:
        logger.warning("i18n_message_missing", key=key, lang=lang)
        return key

    if isinstance(kwargs.get("period"), timedelta):
        kwargs["period"] = format_period(kwargs["period"], lang)
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError):
        logger.warning("i18n_interpolation_failed", key=key, lang=lang)
        return template
