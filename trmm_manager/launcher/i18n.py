"""Launcher strings, grouped per page in i18n.json.

Each language holds one section per page. Section keys are flattened to
`<page>_<key>` on load; the `common` section keeps its keys bare, so
`tr(lang, "nav_agents")` reads `nav.agents` and `tr(lang, "save")` reads
`common.save`.
"""

from __future__ import annotations

from typing import Dict
import json
import os

from trmm_manager.logging_config import get_logger

log = get_logger("i18n")

DEFAULT_LANGUAGE = "en"
COMMON_SECTION = "common"


def _i18n_json_path() -> str:
    """Return absolute path to i18n JSON dictionary file."""
    here = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(here, "i18n.json")


def flatten_sections(sections: dict) -> Dict[str, str]:
    """Flatten `{page: {key: text}}` into `{page_key: text}`."""
    out: Dict[str, str] = {}
    for page, mapping in sections.items():
        if not isinstance(mapping, dict):
            log.warning("Ignoring i18n section %r: not a mapping", page)
            continue
        prefix = "" if page == COMMON_SECTION else f"{page}_"
        for key, text in mapping.items():
            out[f"{prefix}{key}"] = str(text)
    return out


def _load_translations() -> Dict[str, Dict[str, str]]:
    """Load translations from JSON; an unreadable file yields an empty table."""
    path = _i18n_json_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        log.error("Failed to load translations from %s: %s", path, e)
        return {}
    if not isinstance(payload, dict):
        return {}
    out: Dict[str, Dict[str, str]] = {}
    for lang, sections in payload.items():
        lang_key = str(lang or "").strip().lower()
        if lang_key and isinstance(sections, dict):
            out[lang_key] = flatten_sections(sections)
    return out


_T: Dict[str, Dict[str, str]] = _load_translations()


def normalize_language(value: str) -> str:
    v = str(value or "").strip().lower()
    return v if v in _T else DEFAULT_LANGUAGE


def tr(lang: str, key: str, **kwargs) -> str:
    """Translate a key; unknown keys fall back to English, then to the key itself."""
    c = normalize_language(lang)
    text = _T.get(c, {}).get(key)
    if text is None:
        text = _T.get(DEFAULT_LANGUAGE, {}).get(key, key)
    try:
        return str(text).format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return str(text)
