"""Free-text classifiers backed by ``keywords.yaml``."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import yaml

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="KeywordClass")

_KEYWORD_CACHE: Optional[Dict[str, List[Tuple[str, List[str]]]]] = None


class KeywordClass(str, Enum):
    pass


class MediaClass(KeywordClass):
    CHOCOLATE_AGAR = "chocolate_agar"
    MACCONKEY_AGAR = "macconkey_agar"
    BLOOD_AGAR = "blood_agar"
    GENERAL = "general"


class AnalyteClass(KeywordClass):
    GLUCOSE = "glucose"
    POTASSIUM = "potassium"
    HEMOGLOBIN = "hemoglobin"
    GENERAL = "general"


class IncidentClass(KeywordClass):
    EXPOSURE = "exposure"
    CHEMICAL = "chemical"
    EQUIPMENT = "equipment"
    SPECIMEN = "specimen"
    GENERAL = "general"


def load_keyword_tables() -> Dict[str, List[Tuple[str, List[str]]]]:
    global _KEYWORD_CACHE
    if _KEYWORD_CACHE is not None:
        return _KEYWORD_CACHE

    path = os.path.join(os.path.dirname(__file__), "keywords.yaml")
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    tables: Dict[str, List[Tuple[str, List[str]]]] = {}
    for table, entries in data.items():
        tables[table] = [
            (str(entry["class"]), [str(k).lower() for k in entry.get("keywords", [])])
            for entry in entries or []
        ]
    _KEYWORD_CACHE = tables
    return tables


def matching_keywords(table: str, text: Optional[str]) -> List[str]:
    """All keywords of ``table`` found in ``text``, in table order."""
    lowered = _normalize(text)
    if not lowered:
        return []
    found: List[str] = []
    for _, keywords in load_keyword_tables().get(table, []):
        for keyword in keywords:
            if keyword in lowered and keyword not in found:
                found.append(keyword)
    return found


def classify(table: str, text: Optional[str], variants: Type[E], default: E) -> E:
    lowered = _normalize(text)
    if not lowered:
        return default
    for class_name, keywords in load_keyword_tables().get(table, []):
        if not any(keyword in lowered for keyword in keywords):
            continue
        try:
            return variants(class_name)
        except ValueError:
            logger.warning("Unknown %s class in keyword table: %s", table, class_name)
    return default


def classify_media_type(text: Optional[str]) -> MediaClass:
    return classify("media_type", text, MediaClass, MediaClass.GENERAL)


def classify_test_type(text: Optional[str]) -> AnalyteClass:
    return classify("test_type", text, AnalyteClass, AnalyteClass.GENERAL)


def classify_incident_type(text: Optional[str]) -> IncidentClass:
    return classify("incident_type", text, IncidentClass, IncidentClass.GENERAL)


def _normalize(text: Any) -> str:
    if text is None:
        return ""
    return " ".join(str(text).lower().split())
