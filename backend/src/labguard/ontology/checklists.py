from __future__ import annotations

import os
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field

_CHECKLIST_CACHE: Optional[Dict[str, "AuditRequirements"]] = None


class AuditRequirements(BaseModel):
    checklist: List[str] = Field(default_factory=list)
    required_documents: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


def load_audit_checklists() -> Dict[str, AuditRequirements]:
    global _CHECKLIST_CACHE
    if _CHECKLIST_CACHE is not None:
        return _CHECKLIST_CACHE

    path = os.path.join(os.path.dirname(__file__), "audit_checklists.yaml")
    with open(path, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    _CHECKLIST_CACHE = {
        str(kind).upper(): AuditRequirements.model_validate(entry or {})
        for kind, entry in data.items()
    }
    return _CHECKLIST_CACHE


def audit_requirements(kind: str) -> AuditRequirements:
    return load_audit_checklists().get(str(kind).upper(), AuditRequirements())
