# Ontology: keyword classifiers and static audit lookup tables
from labguard.ontology.checklists import AuditRequirements, audit_requirements
from labguard.ontology.keywords import (
    AnalyteClass,
    IncidentClass,
    MediaClass,
    classify_incident_type,
    classify_media_type,
    classify_test_type,
    matching_keywords,
)

__all__ = [
    "AnalyteClass",
    "AuditRequirements",
    "IncidentClass",
    "MediaClass",
    "audit_requirements",
    "classify_incident_type",
    "classify_media_type",
    "classify_test_type",
    "matching_keywords",
]
