"""Domain modules: taxonomy, questionnaire classification, policies and ranking."""

from .policies import POLICIES_BY_ARCHETYPE, CatalogFilter, Policy, policy_for
from .questionnaire import ClassificationResult, QuestionnaireDefinition, classify
from .recommendation import Product, ScoredCandidate, recommend
from .taxonomy import Archetype

__all__ = [
    "POLICIES_BY_ARCHETYPE",
    "Archetype",
    "CatalogFilter",
    "ClassificationResult",
    "Policy",
    "Product",
    "QuestionnaireDefinition",
    "ScoredCandidate",
    "classify",
    "policy_for",
    "recommend",
]
