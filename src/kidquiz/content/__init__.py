"""Question content pipeline: generation, screening, fallback, storage."""

from .fallback import build_fallback, match_category
from .generator import GenerationClient, build_prompt, parse_drafts
from .orchestrator import (
    ContentOrchestrator,
    GenerationResult,
    screen_batch,
    validate_batch,
)
from .policy import (
    GENERAL,
    VOCABULARY,
    GenerationPolicy,
    default_policies,
    infer_policy_name,
    policies_from_config,
    resolve_policy,
)
from .safety import DEFAULT_DENY_TERMS, SafetyFilter, is_safe, unsafe_terms

__all__ = [
    "build_fallback",
    "match_category",
    "GenerationClient",
    "build_prompt",
    "parse_drafts",
    "ContentOrchestrator",
    "GenerationResult",
    "screen_batch",
    "validate_batch",
    "GENERAL",
    "VOCABULARY",
    "GenerationPolicy",
    "default_policies",
    "infer_policy_name",
    "policies_from_config",
    "resolve_policy",
    "DEFAULT_DENY_TERMS",
    "SafetyFilter",
    "is_safe",
    "unsafe_terms",
]
