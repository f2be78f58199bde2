"""
Readiness scoring core.

This package defines:
- QuestionSpec / ScoringTable configuration (with answer synonyms)
- Pure, deterministic scoring into a percentage and tier
- Tier copy and email bodies built from a score
"""
