"""Registry — source-of-truth layer for verified contract builds.

The registry provides:
- Cataloging: one build record per account, overwritten on re-registration
- Discovery: paginated listing and suffix-aware substring search
- Engagement: per-author votes and an append-only comment log
"""
