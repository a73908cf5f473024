"""CalmPath services.

- analysis_service: offline heuristic classifier (local tier)
- llm_service: external model adapter and its fallbacks (remote tier)
- classification_service: tier selection and HTTP surface
"""
