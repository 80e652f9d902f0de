"""
Derived metrics engine.

derived : compute_derived_metrics() + ScoreComponents, pure functions only.
"""
