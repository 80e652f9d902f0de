"""
Rule engine: turns metrics into words.

ladder          : ThresholdLadder, first-match rungs with a mandatory catch-all.
context         : RuleContext, facts shared by badge/personality/recommendation rules.
generator       : Per-metric insight sentences.
narrative       : Section transitions, intros and contextual copy.
recommendations : Prioritized recommendation battery.
badges          : Achievement badges.
personality     : Commerce personality archetypes.
engine          : run_rule_engine(), the single entry point.
"""
