"""Demonstrates how to enable and configure logging in idtrees.

idtrees logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle``. The handle can be used as a context manager
(``with enable_logging(): ...``) or disabled manually via ``handle.disable()``.
When the last active handle is disabled, idtrees logging is automatically turned off.

Key concepts shown here:

- ``level``: controls the minimum log level. ``"INFO"`` (the default) reports the
  start and end of each induction. The custom ``SPLIT`` level (numeric value 15,
  between DEBUG and INFO) adds one record per accepted split; ``"DEBUG"`` adds one
  record per leaf.
- ``log_format``: ``"short"`` shows ``timestamp | level | function - message``;
  ``"full"`` adds the module and line number.
- Automatic cleanup: logging is re-disabled when the context manager exits.
"""

import polars as pl

from idtrees import build_tree_from_frame, enable_logging, extract_rules, predict

df_people = pl.DataFrame({
    "height": [2.5, 3.0, 4.3, 5.0, 5.5, 6.0, 6.1],
    "drinks": [False, False, False, False, True, True, False],
    "class": ["child", "child", "teenager", "teenager", "adult", "adult", "teenager"],
})

# Enable logging at SPLIT level (and above) with full log format to see every split decision
with enable_logging(level="SPLIT", log_format="full"):
    tree = build_tree_from_frame(df_people, "class")

for rule in extract_rules(tree):
    print(rule)

print(f"\nPrediction for a 5.8 tall drinker: {predict(tree, {'height': 5.8, 'drinks': True})}\n")

# Logging is disabled again here; this build produces no output
build_tree_from_frame(df_people, "class", min_leaf_size=2)
