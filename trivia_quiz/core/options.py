from __future__ import annotations

import random
from typing import List, Sequence

CATEGORY_PREFIXES = ("Entertainment: ", "Science: ")


def format_category(category: str) -> str:
    for prefix in CATEGORY_PREFIXES:
        category = category.replace(prefix, "")
    return category


def generate_options(
    correct: str,
    distractors: Sequence[str],
    rng: random.Random | None = None,
) -> List[str]:
    """Insert the correct answer at a uniformly random slot among the distractors."""
    if correct in distractors:
        raise ValueError("Correct answer must not appear among the distractors.")

    rng = rng or random.Random()
    options = list(distractors)
    options.insert(rng.randint(0, len(options)), correct)
    return options
