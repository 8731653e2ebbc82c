# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Rotation primitives — pure computation, no side effects.
"""

import random
from typing import Iterable, Optional

_rng = random.SystemRandom()


def difference(pool: Iterable[str], taken: Iterable[str]) -> list[str]:
    """Members of pool not present in taken, in pool order."""
    taken_set = set(taken)
    return [member for member in pool if member not in taken_set]


def shuffled(members: Iterable[str], rng: Optional[random.Random] = None) -> list[str]:
    """Return a uniformly random permutation; the input is left untouched."""
    result = list(members)
    (rng or _rng).shuffle(result)
    return result


def render_template(template: str, value: str) -> str:
    """Substitute every {{name}} placeholder."""
    return template.replace("{{name}}", value)


def build_mentions(selections: dict[str, list[str]]) -> str:
    """
    Mention every picked member, team by team, in selection order.
    Only the very last member of the last team gets the "and" prefix:
        {"a": ["a1"], "b": ["b1", "b2"]} -> "<@a1>, <@b1>, and <@b2>"
    """
    parts: list[str] = []
    teams = list(selections.values())
    for team_index, members in enumerate(teams):
        is_last_team = team_index == len(teams) - 1
        for member_index, member in enumerate(members):
            if is_last_team and member_index == len(members) - 1:
                parts.append(f"and <@{member}>")
            else:
                parts.append(f"<@{member}>, ")
    return "".join(parts)
