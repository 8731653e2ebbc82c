# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Slash-command text parsing.

    /show    selected|available  teams|groups  <team-or-group>  <task-or-team>
    /replace <username>          teams|groups  <team-or-group>  <task-or-team>
"""

import re
from typing import NamedTuple, Optional

IDENTIFIER = r"(?:[^\W_]|-)+"

COMMAND_PATTERN = re.compile(
    rf"@?([\w.\-]+)\s+(teams|groups)\s+({IDENTIFIER})\s+({IDENTIFIER})"
)


class CommandArgs(NamedTuple):
    subject: str
    kind: str
    scope: str
    sub_scope: str


def parse_command(text: str) -> Optional[CommandArgs]:
    """Return the last well-formed command found in text, or None."""
    matches = list(COMMAND_PATTERN.finditer(text or ""))
    if not matches:
        return None
    return CommandArgs(*matches[-1].groups())
