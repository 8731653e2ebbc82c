# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Slack slash-command endpoints (/replace, /show).
Thin HTTP layer — parses the command text and delegates to the services.
"""

from fastapi import APIRouter, Depends, Form

from rotation_service.core.dependencies import get_query_service, get_replacement_service
from rotation_service.core.logging import get_logger
from rotation_service.schemas.rotation import SlackCommandResponse
from rotation_service.services.command_parser import parse_command
from rotation_service.services.query import QueryService
from rotation_service.services.replacement import ReplacementService

logger = get_logger(__name__)

router = APIRouter(tags=["Slash Commands"])

REPLACE_USAGE = "Usage: /replace <username> teams|groups <team-or-group> <task-or-team>"
SHOW_USAGE = "Usage: /show selected|available teams|groups <team-or-group> <task-or-team>"


@router.post("/replace", response_model=SlackCommandResponse)
def replace_member(
    text: str = Form(default=""),
    command: str = Form(default=""),
    service: ReplacementService = Depends(get_replacement_service),
):
    """Replace a selected member with a freshly drawn one."""
    args = parse_command(text)
    if args is None:
        return SlackCommandResponse(response_type="ephemeral", text=REPLACE_USAGE)

    new_member = service.replace(args.kind, args.scope, args.sub_scope, args.subject)
    logger.info("Command %s :: %s :: new member %s", command, text, new_member)
    return SlackCommandResponse(text=f"It's your turn, {new_member}")


@router.post("/show", response_model=SlackCommandResponse)
def show_members(
    text: str = Form(default=""),
    command: str = Form(default=""),
    service: QueryService = Depends(get_query_service),
):
    """Show selected or still available members of a task or group team."""
    args = parse_command(text)
    if args is None:
        return SlackCommandResponse(response_type="ephemeral", text=SHOW_USAGE)

    try:
        members = service.show(args.subject, args.kind, args.scope, args.sub_scope)
    except ValueError:
        return SlackCommandResponse(response_type="ephemeral", text=SHOW_USAGE)
    logger.info("Command %s :: %s :: members %s", command, text, ", ".join(members))
    return SlackCommandResponse(text=", ".join(members))
