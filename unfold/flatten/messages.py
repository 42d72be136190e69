"""
Message catalog for run-level log entries.

Run-level entries store a message key plus variables; the text is looked up
here when the audit document or the CLI renders them.
"""

from typing import Any, Dict, Optional

MOVE_SUCCESS = "infoMoveSuccess"
MOVE_SUCCESS_DONE = "infoMoveSuccessDone"
MOVE_FATAL = "infoMoveFatal"
MOVE_DELETE_FAILED = "infoMoveDeleteFailed"
MOVE_WALK_ERRORS = "infoMoveWalkErrors"

MESSAGES: Dict[str, str] = {
    MOVE_SUCCESS: "All files were copied successfully. Deleting the source folder.",
    MOVE_SUCCESS_DONE: "Source folder deleted. Move complete.",
    MOVE_FATAL: (
        "{errorCount} file(s) could not be copied. "
        "The source folder was NOT deleted to prevent data loss."
    ),
    MOVE_DELETE_FAILED: (
        "All files were copied, but the source folder could not be deleted: {error}"
    ),
    MOVE_WALK_ERRORS: (
        "{errorCount} folder(s) or file(s) could not be read. "
        "The source folder was NOT deleted to prevent data loss."
    ),
}


def render_message(message_key: Optional[str], variables: Optional[Dict[str, Any]]) -> str:
    """
    Render a message key with its variables.

    Unknown keys render as the key itself; placeholders without a value are
    left as they are.
    """
    if not message_key:
        return ""
    template = MESSAGES.get(message_key, message_key)
    if not variables:
        return template
    text = template
    for name, value in variables.items():
        text = text.replace("{" + name + "}", str(value))
    return text
