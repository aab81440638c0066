"""
Terminal front end for the guided dialogue.

Typed answers go through the same normalizers as speech transcripts.
Type ":back" to return to the previous question and ":cancel" to abandon
the draft. A failed submission keeps the draft so it can be sent again.
"""

from typing import Any, Callable, Dict, List, Optional

from client import PropertyClient
from dialogue import DialogueState, DraftListing, GuidedDialogue
from errors import ApiError, DialogueStateError, InvalidResponseError, MissingFieldError
from presentation import render_listing

BACK = ":back"
CANCEL = ":cancel"


def collect_draft(read: Callable[[str], str] = input,
                  write: Callable[[str], None] = print) -> Optional[DraftListing]:
    """Ask every question in turn; None when the user cancels."""
    dialogue = GuidedDialogue()
    dialogue.start()

    while dialogue.state is DialogueState.IN_PROGRESS:
        step = dialogue.current_step
        number, total = dialogue.progress
        write(f"Question {number} of {total}: {step.question}")
        if step.hint:
            write(f"  ({step.hint})")

        answer = read("> ").strip()
        if answer == CANCEL:
            dialogue.cancel()
            write("Voice input cancelled.")
            return None
        if answer == BACK:
            try:
                dialogue.retreat()
            except DialogueStateError as exc:
                write(exc.message)
            continue

        try:
            if answer:
                dialogue.submit_response(answer)
            dialogue.advance()
        except (InvalidResponseError, MissingFieldError) as exc:
            write(exc.message)

    return dialogue.draft


def _ask_photos(read: Callable[[str], str]) -> List[str]:
    raw = read("Photo files (comma separated paths): ")
    return [path.strip() for path in raw.split(",") if path.strip()]


def submit_draft(client: PropertyClient, draft: DraftListing,
                 read: Callable[[str], str] = input,
                 write: Callable[[str], None] = print) -> Optional[Dict[str, Any]]:
    """Create the listing, offering a retry with the same draft on failure."""
    photos = _ask_photos(read) if draft.wants_photos() else []
    while True:
        try:
            created = client.create_property(draft.to_payload(), photos=photos or None)
        except (ApiError, OSError) as exc:
            for message in getattr(exc, "messages", None) or [str(exc)]:
                write(message)
            if read("Retry submission? [y/N] ").strip().lower() != "y":
                return None
            continue
        write("Property created successfully!")
        write(render_listing(created))
        return created


def run_guided_entry(client: PropertyClient,
                     read: Callable[[str], str] = input,
                     write: Callable[[str], None] = print) -> Optional[Dict[str, Any]]:
    draft = collect_draft(read, write)
    if draft is None:
        return None
    write("Collected Information:")
    write(render_listing(draft.to_payload()))
    return submit_draft(client, draft, read, write)


def main() -> None:
    from logging_config import LoggingConfig

    LoggingConfig.setup_logging()
    run_guided_entry(PropertyClient())


if __name__ == "__main__":
    main()
