"""
Guided dialogue for entering a listing one question at a time.

The dialogue walks a fixed table of steps. Each step binds a draft field to
a question, an optional hint, a normalizer and a patch function. Answers are
normalized and written to the draft by `submit_response`; moving on is a
separate, explicit `advance` so the user can correct a transcript before
confirming it.
"""

import copy
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import normalizer
from config import DEFAULT_COUNTRY
from errors import DialogueStateError, InvalidResponseError, MissingFieldError
from normalizer import FieldValue

logger = logging.getLogger(__name__)


@dataclass
class DraftLocation:
    address: str = ""
    city: str = ""
    state: str = ""
    zipCode: str = ""
    country: str = ""


@dataclass
class DraftAgent:
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass
class DraftListing:
    """In-progress listing held on the client; never persisted as is."""
    propertyType: str = ""
    location: DraftLocation = field(default_factory=DraftLocation)
    price: str = ""
    area: str = ""
    bedrooms: str = ""
    bathrooms: str = ""
    description: str = ""
    features: List[str] = field(default_factory=list)
    agent: DraftAgent = field(default_factory=DraftAgent)
    status: str = "For Sale"
    photoConfirmation: str = ""

    def get(self, field_id: str) -> Any:
        target: Any = self
        for part in field_id.split("."):
            target = getattr(target, part)
        return target

    def with_value(self, field_id: str, value: FieldValue) -> "DraftListing":
        """Copy of the draft with one (possibly dotted) field replaced."""
        updated = copy.deepcopy(self)
        *parents, name = field_id.split(".")
        target: Any = updated
        for part in parents:
            target = getattr(target, part)
        setattr(target, name, value)
        return updated

    def field_values(self, steps: Optional[List["Step"]] = None) -> Dict[str, Any]:
        """Values of the fields bound to the dialogue steps, keyed by field id."""
        return {step.field_id: self.get(step.field_id) for step in (steps or STEPS)}

    def wants_photos(self) -> bool:
        return self.photoConfirmation == "Yes"

    def to_payload(self) -> Dict[str, Any]:
        """Nested request body for the listing API."""
        location = asdict(self.location)
        location["country"] = location["country"] or DEFAULT_COUNTRY
        return {
            "propertyType": self.propertyType,
            "location": location,
            "price": _to_number(self.price, float),
            "area": _to_number(self.area, float),
            "bedrooms": _to_number(self.bedrooms, int),
            "bathrooms": _to_number(self.bathrooms, int),
            "description": self.description,
            "features": list(self.features),
            "agent": asdict(self.agent),
            "status": self.status,
        }


def _to_number(value: str, kind: Callable[[str], Any]) -> Any:
    if not value:
        return None
    try:
        return kind(value)
    except ValueError:
        # left for the server to reject
        return value


@dataclass(frozen=True)
class Step:
    field_id: str
    question: str
    hint: Optional[str]
    normalize: Callable[[str], FieldValue]
    apply: Callable[[DraftListing, FieldValue], DraftListing]


def _step(field_id: str, question: str, hint: Optional[str] = None) -> Step:
    return Step(
        field_id=field_id,
        question=question,
        hint=hint,
        normalize=lambda text: normalizer.normalize(field_id, text),
        apply=lambda draft, value: draft.with_value(field_id, value),
    )


STEPS: List[Step] = [
    _step("propertyType", "What type of property is this?",
          "Say one of: Apartment, House, Villa, Commercial, or Land"),
    _step("location.address", "What is the street address of the property?",
          "Include street number and name"),
    _step("location.city", "In which city is the property located?"),
    _step("location.state", "In which state is the property located?",
          "Say one of the Indian states, e.g., Maharashtra, Karnataka, etc."),
    _step("location.zipCode", "What is the zip code of the property?", "Numbers only"),
    _step("price", "What is the price of the property?",
          "You can say numbers with Indian currency terms like '35 Lakh' or '2 Crore'"),
    _step("area", "How many square feet is the property?", "Numbers only"),
    _step("bedrooms", "How many bedrooms does the property have?", "Numbers only"),
    _step("bathrooms", "How many bathrooms does the property have?", "Numbers only"),
    _step("description", "Please provide a brief description of the property.",
          "Include key features and condition"),
    _step("features", "What amenities does the property have?",
          "List amenities separated by commas (e.g., pool, garage, garden)"),
    _step("agent.name", "What is the agent's name?", "Full name of the listing agent"),
    _step("agent.email", "What is the agent's email address?", "Format: name@example.com"),
    _step("agent.phone", "What is the agent's phone number?", "Numbers only"),
    _step("photoConfirmation", "Would you like to add photos to this listing?",
          "Say 'Yes' if you want to add photos in the next step, or 'No' to skip"),
]


class DialogueState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class GuidedDialogue:
    """Linear question-by-question state machine over a step table."""

    def __init__(
        self,
        steps: Optional[List[Step]] = None,
        on_complete: Optional[Callable[[DraftListing], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
    ):
        self.steps = list(steps or STEPS)
        self.on_complete = on_complete
        self.on_cancel = on_cancel
        self.state = DialogueState.NOT_STARTED
        self.index = -1
        self.draft: Optional[DraftListing] = None
        self.staged_text = ""

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def current_step(self) -> Step:
        self._require_in_progress()
        return self.steps[self.index]

    @property
    def progress(self) -> Tuple[int, int]:
        """(question number, total questions)"""
        return self.index + 1, len(self.steps)

    @property
    def is_last_step(self) -> bool:
        return self.index == len(self.steps) - 1

    def _require_in_progress(self) -> None:
        if self.state is not DialogueState.IN_PROGRESS:
            raise DialogueStateError(f"Dialogue is {self.state.value}")

    def _move_to(self, index: int) -> None:
        self.index = index
        self.staged_text = ""
        logger.debug("Dialogue moved", extra={"step": index, "field": self.steps[index].field_id})

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start(self) -> Step:
        if self.state is not DialogueState.NOT_STARTED:
            raise DialogueStateError(f"Cannot start a dialogue that is {self.state.value}")
        self.draft = DraftListing()
        self.state = DialogueState.IN_PROGRESS
        self._move_to(0)
        logger.info("Guided dialogue started", extra={"steps": len(self.steps)})
        return self.current_step

    def stage(self, text: str) -> None:
        """Hold interim text without touching the draft."""
        self._require_in_progress()
        self.staged_text = text

    def confirm_staged(self) -> FieldValue:
        return self.submit_response(self.staged_text)

    def submit_response(self, text: str) -> FieldValue:
        """
        Normalize an answer for the current step and patch it into the draft.

        Raises InvalidResponseError (draft untouched) when the answer does
        not normalize to a usable value.
        """
        step = self.current_step
        value = step.normalize(text or "")
        if not normalizer.is_valid(step.field_id, value):
            logger.info("Rejected response", extra={"field": step.field_id})
            raise InvalidResponseError(step.field_id)

        self.draft = step.apply(self.draft, value)
        self.staged_text = text
        return value

    def advance(self) -> Optional[DraftListing]:
        """
        Leave the current step once its field holds a value.

        Returns the finished draft when the last step is confirmed,
        otherwise None.
        """
        step = self.current_step
        value = self.draft.get(step.field_id)
        if not normalizer.accepts_empty(step.field_id) and normalizer.is_blank(value):
            raise MissingFieldError(step.field_id)

        if not self.is_last_step:
            self._move_to(self.index + 1)
            return None

        self.state = DialogueState.COMPLETED
        self.staged_text = ""
        logger.info("Guided dialogue completed")
        if self.on_complete is not None:
            self.on_complete(self.draft)
        return self.draft

    def retreat(self) -> Step:
        self._require_in_progress()
        if self.index == 0:
            raise DialogueStateError("Already at the first question")
        self._move_to(self.index - 1)
        return self.current_step

    def cancel(self) -> None:
        if self.state not in (DialogueState.NOT_STARTED, DialogueState.IN_PROGRESS):
            raise DialogueStateError(f"Cannot cancel a dialogue that is {self.state.value}")
        self.state = DialogueState.CANCELLED
        self.draft = None
        self.staged_text = ""
        logger.info("Guided dialogue cancelled")
        if self.on_cancel is not None:
            self.on_cancel()
