"""Tests for the guided dialogue state machine."""

import pytest
from unittest.mock import Mock

from dialogue import STEPS, DialogueState, DraftListing, GuidedDialogue
from errors import DialogueStateError, InvalidResponseError, MissingFieldError

ANSWERS = {
    "propertyType": "It is an apartment",
    "location.address": "12 MG Road",
    "location.city": "Bengaluru",
    "location.state": "karnataka",
    "location.zipCode": "560 001",
    "price": "85 lakh",
    "area": "1200 sq ft",
    "bedrooms": "3",
    "bathrooms": "2",
    "description": "Corner flat with lots of light",
    "features": "gym, pool",
    "agent.name": "Asha Rao",
    "agent.email": "Asha@Example.com",
    "agent.phone": "98450 12345",
    "photoConfirmation": "no thanks",
}


def answer_all(dialogue: GuidedDialogue):
    result = None
    for step in STEPS:
        assert dialogue.current_step.field_id == step.field_id
        dialogue.submit_response(ANSWERS[step.field_id])
        result = dialogue.advance()
    return result


@pytest.mark.unit
def test_step_table_order():
    assert [step.field_id for step in STEPS] == list(ANSWERS)
    assert len(STEPS) == 15


@pytest.mark.unit
def test_start_moves_to_first_step():
    dialogue = GuidedDialogue()
    assert dialogue.state is DialogueState.NOT_STARTED

    step = dialogue.start()

    assert dialogue.state is DialogueState.IN_PROGRESS
    assert step.field_id == "propertyType"
    assert dialogue.progress == (1, 15)
    assert isinstance(dialogue.draft, DraftListing)


@pytest.mark.unit
def test_start_twice_is_refused():
    dialogue = GuidedDialogue()
    dialogue.start()
    with pytest.raises(DialogueStateError):
        dialogue.start()


@pytest.mark.unit
def test_submit_response_patches_draft_without_advancing():
    dialogue = GuidedDialogue()
    dialogue.start()

    value = dialogue.submit_response("a spacious villa")

    assert value == "Villa"
    assert dialogue.draft.propertyType == "Villa"
    assert dialogue.index == 0


@pytest.mark.unit
def test_invalid_response_keeps_step_and_draft():
    dialogue = GuidedDialogue()
    dialogue.start()
    for _ in range(5):
        dialogue.submit_response(ANSWERS[dialogue.current_step.field_id])
        dialogue.advance()
    assert dialogue.current_step.field_id == "price"

    with pytest.raises(InvalidResponseError) as exc_info:
        dialogue.submit_response("about thirty lakh")

    assert exc_info.value.field_id == "price"
    assert dialogue.current_step.field_id == "price"
    assert dialogue.draft.price == ""


@pytest.mark.unit
def test_advance_refused_while_field_empty():
    dialogue = GuidedDialogue()
    dialogue.start()
    for _ in range(5):
        dialogue.submit_response(ANSWERS[dialogue.current_step.field_id])
        dialogue.advance()

    with pytest.raises(MissingFieldError) as exc_info:
        dialogue.advance()

    assert exc_info.value.field_id == "price"
    assert dialogue.current_step.field_id == "price"

    dialogue.submit_response("35 lakh")
    dialogue.advance()
    assert dialogue.current_step.field_id == "area"


@pytest.mark.unit
def test_features_step_may_stay_empty():
    dialogue = GuidedDialogue()
    dialogue.start()
    while dialogue.current_step.field_id != "features":
        dialogue.submit_response(ANSWERS[dialogue.current_step.field_id])
        dialogue.advance()

    dialogue.advance()

    assert dialogue.current_step.field_id == "agent.name"
    assert dialogue.draft.features == []


@pytest.mark.unit
def test_retreat_keeps_entered_data():
    dialogue = GuidedDialogue()
    dialogue.start()
    dialogue.submit_response("house")
    dialogue.advance()
    dialogue.submit_response("7 Park Street")

    step = dialogue.retreat()

    assert step.field_id == "propertyType"
    assert dialogue.draft.propertyType == "House"
    assert dialogue.draft.location.address == "7 Park Street"


@pytest.mark.unit
def test_retreat_at_first_step_is_refused():
    dialogue = GuidedDialogue()
    dialogue.start()
    with pytest.raises(DialogueStateError):
        dialogue.retreat()


@pytest.mark.unit
def test_completion_hands_over_draft_once():
    on_complete = Mock()
    dialogue = GuidedDialogue(on_complete=on_complete)
    dialogue.start()

    draft = answer_all(dialogue)

    assert dialogue.state is DialogueState.COMPLETED
    on_complete.assert_called_once_with(draft)
    with pytest.raises(DialogueStateError):
        dialogue.advance()
    on_complete.assert_called_once()


@pytest.mark.unit
def test_completed_draft_holds_step_fields():
    dialogue = GuidedDialogue()
    dialogue.start()
    draft = answer_all(dialogue)

    values = draft.field_values()

    assert list(values) == [step.field_id for step in STEPS]
    assert values["propertyType"] == "Apartment"
    assert values["location.state"] == "Karnataka"
    assert values["location.zipCode"] == "560001"
    assert values["price"] == "8500000"
    assert values["features"] == ["gym", "pool"]
    assert values["agent.email"] == "asha@example.com"
    assert values["photoConfirmation"] == "No"
    assert not draft.wants_photos()


@pytest.mark.unit
def test_draft_payload_is_nested_wire_shape():
    dialogue = GuidedDialogue()
    dialogue.start()
    payload = answer_all(dialogue).to_payload()

    assert payload["price"] == 8500000.0
    assert payload["area"] == 1200.0
    assert payload["bedrooms"] == 3
    assert payload["location"]["country"] == "USA"
    assert payload["agent"] == {"name": "Asha Rao", "email": "asha@example.com", "phone": "9845012345"}
    assert payload["status"] == "For Sale"
    assert "photoConfirmation" not in payload


@pytest.mark.unit
def test_cancel_discards_draft():
    on_cancel = Mock()
    dialogue = GuidedDialogue(on_cancel=on_cancel)
    dialogue.start()
    dialogue.submit_response("land")

    dialogue.cancel()

    assert dialogue.state is DialogueState.CANCELLED
    assert dialogue.draft is None
    on_cancel.assert_called_once_with()
    with pytest.raises(DialogueStateError):
        dialogue.submit_response("villa")


@pytest.mark.unit
def test_staged_text_only_reaches_draft_when_confirmed():
    dialogue = GuidedDialogue()
    dialogue.start()

    dialogue.stage("comm")
    assert dialogue.draft.propertyType == ""

    dialogue.stage("commercial")
    assert dialogue.confirm_staged() == "Commercial"
    assert dialogue.draft.propertyType == "Commercial"

    dialogue.advance()
    assert dialogue.staged_text == ""


@pytest.mark.unit
def test_draft_with_value_does_not_mutate_original():
    draft = DraftListing()
    updated = draft.with_value("agent.name", "Asha")

    assert draft.agent.name == ""
    assert updated.agent.name == "Asha"
