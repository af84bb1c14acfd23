from types import SimpleNamespace

import pytest

from admin_api.config import DEFAULT_THEME
from admin_api.resolution.slots import RequestContext, get_slot


class TestRequestContext:
    def test_letter_defaults_to_first_letter_of_name(self):
        context = RequestContext.build(" mia ")
        assert context == RequestContext("mia", "M", DEFAULT_THEME)

    def test_letter_uppercased(self):
        assert RequestContext.build("Mia", "b", "dogs").target_letter == "B"

    def test_missing_name(self):
        with pytest.raises(ValueError, match="Please enter both child name and target letter"):
            RequestContext.build("  ", "M")

    def test_non_letter(self):
        with pytest.raises(ValueError):
            RequestContext.build("Mia", "7")

    def test_from_child_uses_primary_interest(self):
        child = SimpleNamespace(name="Noah", primary_interest="dinosaurs")
        assert RequestContext.from_child(child) == RequestContext("Noah", "N", "dinosaurs")


def test_get_slot_unknown():
    with pytest.raises(KeyError):
        get_slot("intro3Video")


def test_describe_renders_placeholders():
    context = RequestContext("Mia", "M", "dog")
    assert get_slot("endingAudio").describe(context) == "\"Have fun finding the letter M, Mia!\""
