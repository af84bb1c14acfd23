"""
Tests for the purpose classifier rule order.
"""

from types import SimpleNamespace

import pytest

from admin_api.resolution.classifier import LEGACY_VIDEO_SLOTS, classify_asset


def asset(type, metadata=None, prompt=None, id="a1"):
    return SimpleNamespace(id=id, type=type, prompt=prompt, metadata_info=metadata or {})


class TestLegacyVideos:
    """Pre-tagging videos are pinned by ID."""

    @pytest.mark.parametrize("asset_id,slot", sorted(LEGACY_VIDEO_SLOTS.items()))
    def test_legacy_id_maps_to_slot(self, asset_id, slot):
        assert classify_asset(asset("video", id=asset_id)) == slot

    def test_legacy_id_beats_explicit_video_type(self):
        legacy = asset("video", {"videoType": "happyDanceVideo"}, id="eb3fcec0-d9a4-421d-a2fa-1bded854365d")
        assert classify_asset(legacy) == "introVideo"

    def test_legacy_id_ignored_for_non_video(self):
        image = asset("image", id="eb3fcec0-d9a4-421d-a2fa-1bded854365d")
        assert classify_asset(image) is None


class TestExplicitPurpose:
    def test_image_type(self):
        assert classify_asset(asset("image", {"imageType": "titleCard", "prompt": "a book"})) == "titleCard"

    def test_asset_purpose(self):
        assert classify_asset(asset("audio", {"assetPurpose": "endingAudio"})) == "endingAudio"

    def test_video_type(self):
        assert classify_asset(asset("video", {"videoType": "happyDanceVideo"})) == "happyDanceVideo"

    def test_first_field_wins(self):
        both = asset("image", {"imageType": "signImage", "assetPurpose": "bookImage"})
        assert classify_asset(both) == "signImage"


class TestImagePrompts:
    @pytest.mark.parametrize("prompt,slot", [
        ("Letter M on a colorful street sign", "signImage"),
        ("Children's book cover with dinosaurs", "bookImage"),
        ("Cereal box on a supermarket shelf", "groceryImage"),
        ("Pickle jar with the letter P", "groceryImage"),
        ("Characters waving goodbye", "endingImage"),
    ])
    def test_keywords(self, prompt, slot):
        assert classify_asset(asset("image", {"prompt": prompt})) == slot

    def test_sign_checked_before_book(self):
        assert classify_asset(asset("image", {"prompt": "a sign next to a book"})) == "signImage"

    def test_prompt_column_used_when_metadata_has_none(self):
        assert classify_asset(asset("image", prompt="Reading corner")) == "bookImage"

    def test_unmatched_prompt(self):
        assert classify_asset(asset("image", {"prompt": "a happy puppy"})) is None


class TestAudioPurpose:
    def test_template_context_purpose(self):
        audio = asset("audio", {"template_context": {"asset_purpose": "introAudio"}})
        assert classify_asset(audio) == "introAudio"

    def test_purpose_table(self):
        assert classify_asset(asset("audio", {"purpose": "groceryAudio"})) == "groceryAudio"

    def test_unknown_purpose(self):
        assert classify_asset(asset("audio", {"purpose": "lullaby"})) is None

    def test_no_script_inference(self):
        audio = asset("audio", {"prompt": "Even in the grocery store!"})
        assert classify_asset(audio) is None


class TestVideoSections:
    @pytest.mark.parametrize("metadata,slot", [
        ({"section": "introVideo"}, "introVideo"),
        ({"section": "intro2Video"}, "intro2Video"),
        ({"section": "dance"}, "happyDanceVideo"),
        ({"category": "letter AND theme"}, "introVideo"),
        ({"section": "intro"}, "introVideo"),
        ({"section": "search"}, "intro2Video"),
        ({"category": "thematic"}, "intro2Video"),
        ({"section": "adventure"}, "intro3Video"),
        ({"category": "dance"}, "happyDanceVideo"),
    ])
    def test_sections(self, metadata, slot):
        assert classify_asset(asset("video", metadata)) == slot

    def test_untagged_video(self):
        assert classify_asset(asset("video")) is None
