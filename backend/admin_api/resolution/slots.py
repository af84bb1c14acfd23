"""
Letter Hunt slot schema and request context.

Every Letter Hunt video is assembled from the same fixed set of slots. The
description templates are rendered for every request so reviewers can see
what a slot expects even when nothing fills it yet.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..config import BACKGROUND_MUSIC_URL, DEFAULT_THEME


@dataclass(frozen=True)
class SlotSpec:
    key: str
    type: str  # image, audio, video
    name: str
    description: str  # str.format template: child_name, letter, theme
    fallback_url: Optional[str] = None

    def describe(self, context: "RequestContext") -> str:
        return self.description.format(
            child_name=context.child_name,
            letter=context.target_letter,
            theme=context.theme,
        )


# Render order: title, intro, search, sign, book, grocery, happy dance, ending
LETTER_HUNT_SLOTS: Tuple[SlotSpec, ...] = (
    SlotSpec("titleCard", "image", "Title Card",
             "\"{child_name}'s Letter Hunt!\" title card with {theme} theme"),
    SlotSpec("titleAudio", "audio", "Title Audio", "\"Letter Hunt for {child_name}\""),
    SlotSpec("introVideo", "video", "Intro Video", "{theme} character pointing to giant letter"),
    SlotSpec("introAudio", "audio", "Intro Audio", "\"Today we're looking for the letter {letter}!\""),
    SlotSpec("intro2Video", "video", "Search Video", "{theme} character searching around playfully"),
    SlotSpec("intro2Audio", "audio", "Search Audio",
             "\"Everywhere you go, look for the letter {letter}!\""),
    SlotSpec("signImage", "image", "Letter on Signs",
             "Letter {letter} on colorful street sign with {theme} theme"),
    SlotSpec("signAudio", "audio", "Signs Audio", "\"On signs\""),
    SlotSpec("bookImage", "image", "Letter on Books",
             "Letter {letter} on children's book cover with {theme} theme"),
    SlotSpec("bookAudio", "audio", "Books Audio", "\"On books\""),
    SlotSpec("groceryImage", "image", "Letter in Grocery Store",
             "Letter {letter} on grocery store sign/cereal box with {theme} theme"),
    SlotSpec("groceryAudio", "audio", "Grocery Audio", "\"Even in the grocery store!\""),
    SlotSpec("happyDanceVideo", "video", "Happy Dance Video", "{theme} character doing a joyful dance"),
    SlotSpec("happyDanceAudio", "audio", "Happy Dance Audio",
             "\"And when you find your letter, I want you to do a little happy dance!\""),
    SlotSpec("endingImage", "image", "Ending Image",
             "Letter {letter} with {theme} characters waving goodbye"),
    SlotSpec("endingAudio", "audio", "Ending Audio",
             "\"Have fun finding the letter {letter}, {child_name}!\""),
    SlotSpec("backgroundMusic", "audio", "Background Music",
             "Cheerful background music for Letter Hunt video",
             fallback_url=BACKGROUND_MUSIC_URL),
)

SLOTS_BY_KEY: Dict[str, SlotSpec] = {slot.key: slot for slot in LETTER_HUNT_SLOTS}

# The one image slot keyed by child name rather than by letter
PERSONALIZED_TITLE_SLOT = "titleCard"


def get_slot(key: str) -> SlotSpec:
    try:
        return SLOTS_BY_KEY[key]
    except KeyError:
        raise KeyError(f"Unknown Letter Hunt slot: {key}") from None


@dataclass(frozen=True)
class RequestContext:
    child_name: str
    target_letter: str
    theme: str = DEFAULT_THEME

    @classmethod
    def build(cls, child_name: Optional[str], target_letter: Optional[str] = None,
              theme: Optional[str] = None) -> "RequestContext":
        """
        Normalize manual input. The target letter defaults to the first
        letter of the child's name.
        """
        name = (child_name or "").strip()
        letter = (target_letter or "").strip().upper()[:1] or name[:1].upper()
        if not name or not letter:
            raise ValueError("Please enter both child name and target letter")
        if not letter.isalpha():
            raise ValueError(f"Target letter must be a single letter, got {letter!r}")
        return cls(child_name=name, target_letter=letter, theme=(theme or "").strip() or DEFAULT_THEME)

    @classmethod
    def from_child(cls, child, target_letter: Optional[str] = None,
                   theme: Optional[str] = None) -> "RequestContext":
        return cls.build(child.name, target_letter, theme or child.primary_interest)
