"""
Tests for the asset pool fetcher against a real SQLite database.
"""

from sqlalchemy.exc import SQLAlchemyError

from admin_api.resolution.fetcher import FETCH_GROUPS, FetchGroup, fetch_asset_pool
from admin_api.resolution.slots import RequestContext

MIA = RequestContext("Mia", "M", "dog")


def ids(pool):
    return [asset.id for asset in pool]


class TestFetchGroups:
    def test_group_order(self, make_asset, session_factory):
        title = make_asset("image", metadata={"imageType": "titleCard", "child_name": "Mia"})
        generic_image = make_asset("image", metadata={"targetLetter": "M", "child_name": ""})
        generic_audio = make_asset("audio", metadata={"purpose": "signAudio"})
        generic_video = make_asset("video", metadata={"section": "dance"})
        letter_audio = make_asset("audio", metadata={"targetLetter": "M"})
        letter_video = make_asset("video", metadata={"targetLetter": "M"})
        own = make_asset("audio", metadata={"child_name": "Mia", "targetLetter": "M"})

        pool = fetch_asset_pool(session_factory, MIA)

        assert ids(pool) == [
            own.id,
            letter_video.id,
            letter_audio.id,
            generic_video.id,
            generic_audio.id,
            generic_image.id,
            title.id,
        ]

    def test_newest_first_within_group(self, make_asset, session_factory):
        older = make_asset("video", metadata={"targetLetter": "M"})
        newer = make_asset("video", metadata={"targetLetter": "M"})

        pool = fetch_asset_pool(session_factory, MIA)

        assert ids(pool) == [newer.id, older.id]

    def test_duplicates_across_groups_kept(self, make_asset, session_factory):
        own_video = make_asset("video", metadata={"child_name": "Mia", "targetLetter": "M"})

        pool = fetch_asset_pool(session_factory, MIA)

        # child_and_letter and letter_video both match
        assert ids(pool) == [own_video.id, own_video.id]

    def test_rejected_and_other_templates_excluded(self, make_asset, session_factory):
        make_asset("audio", status="rejected", metadata={"targetLetter": "M"})
        make_asset("audio", metadata={"targetLetter": "M", "template": "lullaby"})
        pending = make_asset("audio", status="pending", metadata={"targetLetter": "M"})

        assert ids(fetch_asset_pool(session_factory, MIA)) == [pending.id]

    def test_other_letters_and_children_excluded(self, make_asset, session_factory):
        make_asset("image", metadata={"targetLetter": "A"})
        make_asset("audio", metadata={"child_name": "Noah", "targetLetter": "M"})
        make_asset("image", metadata={"imageType": "titleCard", "child_name": "Noah"})

        assert fetch_asset_pool(session_factory, MIA) == []

    def test_letter_video_includes_other_children(self, make_asset, session_factory):
        foreign = make_asset("video", metadata={"child_name": "Noah", "targetLetter": "M"})

        assert ids(fetch_asset_pool(session_factory, MIA)) == [foreign.id]

    def test_default_groups(self):
        assert [group.name for group in FETCH_GROUPS] == [
            "child_and_letter",
            "letter_video",
            "letter_generic_audio",
            "generic_video",
            "generic_audio",
            "letter_generic_image",
            "child_title_card",
        ]


class TestGroupFailure:
    """A failing group contributes nothing and does not abort the others."""

    def test_failed_group_skipped(self, make_asset, session_factory):
        video = make_asset("video", metadata={"targetLetter": "M"})

        def broken(ctx):
            raise SQLAlchemyError("connection reset")

        groups = (FetchGroup("broken", broken), FETCH_GROUPS[1])
        assert ids(fetch_asset_pool(session_factory, MIA, groups=groups)) == [video.id]

    def test_no_groups(self, session_factory):
        assert fetch_asset_pool(session_factory, MIA, groups=()) == []
