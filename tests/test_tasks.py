from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from admin_api import tasks
from admin_api.models import Asset
from admin_api.resolution.generation import GenerationError


@patch("admin_api.tasks.GenerationClient")
def test_batch_records_generated_assets(client_cls, db):
    client = MagicMock()
    client.generate_slot.side_effect = [
        {"url": "https://cdn/a-intro.mp3"},
        GenerationError("quota exceeded"),
    ]
    client_cls.return_value = client

    # Two jobs fit in one group, so no pause is taken
    result = tasks.generate_letter_assets_batch(["A", "B"], ["introAudio"])

    assert result["generated"] == 1
    assert result["failed"] == [{"slot": "introAudio", "letter": "B", "url": None, "error": "quota exceeded"}]

    stored = db.query(Asset).one()
    assert stored.file_url == "https://cdn/a-intro.mp3"
    assert stored.status == "pending"
    assert stored.metadata_info["targetLetter"] == "A"


@patch("admin_api.tasks.record_generated_asset")
@patch("admin_api.tasks.SessionLocal")
@patch("admin_api.tasks.GenerationClient")
def test_batch_survives_record_failure(client_cls, session_cls, record):
    client = MagicMock()
    client.generate_slot.side_effect = lambda key, ctx: {"url": f"https://cdn/{ctx.target_letter}-intro.mp3"}
    client_cls.return_value = client
    session = session_cls.return_value
    record.side_effect = [OperationalError("INSERT INTO assets", {}, Exception("database is locked")), MagicMock()]

    result = tasks.generate_letter_assets_batch(["A", "B"], ["introAudio"], "", "dinosaurs")

    assert result["generated"] == 1
    assert result["failed"][0]["letter"] == "A"
    assert result["failed"][0]["url"] == "https://cdn/A-intro.mp3"
    session.rollback.assert_called_once()
    session.close.assert_called_once()
    assert record.call_args.args[2].theme == "dinosaurs"
