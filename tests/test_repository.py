from datetime import datetime

from texteditor.repository import ShareRepository


def test_shares_for_returns_typed_records_in_creation_order(tmp_path):
    repository = ShareRepository(str(tmp_path / "shares.db"))
    repository.init()

    repository.create_share(file_type="file", file_id="7", owner_user_id="alice", token="a1", share_with="bob")
    repository.create_share(file_type="file", file_id="8", owner_user_id="alice", token="other")
    repository.create_share(
        file_type="file",
        file_id="7",
        owner_user_id="carol",
        token="c1",
        expiration=datetime(2031, 5, 1, 12, 0, 0),
    )

    shares = repository.shares_for("file", "7")

    assert [s.token for s in shares] == ["a1", "c1"]
    assert shares[0].owner_user_id == "alice"
    assert shares[0].share_with == "bob"
    assert shares[0].expiration is None
    assert shares[1].expiration == datetime(2031, 5, 1, 12, 0, 0)


def test_shares_for_unknown_item_is_empty(tmp_path):
    repository = ShareRepository(str(tmp_path / "shares.db"))
    repository.init()

    assert repository.shares_for("folder", "7") == []
