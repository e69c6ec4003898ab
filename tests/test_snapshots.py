import pytest

from app.models.models import Season
from app.services.scoring_engine import MalformedSnapshotError
from app.services.snapshots import season_state_from_row


def test_rule_pack_column_overrides_the_document():
    season = Season(id=1, rule_pack_id="survivor-style", state={"castStatus": {}, "rulePackId": "traitors-classic"})
    assert season_state_from_row(season).rule_pack_id == "survivor-style"


def test_document_rule_pack_used_when_column_is_empty():
    season = Season(id=1, rule_pack_id=None, state={"castStatus": {}, "rulePackId": "generic-elimination"})
    assert season_state_from_row(season).rule_pack_id == "generic-elimination"


@pytest.mark.parametrize("stored", [["castStatus"], "castStatus", 42])
def test_non_document_state_is_malformed(stored):
    season = Season(id=1, state=stored)
    with pytest.raises(MalformedSnapshotError):
        season_state_from_row(season)


def test_missing_state_is_malformed():
    # No castStatus to score against
    with pytest.raises(MalformedSnapshotError):
        season_state_from_row(Season(id=1, state=None))


def test_table_columns():
    assert set(Season.__table__.columns.keys()) == {
        "id", "name", "rule_pack_id", "state", "created_at", "updated_at",
    }
    assert not Season.__mapper__.relationships
