import pytest

from assistant.errors import WriteOnceViolation
from assistant.state import RunState, write_once


class TestWriteOnce:

    def test_first_value_is_set(self):
        assert write_once("created_order_id")(None, "o-1") == "o-1"

    def test_none_update_keeps_value(self):
        assert write_once("created_order_id")("o-1", None) == "o-1"

    def test_same_value_is_accepted(self):
        assert write_once("created_order_id")("o-1", "o-1") == "o-1"

    def test_different_value_is_rejected(self):
        with pytest.raises(WriteOnceViolation) as exc:
            write_once("resolved_company_id")("co-1", "co-2")
        assert exc.value.field == "resolved_company_id"
        assert exc.value.current == "co-1"
        assert exc.value.update == "co-2"


def test_run_state_defaults():
    state = RunState(account_id="acct-1", user_id="user-1", run_id="run-1")
    assert state.messages == []
    assert state.round_trips == 0
    assert state.resolved_company_id is None
    assert state.created_order_id is None
