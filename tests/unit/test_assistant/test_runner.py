import threading
from datetime import date

from botocore.exceptions import ClientError

from fakes import ACCOUNT_ID, TOKEN, USER_ID, ScriptedChatModel, final, request, tool_call


PROMPT = "Create an order for Luxe Beauty Gallery: 300 units of SK001"


def _luxe_script():
    return [
        request(tool_call("resolve_company", companyName="Luxe Beauty Gallery")),
        request(tool_call("resolve_products", requests=[{"name": "SK001", "quantity": 300}])),
        request(tool_call("create_order", companyId="co-luxe", accountId=ACCOUNT_ID,
                          items=[{"productId": "p-sk001", "quantity": 300}])),
        final("Order created for Luxe Beauty Gallery: 300 x SK001."),
    ]


class TestSuccessfulRuns:

    def test_creates_order(self, make_runner, order_repo):
        model = ScriptedChatModel(_luxe_script())

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is True
        assert result["error"] is None
        assert result["runId"]
        assert result["companyId"] == "co-luxe"
        assert len(order_repo.orders) == 1
        assert result["orderId"] == order_repo.orders[0]["order_id"]
        assert order_repo.orders[0]["company_id"] == "co-luxe"
        assert order_repo.items == [{"order_id": result["orderId"], "product_id": "p-sk001", "quantity": 300}]
        assert result["message"] == "Order created for Luxe Beauty Gallery: 300 x SK001."

    def test_first_messages_carry_scope(self, make_runner):
        model = ScriptedChatModel([final("ok")])

        make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN, today=date(2024, 5, 1))

        system, instruction = model.calls[0][:2]
        assert system.type == "system"
        assert instruction.content.startswith(PROMPT)
        assert "2024-05-01" in instruction.content
        assert ACCOUNT_ID in instruction.content

    def test_unknown_company_is_not_an_error(self, make_runner, order_repo):
        model = ScriptedChatModel([
            request(tool_call("resolve_company", companyName="Nonexistent Co")),
            final("I could not find a company called Nonexistent Co."),
        ])

        result = make_runner(model).run("Order 5 serums for Nonexistent Co", ACCOUNT_ID, TOKEN)

        assert result["success"] is True
        assert result["orderId"] is None
        assert result["companyId"] is None
        assert order_repo.orders == []

    def test_each_run_gets_its_own_id(self, make_runner):
        model = ScriptedChatModel([final("one"), final("two")])
        runner = make_runner(model)

        first = runner.run("hello", ACCOUNT_ID, TOKEN)
        second = runner.run("hello again", ACCOUNT_ID, TOKEN)

        assert first["runId"] != second["runId"]
        assert second["message"] == "two"

    def test_fractional_quantity_does_not_abort(self, make_runner):
        model = ScriptedChatModel([
            request(tool_call("resolve_products", requests=[{"name": "SK001", "quantity": 2.5}])),
            final("Found SK001."),
        ])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is True
        lookup = model.calls[1][-1]
        assert "p-sk001" in lookup.content
        assert "Quantity: 1)" in lookup.content


class TestProgressLog:

    def test_entries_share_the_run_id(self, make_runner, progress_repo):
        model = ScriptedChatModel(_luxe_script())

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        # The runner flushes pending writes before returning
        entries = progress_repo.list_for_run(result["runId"])
        assert [e["content"] for e in entries] == [
            "Looking up the customer",
            "Looking up the products",
            "Creating the order",
            "Order created for Luxe Beauty Gallery: 300 x SK001.",
        ]
        assert len(progress_repo.entries) == 4

    def test_updates_are_read_back_for_the_caller(self, make_runner):
        model = ScriptedChatModel(_luxe_script())
        runner = make_runner(model)

        result = runner.run(PROMPT, ACCOUNT_ID, TOKEN)

        assert len(runner.run_updates(USER_ID, result["runId"])) == 4
        assert runner.run_updates("someone-else", result["runId"]) == []
        assert runner.latest_update(USER_ID)["content"].startswith("Order created")


class TestFailedRuns:

    def test_iteration_cap(self, make_runner, order_repo):
        model = ScriptedChatModel(
            [request(tool_call("resolve_company", companyName="Luxe Beauty Gallery"))],
            repeat_last=True,
        )

        result = make_runner(model, max_iterations=2).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert result["runId"]
        assert "2" in result["error"]
        assert order_repo.orders == []

    def test_empty_order_writes_nothing(self, make_runner, order_repo):
        model = ScriptedChatModel([
            request(tool_call("create_order", companyId="co-luxe", accountId=ACCOUNT_ID, items=[])),
            final("unreachable"),
        ])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert result["orderId"] is None
        assert order_repo.orders == []
        assert order_repo.items == []

    def test_unknown_action(self, make_runner):
        model = ScriptedChatModel([request(tool_call("refund_order", orderId="o-1"))])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert "refund_order" in result["error"]

    def test_model_failure(self, make_runner):
        model = ScriptedChatModel([TimeoutError("upstream timed out")])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert "upstream timed out" in result["error"]

    def test_store_write_failure_surfaces_store_message(self, make_runner, order_repo, monkeypatch):
        def reject(*args, **kwargs):
            raise ClientError(
                {"Error": {"Code": "TransactionCanceledException", "Message": "Transaction cancelled"}},
                "TransactWriteItems",
            )

        monkeypatch.setattr(order_repo, "create", reject)
        model = ScriptedChatModel(_luxe_script())

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert "Transaction cancelled" in result["error"]

    def test_cancelled_before_start(self, make_runner):
        cancel = threading.Event()
        cancel.set()
        model = ScriptedChatModel(_luxe_script())

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN, cancel_event=cancel)

        assert result["success"] is False
        assert model.calls == []

    def test_cancelled_mid_run(self, make_runner, order_repo):
        cancel = threading.Event()

        def resolve_then_cancel(messages):
            cancel.set()
            return request(tool_call("resolve_company", companyName="Luxe Beauty Gallery"))

        model = ScriptedChatModel([resolve_then_cancel] + _luxe_script()[1:])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN, cancel_event=cancel)

        assert result["success"] is False
        assert len(model.calls) == 1
        assert order_repo.orders == []

    def test_order_for_another_company_than_resolved(self, make_runner, order_repo):
        model = ScriptedChatModel([
            request(tool_call("resolve_company", companyName="Acme Corp")),
            request(tool_call("create_order", companyId="co-luxe", accountId=ACCOUNT_ID,
                              items=[{"productId": "p-sk001", "quantity": 300}])),
            final("unreachable"),
        ])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert result["orderId"] is None
        assert "co-acme" in result["error"]
        assert order_repo.orders == []


class TestRejectedInput:

    def test_bad_token(self, make_runner):
        model = ScriptedChatModel([final("unreachable")])

        result = make_runner(model).run(PROMPT, ACCOUNT_ID, "wrong-token")

        assert result["success"] is False
        assert result["runId"] is None
        assert model.calls == []

    def test_blank_prompt(self, make_runner):
        model = ScriptedChatModel([final("unreachable")])

        result = make_runner(model).run("   ", ACCOUNT_ID, TOKEN)

        assert result["success"] is False
        assert result["runId"] is None
        assert model.calls == []

    def test_blank_account(self, make_runner):
        model = ScriptedChatModel([final("unreachable")])

        result = make_runner(model).run(PROMPT, "", TOKEN)

        assert result["success"] is False
        assert model.calls == []
