"""
Subscription state machine over HTTP: subscribe -> confirm -> unsubscribe.
"""

from concurrent.futures import ThreadPoolExecutor

from conftest import sent_messages, token_from_link


def subscribe(client, email="test@example.com", list_name="blog"):
    return client.post("/subscribe", json={"email": email, "list": list_name})


def admin_list(client, admin_headers, list_name=None):
    query = {"list": list_name} if list_name else None
    return client.get("/admin/list", headers=admin_headers, query_string=query).get_json()


# ---------------------------------------------------------------------------
# subscribe
# ---------------------------------------------------------------------------

def test_subscribe_creates_pending_record(client, resend, admin_headers):
    res = subscribe(client)

    assert res.status_code == 200
    assert res.get_json() == {"ok": True}

    rows = admin_list(client, admin_headers, "blog")
    assert len(rows) == 1
    assert rows[0]["email"] == "test@example.com"
    assert rows[0]["list"] == "blog"
    assert rows[0]["confirmed"] is False


def test_subscribe_sends_confirmation_link(client, resend, store):
    subscribe(client)

    messages = sent_messages(resend)
    assert len(messages) == 1
    assert messages[0]["to"] == ["test@example.com"]
    assert messages[0]["subject"] == "Confirm your subscription"
    token = token_from_link(messages[0]["html"], "/confirm")
    assert store.find_by_token(token).email == "test@example.com"


def test_subscribe_uses_resend_credentials(client, resend):
    subscribe(client)

    args, kwargs = resend.call_args
    assert args[0] == "https://api.resend.com/emails"
    assert kwargs["headers"]["Authorization"] == "Bearer re_test_fake"
    assert kwargs["json"]["from"] == "news@subs.test"


def test_subscribe_normalizes_email_and_list(client, resend, store):
    res = subscribe(client, email="  Test@Example.COM ", list_name="  blog  ")
    assert res.status_code == 200

    [record] = store.list_by_optional_list()
    assert record.email == "test@example.com"
    assert record.list == "blog"

    # Case/whitespace variants collide on the uniqueness constraint
    assert subscribe(client, email="TEST@example.com", list_name="blog").status_code == 409


def test_subscribe_rejects_invalid_email(client, resend, store):
    for bad in ("notanemail", "@example.com", "someone@", "a b@example.com", ""):
        res = subscribe(client, email=bad)
        assert res.status_code == 400, bad
        assert res.get_json() == {"error": "Invalid email"}

    assert store.list_by_optional_list() == []
    assert resend.call_count == 0


def test_subscribe_rejects_missing_list(client, resend):
    res = client.post("/subscribe", json={"email": "test@example.com"})
    assert res.status_code == 400
    assert res.get_json() == {"error": "Missing list"}

    assert subscribe(client, list_name="   ").status_code == 400


def test_subscribe_rejects_non_json_body(client, resend):
    res = client.post("/subscribe", data="email=test@example.com", content_type="text/plain")
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_duplicate_subscribe_conflicts(client, resend):
    assert subscribe(client).status_code == 200

    res = subscribe(client)
    assert res.status_code == 409
    assert res.get_json() == {"error": "Already subscribed"}


def test_duplicate_of_confirmed_record_gives_same_answer(client, resend, store):
    subscribe(client)
    token = store.list_by_optional_list()[0].token
    client.get("/confirm", query_string={"token": token})

    res = subscribe(client)
    assert res.status_code == 409
    assert res.get_json() == {"error": "Already subscribed"}


def test_same_email_on_different_lists(client, resend, admin_headers):
    assert subscribe(client, list_name="blog1").status_code == 200
    assert subscribe(client, list_name="blog2").status_code == 200

    rows = admin_list(client, admin_headers)
    assert sorted(r["list"] for r in rows) == ["blog1", "blog2"]


def test_concurrent_duplicate_subscribes_have_one_winner(app, resend, store):
    def attempt(_):
        with app.test_client() as c:
            return subscribe(c, email="race@example.com").status_code

    with ThreadPoolExecutor(max_workers=8) as pool:
        statuses = list(pool.map(attempt, range(8)))

    assert statuses.count(200) == 1
    assert statuses.count(409) == 7
    assert len(store.list_by_optional_list()) == 1


def test_transport_failure_leaves_record_pending(client, resend, resend_response, store):
    resend.return_value = resend_response(500)

    res = subscribe(client)
    assert res.status_code == 500
    assert res.get_json() == {"error": "Failed to send email"}

    [record] = store.list_by_optional_list()
    assert record.confirmed is False

    # Retrying collides instead of creating a second row
    resend.return_value = resend_response()
    assert subscribe(client).status_code == 409


# ---------------------------------------------------------------------------
# confirm
# ---------------------------------------------------------------------------

def test_confirm_flips_flag_and_is_idempotent(client, resend, store):
    subscribe(client)
    token = token_from_link(sent_messages(resend)[0]["html"], "/confirm")

    res = client.get("/confirm", query_string={"token": token})
    assert res.status_code == 200
    assert res.content_type.startswith("text/html")
    assert "subscribed" in res.get_data(as_text=True)
    assert store.find_by_token(token).confirmed is True

    again = client.get("/confirm", query_string={"token": token})
    assert again.status_code == 200
    assert store.find_by_token(token).confirmed is True


def test_confirm_unknown_token(client, resend, store):
    subscribe(client)

    res = client.get("/confirm?token=not-a-real-token")
    assert res.status_code == 404
    assert res.content_type.startswith("text/html")
    assert store.list_by_optional_list()[0].confirmed is False


def test_confirm_missing_token(client):
    assert client.get("/confirm").status_code == 400
    assert client.get("/confirm?token=").status_code == 400


# ---------------------------------------------------------------------------
# unsubscribe
# ---------------------------------------------------------------------------

def test_unsubscribe_removes_only_target_record(client, resend, store):
    subscribe(client, email="a@x.com", list_name="blog1")
    subscribe(client, email="a@x.com", list_name="blog2")
    blog1 = store.list_by_optional_list("blog1")[0]

    res = client.get("/unsubscribe", query_string={"token": blog1.token})
    assert res.status_code == 200
    assert res.content_type.startswith("text/html")

    remaining = store.list_by_optional_list()
    assert [(r.email, r.list) for r in remaining] == [("a@x.com", "blog2")]


def test_unsubscribe_pending_record(client, resend, store):
    subscribe(client)
    token = store.list_by_optional_list()[0].token

    assert client.get("/unsubscribe", query_string={"token": token}).status_code == 200
    assert store.find_by_token(token) is None


def test_unsubscribe_unknown_or_missing_token(client, resend):
    assert client.get("/unsubscribe?token=nope").status_code == 404
    assert client.get("/unsubscribe").status_code == 400


def test_unsubscribed_token_no_longer_confirms(client, resend, store):
    subscribe(client)
    token = store.list_by_optional_list()[0].token
    client.get("/unsubscribe", query_string={"token": token})

    assert client.get("/confirm", query_string={"token": token}).status_code == 404
    assert client.get("/unsubscribe", query_string={"token": token}).status_code == 404
