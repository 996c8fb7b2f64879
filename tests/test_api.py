def test_chat_crisis_turn(client):
    res = client.post("/chat", json={"message": "I want to kill myself", "sessionId": "api-1"})
    assert res.status_code == 200
    body = res.json()
    assert body["priority"] == "crisis"
    assert body["suggestions"] == ["I am safe", "I need immediate help", "I want to talk to a counselor"]
    assert body["conversation_id"]


def test_empty_message_is_a_bad_request(client):
    res = client.post("/chat", json={"message": "   ", "sessionId": "api-1"})
    assert res.status_code == 400


def test_dosage_turn_flags_follow_up(client):
    body = client.post("/chat", json={"message": "calculate amoxicillin 20 kg", "sessionId": "api-2",
                                      "assistant": "pharmacy"}).json()
    assert "500 mg/day" in body["content"]
    assert body["category"] == "medication"
    assert body["follow_up"] is True


def test_flow_state_round_trips_through_the_client(client):
    first = client.post("/chat", json={"message": "I want to book a circumcision", "sessionId": "api-3"}).json()
    assert first["flow"]["mode"] == "circumcision" and first["flow"]["step"] == 1
    second = client.post("/chat", json={"message": "book", "sessionId": "api-3", "flow": first["flow"]}).json()
    assert second["flow"]["step"] == 10


def test_timer_action_is_returned(client):
    body = client.post("/chat", json={"message": "Start 2-minute timer", "sessionId": "api-4"}).json()
    assert body["action"] == "start_breathing_timer"


def test_conversation_history(client):
    client.post("/chat", json={"message": "I had a long day", "sessionId": "api-5"})
    res = client.get("/conversation/api-5", params={"channel": "web"})
    assert res.status_code == 200
    assert [m["role"] for m in res.json()["messages"]] == ["user", "assistant"]
    assert client.get("/conversation/nobody").status_code == 404


def test_health_reports_persistence_failures(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["persistence_failures"] == 0


def test_whatsapp_verification(client, monkeypatch):
    from config import settings
    monkeypatch.setattr(settings, "WHATSAPP_VERIFY_TOKEN", "secret")
    ok = client.get("/whatsapp/webhook", params={"hub.mode": "subscribe", "hub.verify_token": "secret",
                                                 "hub.challenge": "12345"})
    assert ok.status_code == 200 and ok.text == "12345"
    bad = client.get("/whatsapp/webhook", params={"hub.mode": "subscribe", "hub.verify_token": "nope",
                                                  "hub.challenge": "12345"})
    assert bad.status_code == 403
    assert client.get("/whatsapp/webhook").status_code == 400


def test_whatsapp_inbound_runs_a_turn_per_text_message(client):
    payload = {"entry": [{"changes": [{"value": {"messages": [
        {"from": "255700000002", "id": "wamid.1", "type": "text", "text": {"body": "Habari, nina msongo"}},
        {"from": "255700000002", "id": "wamid.2", "type": "image", "image": {}},
    ]}}]}]}
    res = client.post("/whatsapp/webhook", json=payload)
    assert res.status_code == 200
    assert res.json()["processed"] == 1
    history = client.get("/conversation/255700000002", params={"channel": "whatsapp"}).json()
    assert history["messages"][0]["content"] == "Habari, nina msongo"


def test_whatsapp_inbound_always_acknowledges(client):
    res = client.post("/whatsapp/webhook", content=b"not json", headers={"content-type": "application/json"})
    assert res.status_code == 200


def test_unknown_flow_mode_is_rejected(client):
    res = client.post("/chat", json={"message": "hello", "sessionId": "api-6",
                                     "flow": {"mode": "bogus", "step": 1}})
    assert res.status_code == 422


def test_malformed_whatsapp_payloads_still_acknowledge(client):
    res = client.post("/whatsapp/webhook", json={"entry": ["oops"]})
    assert res.status_code == 200 and res.json()["processed"] == 0

    text_as_string = {"entry": [{"changes": [{"value": {"messages": [
        {"from": "255700000003", "id": "wamid.3", "type": "text", "text": "hi"},
    ]}}]}]}
    res = client.post("/whatsapp/webhook", json=text_as_string)
    assert res.status_code == 200 and res.json()["processed"] == 0

    odd_shapes = {"entry": [{"changes": "nope"}, {"changes": [{"value": ["x"]}]}, 7]}
    assert client.post("/whatsapp/webhook", json=odd_shapes).json()["processed"] == 0
