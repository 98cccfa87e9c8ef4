def _create_session(client, **overrides):
    body = {"player_count": 3, "player_names": ["Ada", "Bo", "Cem"]}
    body.update(overrides)
    return client.post("/api/game/session", json=body)


def test_create_session_with_defaults(client):
    response = _create_session(client)
    assert response.status_code == 201
    session = response.json()
    assert session["settings"]["starting_money"] == 1000
    assert session["settings"]["timer_duration"] == 0
    assert session["used_questions"] == []
    assert session["current_state"] == "QUESTION_INTRO"
    assert session["is_active"] is True


def test_create_session_validation(client):
    assert _create_session(client, player_count=1).status_code == 422
    assert _create_session(client, player_count=9).status_code == 422
    assert _create_session(client, player_names=["Solo"]).status_code == 422
    assert _create_session(client, starting_money=50).status_code == 422


def test_next_question_never_repeats_until_exhausted(client, make_question):
    ids = {make_question().id for _ in range(3)}
    session_id = _create_session(client).json()["id"]

    served = []
    for _ in range(3):
        body = client.get(f"/api/game/session/{session_id}/next-question").json()
        assert body["success"] is True
        served.append(body["question"]["id"])
    assert set(served) == ids

    exhausted = client.get(f"/api/game/session/{session_id}/next-question").json()
    assert exhausted["success"] is False
    assert exhausted["question"] is None
    assert client.get(f"/api/game/session/{session_id}").json()["used_questions"] == served


def test_update_and_end_session(client):
    session_id = _create_session(client).json()["id"]

    updated = client.put(f"/api/game/session/{session_id}",
                         json={"current_state": "BETTING_ROUND", "used_questions": ["x"]}).json()
    assert updated["current_state"] == "BETTING_ROUND"
    assert updated["used_questions"] == ["x"]

    ended = client.post(f"/api/game/session/{session_id}/end").json()
    assert ended["is_active"] is False


def test_unknown_session_is_404(client):
    assert client.get("/api/game/session/missing").status_code == 404
    assert client.get("/api/game/session/missing/next-question").status_code == 404
    assert client.post("/api/game/session/missing/end").status_code == 404


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["database_type"] == "SQLite"
