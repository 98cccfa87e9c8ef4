from duell.core import crud
from duell.core.models import QuestionStatus


def _solve(question: str) -> int:
    a, op, b = question.split()
    return int(a) + int(b) if op == "+" else int(a) - int(b)


def _captcha_token(client, correct=True) -> str:
    challenge = client.get("/api/questions/captcha").json()
    answer = _solve(challenge["question"]) + (0 if correct else 1)
    return f"{challenge['challenge_id']}:{answer}"


def _submission(token, **overrides):
    body = {
        "category": "ANIMALS",
        "question_text": "Wie viele Stunden schläft ein Koala am Tag?",
        "answer_value": 20,
        "answer_unit": "Stunden",
        "source_url": "https://example.org/koala",
        "hints": [{"hint_text": "Mehr als ein Mensch."}, {"hint_text": "Weniger als 24."}],
        "contributor_name": "Kim",
        "captcha_token": token,
    }
    body.update(overrides)
    return body


class TestSubmit:

    def test_submission_is_stored_as_pending(self, client, db):
        response = client.post("/api/questions/submit", json=_submission(_captcha_token(client)))
        assert response.status_code == 200, response.text
        question_id = response.json()["question_id"]

        question = crud.get_question(db, question_id)
        assert question.status == QuestionStatus.PENDING
        assert [h.order_index for h in question.hints] == [1, 2]

    def test_wrong_captcha_answer(self, client):
        response = client.post("/api/questions/submit", json=_submission(_captcha_token(client, correct=False)))
        assert response.status_code == 400
        assert response.json()["detail"] == "CAPTCHA-Überprüfung fehlgeschlagen"

    def test_unknown_captcha(self, client):
        response = client.post("/api/questions/submit", json=_submission("deadbeef:3"))
        assert response.status_code == 400

    def test_duplicate_text_is_rejected_case_insensitively(self, client, make_question):
        make_question(text="wie viele stunden schläft ein koala am tag?")
        response = client.post("/api/questions/submit", json=_submission(_captcha_token(client)))
        assert response.status_code == 400
        assert "existiert bereits" in response.json()["detail"]

    def test_two_hints_required(self, client):
        body = _submission(_captcha_token(client), hints=[{"hint_text": "Nur einer."}])
        assert client.post("/api/questions/submit", json=body).status_code == 422


class TestRandom:

    def test_only_approved_questions_are_served(self, client, make_question, db):
        approved = make_question()
        make_question(status=QuestionStatus.PENDING)
        make_question(status=QuestionStatus.REJECTED)

        body = client.get("/api/questions/random").json()
        assert body["success"] is True
        assert body["question"]["id"] == approved.id
        assert len(body["question"]["hints"]) == 2

        db.expire_all()
        assert crud.get_question(db, approved.id).played_count == 1

    def test_exclusion_list_and_exhaustion(self, client, make_question):
        first = make_question()
        second = make_question()

        body = client.get("/api/questions/random", params={"exclude": first.id}).json()
        assert body["question"]["id"] == second.id

        body = client.get("/api/questions/random", params={"exclude": f"{first.id}, {second.id},"}).json()
        assert body == {"success": False, "message": "Keine weiteren genehmigten Fragen verfügbar", "question": None}

    def test_count_only_counts_approved(self, client, make_question):
        make_question()
        make_question()
        make_question(status=QuestionStatus.PENDING)
        assert client.get("/api/questions/count").json() == {"count": 2}


class TestRate:

    def test_rating_updates_totals(self, client, make_question, db):
        question = make_question()
        response = client.post("/api/questions/rate", json={"question_id": question.id, "rating": 4})
        assert response.status_code == 200
        assert response.json()["message"] == "Bewertung gespeichert"

        db.expire_all()
        refreshed = crud.get_question(db, question.id)
        assert (refreshed.rating_sum, refreshed.rating_count) == (4, 1)

    def test_one_rating_per_client(self, client, make_question):
        question = make_question()
        headers = {"X-Forwarded-For": "192.0.2.10"}
        assert client.post("/api/questions/rate", json={"question_id": question.id, "rating": 5},
                           headers=headers).status_code == 200
        again = client.post("/api/questions/rate", json={"question_id": question.id, "rating": 1}, headers=headers)
        assert again.status_code == 400
        other = client.post("/api/questions/rate", json={"question_id": question.id, "rating": 1},
                            headers={"X-Forwarded-For": "192.0.2.11"})
        assert other.status_code == 200

    def test_rating_range_is_validated(self, client, make_question):
        question = make_question()
        assert client.post("/api/questions/rate", json={"question_id": question.id, "rating": 6}).status_code == 422
        assert client.post("/api/questions/rate", json={"question_id": question.id, "rating": 0}).status_code == 422

    def test_unknown_question(self, client):
        response = client.post("/api/questions/rate", json={"question_id": "missing", "rating": 3})
        assert response.status_code == 400
        assert response.json()["detail"] == "Frage nicht gefunden"
