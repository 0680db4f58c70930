from datetime import datetime, timedelta

from app.core.question_bank import QUESTION_POOL
from app.models.appointment import Appointment
from app.models.test_result import TestResult


def _fetch_questions(client, history=None):
    resp = client.post("/assessments/questions", json={"history": history or {}})
    assert resp.status_code == 200, resp.text
    return resp.json()


def _fixed_question_set():
    questions = []
    for category in ("medical", "financial", "relationship"):
        questions.extend({"text": t, "category": category} for t in QUESTION_POOL[category][:5])
    return questions


def test_question_set_shape(client, mock_user):
    data = _fetch_questions(client)
    assert len(data["questions"]) == 15
    counts = {}
    for q in data["questions"]:
        counts[q["category"]] = counts.get(q["category"], 0) + 1
    assert counts == {"medical": 5, "financial": 5, "relationship": 5}
    assert [o["value"] for o in data["answer_options"]] == [0, 1, 2, 3, 4]
    assert sum(len(v) for v in data["history"].values()) == 15


def test_question_set_threads_history(client, mock_user):
    first = _fetch_questions(client)
    second = _fetch_questions(client, first["history"])
    first_texts = {q["text"] for q in first["questions"]}
    assert not first_texts & {q["text"] for q in second["questions"]}


def test_questions_require_auth(client):
    resp = client.post("/assessments/questions", json={"history": {}})
    assert resp.status_code in (401, 403)


def test_submit_result_scores_and_persists(client, mock_user, db_session):
    answers = [4] * 5 + [0] * 5 + [2] * 5
    resp = client.post("/results", json={"answers": answers, "questions": _fixed_question_set()})
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["score"] == 30
    assert data["categorical_scores"] == {"medical": 20, "financial": 0, "relationship": 10}
    assert data["category_levels"] == {"medical": "High", "financial": "Low", "relationship": "Mild"}
    assert data["level"] == "Low"
    assert data["ai_analysis"] is None

    row = db_session.query(TestResult).filter_by(id=data["id"]).first()
    assert row is not None
    assert row.user_id == mock_user.id
    assert row.ai_analysis is None


def test_submit_result_with_served_questions(client, mock_user):
    served = _fetch_questions(client)["questions"]
    resp = client.post("/results", json={"answers": [1] * 15, "questions": served})
    assert resp.status_code == 201
    assert resp.json()["score"] == 15
    assert resp.json()["level"] == "Low"


def test_submit_result_storage_failure_is_retryable(client, mock_user, db_session, monkeypatch):
    from app.exceptions import PersistTransient
    from app.services.result_store import ResultStore

    def _fail(self, user_id, result):
        raise PersistTransient("database unavailable")

    monkeypatch.setattr(ResultStore, "write_result", _fail)
    resp = client.post("/results", json={"answers": [1] * 15, "questions": _fixed_question_set()})
    assert resp.status_code == 503
    assert resp.json()["retryable"] is True
    assert resp.headers["Retry-After"] == "5"
    assert db_session.query(TestResult).count() == 0


def test_submit_result_length_mismatch(client, mock_user, db_session):
    resp = client.post("/results", json={"answers": [1] * 14, "questions": _fixed_question_set()})
    assert resp.status_code == 400
    assert "correlation_id" in resp.json()
    assert db_session.query(TestResult).count() == 0


def test_submit_result_out_of_range_answer(client, mock_user):
    answers = [1] * 15
    answers[3] = 7
    resp = client.post("/results", json={"answers": answers, "questions": _fixed_question_set()})
    assert resp.status_code == 400


def test_submit_result_rejects_unknown_question(client, mock_user):
    questions = _fixed_question_set()
    questions[0] = {"text": "Do you enjoy your commute?", "category": "medical"}
    resp = client.post("/results", json={"answers": [1] * 15, "questions": questions})
    assert resp.status_code == 400


def test_get_result_owner_only(client, mock_user, other_user, login_as):
    created = client.post("/results", json={"answers": [2] * 15, "questions": _fixed_question_set()}).json()

    resp = client.get(f"/results/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["score"] == 30

    login_as(other_user)
    assert client.get(f"/results/{created['id']}").status_code == 404
    assert client.get("/results/does-not-exist").status_code == 404


def test_get_result_includes_cached_analysis(client, mock_user, db_session):
    created = client.post("/results", json={"answers": [2] * 15, "questions": _fixed_question_set()}).json()
    db_session.query(TestResult).filter_by(id=created["id"]).update({"ai_analysis": "stored tips"})
    db_session.commit()
    assert client.get(f"/results/{created['id']}").json()["ai_analysis"] == "stored tips"


def _seed_results(db_session, user_id, count):
    base = datetime(2026, 1, 1, 12, 0, 0)
    for i in range(count):
        db_session.add(TestResult(
            id=f"res-{i:02d}",
            user_id=user_id,
            score=i,
            categorical_scores={"medical": i, "financial": 0, "relationship": 0},
            level="Low",
            timestamp=base + timedelta(minutes=i),
        ))
    db_session.commit()


def test_history_newest_first_with_cursor(client, mock_user, other_user, db_session):
    _seed_results(db_session, mock_user.id, 5)
    db_session.add(TestResult(
        id="foreign", user_id=other_user.id, score=60,
        categorical_scores={"medical": 20, "financial": 20, "relationship": 20},
        level="High", timestamp=datetime(2026, 2, 1),
    ))
    db_session.commit()

    page1 = client.get("/history", params={"limit": 2}).json()
    assert [r["id"] for r in page1["results"]] == ["res-04", "res-03"]
    assert page1["next_cursor"]

    page2 = client.get("/history", params={"limit": 2, "cursor": page1["next_cursor"]}).json()
    assert [r["id"] for r in page2["results"]] == ["res-02", "res-01"]

    page3 = client.get("/history", params={"limit": 2, "cursor": page2["next_cursor"]}).json()
    assert [r["id"] for r in page3["results"]] == ["res-00"]
    assert page3["next_cursor"] is None


def test_history_includes_appointments(client, mock_user, db_session):
    db_session.add(Appointment(id="appt-1", user_id=mock_user.id, doctor_name="Dr. Rao", slot="Mon 10:00 AM"))
    db_session.commit()
    data = client.get("/history").json()
    assert data["results"] == []
    assert data["appointments"][0]["doctor_name"] == "Dr. Rao"


def test_history_rejects_bad_cursor_and_limit(client, mock_user):
    assert client.get("/history", params={"cursor": "not-a-cursor"}).status_code == 400
    assert client.get("/history", params={"limit": 0}).status_code == 422
    assert client.get("/history", params={"limit": 101}).status_code == 422
