from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from examhub.crud.exam_token import exam_token as crud_exam_token
from examhub.core.config import settings

class TestExamTokenEndpoints:
    def test_issue_exam_token(self, client: TestClient, user_factory, paid_bank):
        user = user_factory(balance="10.00")
        before = datetime.utcnow()
        response = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": user.id})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        assert len(data["token"]) == settings.EXAM_TOKEN_BYTES * 2
        assert data["url"].endswith(data["token"])
        expires_at = datetime.fromisoformat(data["expires_at"])
        assert before + timedelta(minutes=9) < expires_at <= datetime.utcnow() + timedelta(minutes=10)

    def test_issue_clamps_ttl(self, client: TestClient, user_factory, paid_bank):
        user = user_factory()
        response = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": user.id, "ttl_minutes": 100000})
        assert response.status_code == 201, response.text
        expires_at = datetime.fromisoformat(response.json()["data"]["expires_at"])
        assert expires_at <= datetime.utcnow() + timedelta(minutes=settings.EXAM_TOKEN_MAX_TTL_MINUTES)

    def test_issue_rejects_zero_ttl(self, client: TestClient, user_factory, paid_bank):
        user = user_factory()
        response = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": user.id, "ttl_minutes": 0})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_issue_for_unknown_bank(self, client: TestClient, user_factory):
        user = user_factory()
        response = client.post("/banks/999999/exam-token", json={"user_id": user.id})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_issue_for_unknown_user(self, client: TestClient, paid_bank):
        response = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": 999999})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_earlier_tokens_stay_valid(self, client: TestClient, user_factory, paid_bank):
        user = user_factory(balance="10.00")
        first = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": user.id}).json()["data"]["token"]
        second = client.post(f"/banks/{paid_bank.id}/exam-token", json={"user_id": user.id}).json()["data"]["token"]
        assert first != second

        r1 = client.post(f"/banks/{paid_bank.id}/attempts", json={"user_id": user.id, "token": first})
        r2 = client.post(f"/banks/{paid_bank.id}/attempts", json={"user_id": user.id, "token": second})
        assert r1.status_code == 201, r1.text
        assert r2.status_code == 201, r2.text
        assert r1.json()["data"]["attempt_id"] != r2.json()["data"]["attempt_id"]

    def test_revoke_unused_token(self, client: TestClient, db_session: Session, user_factory, paid_bank, exam_token_factory):
        user = user_factory(balance="10.00")
        token = exam_token_factory(paid_bank, user)

        response = client.post(f"/banks/{paid_bank.id}/exam-token/revoke", json={"user_id": user.id, "token": token})
        assert response.status_code == 200, response.text
        assert response.json()["data"]["revoked"] is True
        assert crud_exam_token.get_by_token_value(db_session, token=token).used_at is not None

        redeem = client.post(f"/banks/{paid_bank.id}/attempts", json={"user_id": user.id, "token": token})
        assert redeem.status_code == 400
        assert redeem.json()["error"]["code"] == "TOKEN_ALREADY_USED"

    def test_revoke_is_scoped_to_bank_and_user(self, client: TestClient, user_factory, paid_bank, exam_token_factory):
        owner = user_factory()
        other = user_factory()
        token = exam_token_factory(paid_bank, owner)

        response = client.post(f"/banks/{paid_bank.id}/exam-token/revoke", json={"user_id": other.id, "token": token})
        assert response.status_code == 200
        assert response.json()["data"]["revoked"] is False

    def test_revoke_twice_reports_false(self, client: TestClient, user_factory, paid_bank, exam_token_factory):
        user = user_factory()
        token = exam_token_factory(paid_bank, user)
        body = {"user_id": user.id, "token": token}
        assert client.post(f"/banks/{paid_bank.id}/exam-token/revoke", json=body).json()["data"]["revoked"] is True
        assert client.post(f"/banks/{paid_bank.id}/exam-token/revoke", json=body).json()["data"]["revoked"] is False

    def test_delete_unused_token(self, client: TestClient, user_factory, paid_bank, exam_token_factory):
        user = user_factory(balance="10.00")
        token = exam_token_factory(paid_bank, user)

        response = client.post(f"/banks/{paid_bank.id}/exam-token/delete", json={"user_id": user.id, "token": token})
        assert response.status_code == 200, response.text
        assert response.json()["data"]["deleted"] is True

        redeem = client.post(f"/banks/{paid_bank.id}/attempts", json={"user_id": user.id, "token": token})
        assert redeem.json()["error"]["code"] == "INVALID_TOKEN"

    def test_delete_bound_token_is_refused(self, client: TestClient, db_session: Session, user_factory, paid_bank, exam_token_factory):
        user = user_factory(balance="10.00")
        token = exam_token_factory(paid_bank, user)
        redeem = client.post(f"/banks/{paid_bank.id}/attempts", json={"user_id": user.id, "token": token})
        assert redeem.status_code == 201, redeem.text

        response = client.post(f"/banks/{paid_bank.id}/exam-token/delete", json={"user_id": user.id, "token": token})
        assert response.status_code == 200
        assert response.json()["data"]["deleted"] is False
        assert crud_exam_token.get_by_token_value(db_session, token=token).attempt_id == redeem.json()["data"]["attempt_id"]
