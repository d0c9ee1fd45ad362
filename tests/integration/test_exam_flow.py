from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from examhub.crud.user import user as crud_user
from examhub.crud.balance_transaction import balance_transaction as crud_balance_transaction


def test_paid_exam_round_trip(client: TestClient, db_session: Session, user_factory, bank_factory, question_factory, auth_headers):
    """
    Issue a token, redeem it, answer, finish and review a paid exam end to end.
    """
    print("\n[TEST] Paid exam round trip")

    user = user_factory(balance="10.00")
    bank = bank_factory(price="5.00")
    q1 = question_factory(bank, text="What is 2+2?", options=["3", "4", "5"], correct_index=1)
    q2 = question_factory(bank, text="What is 3+3?", options=["5", "6", "7"], correct_index=1)
    question_factory(bank, text="Unkeyed question", options=["yes", "no"])

    print("[1] Issuing exam token")
    r_token = client.post(f"/banks/{bank.id}/exam-token", json={"user_id": user.id})
    assert r_token.status_code == 201, f"Token issue failed: {r_token.text}"
    token = r_token.json()["data"]["token"]

    print("[2] Redeeming token")
    r_redeem = client.post(f"/banks/{bank.id}/attempts", json={"user_id": user.id, "token": token})
    assert r_redeem.status_code == 201, f"Redeem failed: {r_redeem.text}"
    redeemed = r_redeem.json()["data"]
    attempt_id = redeemed["attempt_id"]
    assert Decimal(redeemed["remaining_balance"]) == Decimal("5.00")
    print(f"[OK] Attempt created: {attempt_id}")

    print("[3] Fetching questions")
    r_questions = client.get(f"/attempts/{attempt_id}/questions", params={"user_id": user.id})
    assert r_questions.status_code == 200, r_questions.text
    questions = r_questions.json()["data"]["questions"]
    assert {q["id"] for q in questions} == {q1.id, q2.id}

    print("[4] Answering one right and one wrong")
    right = client.post(
        f"/attempts/{attempt_id}/answer",
        json={"question_id": q1.id, "selected_option_id": q1.options[1].id, "user_id": user.id}
    )
    assert right.json()["data"]["is_correct"] is True
    wrong = client.post(
        f"/attempts/{attempt_id}/answer",
        json={"question_id": q2.id, "selected_option_id": q2.options[2].id, "user_id": user.id}
    )
    assert wrong.json()["data"]["is_correct"] is False

    print("[5] Finishing attempt")
    r_finish = client.post(f"/attempts/{attempt_id}/finish", params={"user_id": user.id})
    assert r_finish.status_code == 200, r_finish.text
    finished = r_finish.json()["data"]
    assert finished["score"] == 1
    assert finished["total"] == 2
    assert finished["stats"] == {"answered": 2, "correct": 1, "wrong": 1, "unanswered": 0}

    print("[6] Re-redeeming the same token returns the same attempt")
    r_again = client.post(f"/banks/{bank.id}/attempts", json={"user_id": user.id, "token": token})
    assert r_again.status_code == 201, r_again.text
    assert r_again.json()["data"]["attempt_id"] == attempt_id
    assert Decimal(r_again.json()["data"]["remaining_balance"]) == Decimal("5.00")
    assert crud_user.get_balance(db_session, user_id=user.id) == Decimal("5.00")
    assert len(crud_balance_transaction.get_by_attempt(db_session, attempt_id=attempt_id)) == 1

    print("[7] Reviewing attempt")
    r_review = client.get(f"/attempts/{attempt_id}/review", params={"user_id": user.id})
    assert r_review.status_code == 200, r_review.text
    review = r_review.json()["data"]
    assert review["attempt"]["status"] == "FINISHED"
    assert [item["is_correct"] for item in review["items"]] == [True, False]

    r_history = client.get(f"/users/{user.id}/attempts", params={"status": "FINISHED"})
    assert [a["id"] for a in r_history.json()["data"]] == [attempt_id]

    r_ledger = client.get("/me/balance-history", headers=auth_headers(user))
    ledger = r_ledger.json()["data"]
    assert ledger["total"] == 1
    assert ledger["items"][0]["attempt_id"] == attempt_id
    print("[OK] Round trip complete")
