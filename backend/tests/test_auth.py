"""Registration, login and the customer profile."""
from jose import jwt

from models.users import User, UserRole
from utils.auth_utils import SECRET_KEY, ALGORITHM, verify_password

PASSWORD = "secret123"


def register(client, **overrides):
    payload = {"email": "Nour@Example.com", "password": "breadlover1", "name": "Nour", "phone": "+201001234567"}
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def test_register_returns_token_for_a_customer(client, db):
    response = register(client)

    assert response.status_code == 201
    token = response.json()["access_token"]
    claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    assert claims["sub"] == "nour@example.com"
    assert claims["role"] == "CUSTOMER"

    user = db.query(User).filter(User.email == "nour@example.com").one()
    assert user.role == UserRole.CUSTOMER
    assert user.hashed_password != "breadlover1"


def test_duplicate_email_or_phone_is_rejected(client):
    register(client)

    assert register(client, email="nour@example.com", phone=None).status_code == 400
    assert register(client, email="other@example.com").status_code == 400


def test_register_validates_input(client):
    assert register(client, email="not-an-email").status_code == 400
    assert register(client, password="short").status_code == 400


def test_login(client, customer):
    response = client.post("/auth/login", data={"username": "LAYLA@example.com", "password": PASSWORD})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_login_with_wrong_password(client, customer):
    response = client.post("/auth/login", data={"username": "layla@example.com", "password": "wrong-one1"})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_inactive_user_cannot_log_in_or_use_token(client, db, customer, customer_headers):
    customer.is_active = False
    db.commit()

    assert client.post("/auth/login", data={"username": "layla@example.com", "password": PASSWORD}).status_code == 401
    assert client.get("/customer/profile", headers=customer_headers).status_code == 401


def test_bad_tokens_are_rejected(client):
    assert client.get("/customer/profile", headers={"Authorization": "Token abc"}).status_code == 401
    assert client.get("/customer/profile", headers={"Authorization": "Bearer not.a.jwt"}).status_code == 401


class TestProfile:
    def test_get_profile(self, client, customer_headers):
        body = client.get("/customer/profile", headers=customer_headers).json()

        assert body["email"] == "layla@example.com"
        assert body["role"] == "CUSTOMER"
        assert "hashed_password" not in body

    def test_update_profile(self, client, customer_headers):
        response = client.patch("/customer/profile", json={"name": "Layla H.", "phone": "+201112223334"},
                                headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Layla H."
        assert response.json()["phone"] == "+201112223334"

    def test_phone_must_be_unique(self, client, db, customer_headers, make_user):
        other, _ = make_user("omar@example.com")
        other.phone = "+201112223334"
        db.commit()

        response = client.patch("/customer/profile", json={"phone": "+201112223334"}, headers=customer_headers)
        assert response.status_code == 400

    def test_change_password(self, client, db, customer, customer_headers):
        response = client.post("/customer/change-password",
                               json={"current_password": PASSWORD, "new_password": "fresh-bread9"},
                               headers=customer_headers)

        assert response.status_code == 200
        db.refresh(customer)
        assert verify_password("fresh-bread9", customer.hashed_password)

    def test_change_password_checks_current(self, client, customer_headers):
        response = client.post("/customer/change-password",
                               json={"current_password": "wrong-one1", "new_password": "fresh-bread9"},
                               headers=customer_headers)
        assert response.status_code == 400

    def test_new_password_needs_letter_and_digit(self, client, customer_headers):
        response = client.post("/customer/change-password",
                               json={"current_password": PASSWORD, "new_password": "onlyletters"},
                               headers=customer_headers)
        assert response.status_code == 400
