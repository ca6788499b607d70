"""Credential issuance / verification, password hashing and the guard."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from jose import jwt

from src.config import settings
from src.domain.authorization import (
    ORDER_OWNERS,
    RIDE_OWNERS,
    ensure_owner,
    is_owner,
    require_role,
)
from src.domain.entities import Identity
from src.domain.enums import Role
from src.domain.errors import BadRequest, Conflict, Forbidden, Unauthorized
from src.infrastructure.repositories import Store
from src.infrastructure.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from src.services.identity import IdentityService, issue_credential, verify
from tests.conftest import TEST_PASSWORD, make_admin, make_customer, make_driver


CUSTOMER = Identity(subject_id=3, role=Role.CUSTOMER, email="ana@example.com")
PARTNER = Identity(subject_id=3, role=Role.PARTNER, email="pho@example.com")


class TestPasswordHashing:
    def test_hash_is_salted_and_not_plaintext(self):
        first = hash_password("hunter22")
        second = hash_password("hunter22")
        assert first != "hunter22"
        assert first != second

    def test_verify(self):
        hashed = hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)


class TestCredentials:
    def test_claims_round_trip(self):
        credential = issue_credential(CUSTOMER)
        claims = decode_token(credential.token)
        assert claims["sub"] == "3"
        assert claims["role"] == "customer"
        assert claims["email"] == "ana@example.com"
        assert credential.expires_in == settings.token_expire_seconds == 3600

    def test_verify_returns_identity(self):
        credential = issue_credential(PARTNER)
        assert verify(f"Bearer {credential.token}") == PARTNER

    @pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc"])
    def test_missing_or_malformed_scheme(self, header):
        with pytest.raises(Unauthorized):
            verify(header)

    def test_bad_signature(self):
        token = jwt.encode(
            {"sub": "1", "role": "customer", "email": "x@example.com"},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(Unauthorized):
            verify(f"Bearer {token}")

    def test_expired(self):
        token, _ = create_access_token(
            {"sub": "1", "role": "customer", "email": "x@example.com"},
            expires_in=-5,
        )
        with pytest.raises(Unauthorized):
            verify(f"Bearer {token}")

    def test_unknown_role_claim(self):
        token, _ = create_access_token(
            {"sub": "1", "role": "superuser", "email": "x@example.com"}
        )
        with pytest.raises(Unauthorized):
            verify(f"Bearer {token}")

    def test_refresh_keeps_claims_and_renews_expiry(self):
        original, _ = create_access_token(
            {"sub": "3", "role": "customer", "email": "ana@example.com"},
            expires_in=10,
        )
        identity = verify(f"Bearer {original}")
        refreshed = IdentityService.refresh(identity)

        old_claims = decode_token(original)
        new_claims = decode_token(refreshed.token)
        assert new_claims["sub"] == old_claims["sub"]
        assert new_claims["role"] == old_claims["role"]
        assert new_claims["exp"] > old_claims["exp"]


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_login_with_plaintext_against_stored_hash(self, store: Store):
        customer = await make_customer(store)
        credential = await IdentityService(store).authenticate(
            "customers", "ana@example.com", TEST_PASSWORD
        )
        assert verify(f"Bearer {credential.token}").subject_id == customer.id

    @pytest.mark.asyncio
    async def test_wrong_password(self, store: Store):
        await make_customer(store)
        with pytest.raises(Unauthorized):
            await IdentityService(store).authenticate(
                "customers", "ana@example.com", "nope"
            )

    @pytest.mark.asyncio
    async def test_account_only_valid_in_its_own_collection(self, store: Store):
        await make_customer(store)
        with pytest.raises(Unauthorized):
            await IdentityService(store).authenticate(
                "drivers", "ana@example.com", TEST_PASSWORD
            )

    @pytest.mark.asyncio
    async def test_unknown_collection(self, store: Store):
        with pytest.raises(BadRequest):
            await IdentityService(store).authenticate(
                "robots", "ana@example.com", TEST_PASSWORD
            )

    @pytest.mark.asyncio
    async def test_admin_login(self, store: Store):
        admin = await make_admin(store)
        credential = await IdentityService(store).authenticate(
            "admins", admin.email, TEST_PASSWORD
        )
        assert verify(f"Bearer {credential.token}").role == Role.ADMIN


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_hashes_password(self, store: Store):
        account = await IdentityService(store).register(
            "drivers",
            {"email": "zed@example.com", "password": "pass1234", "name": "Zed"},
        )
        assert account.password_hash != "pass1234"
        assert verify_password("pass1234", account.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_email(self, store: Store):
        await make_driver(store)
        with pytest.raises(Conflict):
            await IdentityService(store).register(
                "drivers",
                {"email": "dan@example.com", "password": "pass1234", "name": "Dan"},
            )

    @pytest.mark.asyncio
    async def test_admins_cannot_register(self, store: Store):
        with pytest.raises(Forbidden):
            await IdentityService(store).register(
                "admins",
                {"email": "boss@example.com", "password": "pass1234", "name": "Boss"},
            )


class TestGuard:
    def test_role_match(self):
        assert require_role(CUSTOMER, Role.CUSTOMER) is CUSTOMER

    def test_role_mismatch(self):
        with pytest.raises(Forbidden):
            require_role(CUSTOMER, Role.PARTNER)

    def test_admin_has_no_override(self):
        admin = Identity(subject_id=1, role=Role.ADMIN, email="root@example.com")
        with pytest.raises(Forbidden):
            require_role(admin, Role.CUSTOMER, Role.PARTNER, Role.DRIVER)

    def test_order_owner_predicate_depends_on_role(self):
        order = SimpleNamespace(customer_id=3, partner_id=9)
        assert is_owner(CUSTOMER, order, ORDER_OWNERS)
        # Same subject id, but partners are matched on partner_id
        assert not is_owner(PARTNER, order, ORDER_OWNERS)

    def test_unlisted_role_is_never_owner(self):
        ride = SimpleNamespace(customer_id=3, driver_id=None)
        with pytest.raises(Forbidden):
            ensure_owner(PARTNER, ride, RIDE_OWNERS)
