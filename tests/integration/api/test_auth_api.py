"""
Integration tests for the wallet sign-in endpoints.

Runs challenge -> sign -> verify against the ASGI app with a real
SQLite database and the in-memory challenge store.
"""

from uuid import UUID

from glaneur.infrastructure.auth.jwt_handler import decode_session_token
from tests.helpers.seed import seed_linked_wallet, seed_user
from tests.helpers.wallets import TestWallet, random_address

API = "/api/v1"


class TestAuthAPI:
    """Integration tests for /challenge and /verify."""

    # ================================================================
    # Helper Methods
    # ================================================================

    async def _challenge(self, client, wallet: TestWallet) -> dict:
        response = await client.post(
            f"{API}/challenge", json={"walletAddress": wallet.address}
        )
        assert response.status_code == 200
        return response.json()["data"]

    async def _verify(self, client, wallet: TestWallet, message: str, **extra):
        payload = {
            "walletAddress": wallet.address,
            "message": message,
            "signature": wallet.sign(message),
        }
        payload.update(extra)
        return await client.post(f"{API}/verify", json=payload)

    # ================================================================
    # Test Methods
    # ================================================================

    async def test_challenge_envelope(self, client):
        """Test challenge response carries message, nonce and expiry."""
        wallet = TestWallet()

        response = await client.post(
            f"{API}/challenge", json={"walletAddress": wallet.address}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["requestId"] == response.headers["X-Request-ID"]
        assert wallet.address in body["data"]["message"]
        assert body["data"]["nonce"] in body["data"]["message"]
        assert "expiresAt" in body["data"]

    async def test_sign_in_creates_user_once(self, client):
        """Test first sign-in creates the user, second one finds it."""
        wallet = TestWallet()

        first = await self._verify(
            client, wallet, (await self._challenge(client, wallet))["message"]
        )
        second = await self._verify(
            client, wallet, (await self._challenge(client, wallet))["message"]
        )

        assert first.status_code == 200
        assert second.status_code == 200
        first_data = first.json()["data"]
        second_data = second.json()["data"]
        assert first_data["isNewUser"] is True
        assert second_data["isNewUser"] is False
        assert first_data["user"]["id"] == second_data["user"]["id"]
        assert first_data["user"]["walletAddress"] == wallet.address
        assert first_data["user"]["displayName"] == (
            f"{wallet.address[:4]}...{wallet.address[-4:]}"
        )
        assert first_data["token"]

    async def test_linked_wallet_sign_in_token_names_signer(self, client, database):
        """Test a linked wallet signs in to its owner and the token names it."""
        owner = await seed_user(database)
        wallet = TestWallet()
        await seed_linked_wallet(database, owner.id, wallet.address)

        response = await self._verify(
            client, wallet, (await self._challenge(client, wallet))["message"]
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["isNewUser"] is False
        assert data["user"]["id"] == str(owner.id)
        assert data["user"]["walletAddress"] == owner.wallet_address
        payload = decode_session_token(data["token"])
        assert UUID(payload["sub"]) == owner.id
        assert payload["wallet"] == wallet.address

    async def test_replayed_challenge_rejected(self, client):
        """Test a challenge signs in at most once."""
        wallet = TestWallet()
        message = (await self._challenge(client, wallet))["message"]

        first = await self._verify(client, wallet, message)
        replay = await self._verify(client, wallet, message)

        assert first.status_code == 200
        assert replay.status_code == 401
        error = replay.json()["error"]
        assert error["code"] == "SIGNATURE_INVALID"
        assert "already been used" in error["message"]

    async def test_signature_from_other_key_rejected(self, client):
        wallet = TestWallet()
        impostor = TestWallet()
        message = (await self._challenge(client, wallet))["message"]

        response = await client.post(
            f"{API}/verify",
            json={
                "walletAddress": wallet.address,
                "message": message,
                "signature": impostor.sign(message),
            },
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "SIGNATURE_INVALID"

    async def test_base64_signature_accepted(self, client):
        wallet = TestWallet()
        message = (await self._challenge(client, wallet))["message"]

        response = await client.post(
            f"{API}/verify",
            json={
                "walletAddress": wallet.address,
                "message": message,
                "signature": wallet.sign_base64(message),
            },
        )

        assert response.status_code == 200

    async def test_invalid_wallet_address(self, client):
        response = await client.post(
            f"{API}/challenge", json={"walletAddress": "not-a-wallet"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "VALIDATION_ERROR"

    async def test_missing_field(self, client):
        """Test request body validation maps to VALIDATION_ERROR."""
        response = await client.post(
            f"{API}/verify", json={"walletAddress": random_address()}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_error_headers(self, client):
        """Test error responses carry the standard headers."""
        response = await client.post(
            f"{API}/challenge",
            json={"walletAddress": "bad"},
            headers={"X-Request-ID": "req-abc"},
        )

        assert response.headers["X-Request-ID"] == "req-abc"
        assert response.headers["X-Api-Version"] == "1"
        assert response.headers["Cache-Control"] == "no-store"
        assert response.json()["requestId"] == "req-abc"
