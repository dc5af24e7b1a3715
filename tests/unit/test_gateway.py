"""Unit tests for wallet connection and session tokens."""
from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from jose import jwt

from src.pm_common.errors import (
    InvalidCredentialsError,
    InvalidWalletAddressError,
    UnsupportedChainError,
)
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.auth.jwt_handler import create_session_token, decode_session_token
from src.pm_gateway.wallet.service import (
    WalletService,
    chain_details,
    format_address,
    normalize_address,
)

ADDR = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


class TestNormalizeAddress:
    def test_lowercases(self) -> None:
        assert normalize_address(ADDR) == ADDR.lower()

    def test_strips_whitespace(self) -> None:
        assert normalize_address(f"  {ADDR} ") == ADDR.lower()

    @pytest.mark.parametrize("bad", ["", "0x123", ADDR[2:], "0x" + "g" * 40, ADDR + "0"])
    def test_rejects_malformed(self, bad: str) -> None:
        with pytest.raises(InvalidWalletAddressError):
            normalize_address(bad)


class TestChains:
    def test_known_chain(self) -> None:
        assert chain_details("0x89").name == "Polygon"
        assert chain_details("0xA86A").name == "Avalanche"

    def test_unknown_chain(self) -> None:
        assert chain_details("0x999").name == "Unknown Network"
        assert chain_details(None).explorer == ""

    def test_format_address(self) -> None:
        assert format_address(ADDR.lower()) == "0x742d...f44e"


class TestWalletService:
    def test_connect_issues_token_for_normalized_address(self) -> None:
        session, token = WalletService().connect(ADDR, "0x1")
        assert session.wallet_address == ADDR.lower()
        assert session.chain_name == "Ethereum Mainnet"
        claims = jwt.get_unverified_claims(token)
        assert claims["sub"] == ADDR.lower()
        assert claims["chain"] == "0x1"
        assert claims["type"] == "wallet_session"

    def test_connect_without_chain(self) -> None:
        session, token = WalletService().connect(ADDR, None)
        assert session.chain_id is None
        assert "chain" not in jwt.get_unverified_claims(token)

    def test_unsupported_chain_rejected(self) -> None:
        with pytest.raises(UnsupportedChainError):
            WalletService().connect(ADDR, "0x999")


class TestSessionToken:
    def test_roundtrip(self) -> None:
        payload = decode_session_token(create_session_token(ADDR.lower(), "0x89"))
        assert payload["sub"] == ADDR.lower()

    def test_expired_token_rejected(self) -> None:
        with patch("src.pm_gateway.auth.jwt_handler._SESSION_EXPIRE", timedelta(seconds=-1)):
            token = create_session_token(ADDR.lower(), None)
        with pytest.raises(InvalidCredentialsError):
            decode_session_token(token)

    def test_tampered_token_rejected(self) -> None:
        token = create_session_token(ADDR.lower(), None)
        with pytest.raises(InvalidCredentialsError):
            decode_session_token(token[:-4] + "xxxx")

    def test_wrong_token_type_rejected(self) -> None:
        from config.settings import settings

        token = jwt.encode({"sub": ADDR.lower(), "type": "access"}, settings.JWT_SECRET)
        with pytest.raises(InvalidCredentialsError):
            decode_session_token(token)


class TestGetWalletSession:
    async def test_builds_session_from_token(self) -> None:
        token = create_session_token(ADDR.lower(), "0xa86a")
        session = await get_wallet_session(token)
        assert session.wallet_address == ADDR.lower()
        assert session.chain_name == "Avalanche"
        assert session.issued_at is not None

    async def test_invalid_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_wallet_session("not-a-token")
        assert exc_info.value.status_code == 401
