"""Pydantic request/response schemas for the wallet gateway."""

from pydantic import BaseModel, Field


class ConnectWalletRequest(BaseModel):
    address: str = Field(..., description="0x-prefixed 20-byte hex address")
    chain_id: str | None = Field(None, description="Hex chain id reported by the wallet, e.g. 0x89")


class WalletInfo(BaseModel):
    wallet_address: str
    chain_id: str | None
    chain_name: str
    explorer_url: str


class ConnectWalletResponse(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
    wallet: WalletInfo
