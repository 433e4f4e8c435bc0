"""Signup and login endpoints."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException

from ..accounts import AccountError, AccountExistsError, AuthenticationError
from ..api_models import AuthResponse, CredentialsRequest, UserResponse

if TYPE_CHECKING:
    from ..app import RuntimeState


def create_auth_routes(state: RuntimeState) -> APIRouter:
    router = APIRouter()

    @router.post("/api/signup", response_model=AuthResponse, status_code=201)
    async def signup(req: CredentialsRequest) -> AuthResponse:
        try:
            account, token = await asyncio.to_thread(
                state.account_store.register, req.email, req.password
            )
        except AccountExistsError as exc:
            raise HTTPException(status_code=400, detail="User already exists") from exc
        except AccountError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return AuthResponse(
            message="User created successfully",
            token=token,
            user=UserResponse(id=account.id, email=account.email),
        )

    @router.post("/api/login", response_model=AuthResponse)
    async def login(req: CredentialsRequest) -> AuthResponse:
        try:
            account, token = await asyncio.to_thread(
                state.account_store.authenticate, req.email, req.password
            )
        except AuthenticationError as exc:
            raise HTTPException(status_code=401, detail="Invalid credentials") from exc
        return AuthResponse(
            message="Login successful",
            token=token,
            user=UserResponse(id=account.id, email=account.email),
        )

    return router
