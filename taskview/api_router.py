"""Shared router for tool endpoints."""

from __future__ import annotations

from fastapi import APIRouter

api_router = APIRouter()
