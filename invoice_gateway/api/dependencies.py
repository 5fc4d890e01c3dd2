"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Request
from invoice_gateway.infrastructure.clients.forecast import ForecastClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_forecast_client() -> ForecastClient:
    """Provide forecast webhook client instance"""
    return ForecastClient()


def get_today() -> date:
    """Reference date for invoice status"""
    return date.today()
