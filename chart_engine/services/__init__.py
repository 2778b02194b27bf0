"""
Chart Engine Services

Service layer containing all indicator and chart logic.
Each service has a defined interface (contract) and implementation.
"""

from chart_engine.services.base import BaseService, ServiceError

__all__ = ["BaseService", "ServiceError"]
