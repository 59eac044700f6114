"""
Shared API dependencies: the lending system and the requesting company
"""

from typing import Optional

from fastapi import Header, HTTPException

from ..config import LendingConfig, get_config
from ..errors import ScheduleLockedError, UnsupportedFrequencyOrAmortizationError
from ..logging_config import setup_logging
from ..service import LoanService
from ..storage import StorageInterface, create_storage


class LendingSystem:
    """Lending core with all components initialized"""

    def __init__(self, config: Optional[LendingConfig] = None, storage: Optional[StorageInterface] = None):
        self.config = config or get_config()

        if storage is not None:
            self.storage = storage
        else:
            self.storage = create_storage(self.config.sqlite_path if self.config.use_sqlite else None)

        self.loan_service = LoanService(self.storage, self.config)


_lending_system: Optional[LendingSystem] = None


def get_lending_system() -> LendingSystem:
    """Dependency returning the process-wide lending system, created on first use"""
    global _lending_system
    if _lending_system is None:
        config = get_config()
        setup_logging(config.log_level, "lending", config.log_format)
        _lending_system = LendingSystem(config)
    return _lending_system


def get_company_id(x_company_id: Optional[str] = Header(None)) -> str:
    """Owning company of the request, from the X-Company-ID header"""
    if not x_company_id:
        raise HTTPException(status_code=400, detail="X-Company-ID header is required")
    return x_company_id


def to_http_error(error: Exception) -> HTTPException:
    """Map a domain error onto the HTTP status reported to clients"""
    if isinstance(error, UnsupportedFrequencyOrAmortizationError):
        status_code = 422
    elif isinstance(error, LookupError):
        status_code = 404
    elif isinstance(error, ScheduleLockedError):
        status_code = 409
    else:
        status_code = 400
    return HTTPException(status_code=status_code, detail=str(error))
