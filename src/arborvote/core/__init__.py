"""ArborVote Core - configuration, logging, and the exception hierarchy."""

from .config import CoreSettings, get_config, clear_config_cache
from .exceptions import (
    ArborVoteException,
    ValidationException,
    ConfigException,
    ProtocolFault,
    AlreadyInitialized,
    NotInitialized,
    DebateUninitialized,
    IdentityProofInvalid,
    AlreadyJoined,
    InitialApprovalOutOfBounds,
    RoleRequired,
    PhaseMismatch,
    ArgumentNotFound,
    InvalidArgumentState,
    InsufficientTokens,
    UnauthorizedCaller,
    NotArgumentCreator,
    TokenTransferFailed,
)
from .logging import (
    configure_logging,
    get_logger,
    correlation_context,
    operation_context,
    OperationLogger,
    operation_logger,
)

__all__ = [
    # Config
    "CoreSettings",
    "get_config",
    "clear_config_cache",
    # Exceptions
    "ArborVoteException",
    "ValidationException",
    "ConfigException",
    "ProtocolFault",
    "AlreadyInitialized",
    "NotInitialized",
    "DebateUninitialized",
    "IdentityProofInvalid",
    "AlreadyJoined",
    "InitialApprovalOutOfBounds",
    "RoleRequired",
    "PhaseMismatch",
    "ArgumentNotFound",
    "InvalidArgumentState",
    "InsufficientTokens",
    "UnauthorizedCaller",
    "NotArgumentCreator",
    "TokenTransferFailed",
    # Logging
    "configure_logging",
    "get_logger",
    "correlation_context",
    "operation_context",
    "OperationLogger",
    "operation_logger",
]
