"""Service Loader — resolves the configured contract identifier to a WebService class.

Invariants:
    - Accepts "package.module:ClassName" or "package.module.ClassName"
    - Every failure (empty id, import error, missing attribute, wrong type)
      raises ConfigurationError; the dispatcher never starts half-configured
"""

import importlib
import inspect
import logging

from httprpc.core.contract import WebService
from httprpc.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _split_identifier(identifier: str) -> tuple[str, str]:
    if ":" in identifier:
        module_name, _, attribute = identifier.partition(":")
    else:
        module_name, _, attribute = identifier.rpartition(".")
    if not module_name or not attribute:
        raise ConfigurationError(f"Invalid service contract identifier '{identifier}'.")
    return module_name, attribute


def load_service_contract(identifier: str) -> type[WebService]:
    """Import and validate the service contract class."""
    identifier = (identifier or "").strip()
    if not identifier:
        raise ConfigurationError("No service contract configured.")
    module_name, attribute = _split_identifier(identifier)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}'.") from e
    try:
        contract = getattr(module, attribute)
    except AttributeError as e:
        raise ConfigurationError(
            f"Module '{module_name}' has no attribute '{attribute}'.",
        ) from e
    if not inspect.isclass(contract) or not issubclass(contract, WebService):
        raise ConfigurationError("Invalid service type.")
    if inspect.isabstract(contract):
        raise ConfigurationError(f"Service type '{identifier}' is abstract.")
    logger.info(f"Loaded service contract {module_name}.{attribute}")
    return contract
