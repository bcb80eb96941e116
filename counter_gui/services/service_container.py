"""
Service Container for Dependency Injection.

This module provides a centralized container for managing service instances
and their dependencies, so the window and tests can swap the backend client
without touching the controller.
"""
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Centralized container for managing service instances and dependencies.

    Services are either stored as instances or as factories that are called
    lazily on first access.

    Attributes:
        _services: Dictionary mapping service names to ('instance'|'factory', value)
        _initialized: Set of service names that have been initialized
    """

    def __init__(self):
        """Initialize the service container."""
        self._services: Dict[str, Any] = {}
        self._initialized: set = set()
        logger.debug("ServiceContainer initialized")

    def register(self, name: str, service: Any, lazy: bool = False) -> None:
        """Register a service with the container.

        Args:
            name: Name identifier for the service (e.g., 'counter_api')
            service: Service instance or callable factory function
            lazy: If True, service is created lazily on first access
                  If False, service is stored as-is
        """
        if lazy and callable(service):
            self._services[name] = ('factory', service)
        else:
            self._services[name] = ('instance', service)
            self._initialized.add(name)

        logger.debug(f"Registered service: {name} (lazy={lazy})")

    def get(self, name: str) -> Optional[Any]:
        """Get a service instance by name.

        Args:
            name: Name identifier for the service

        Returns:
            Service instance or None if not found
        """
        if name not in self._services:
            logger.warning(f"Service not found: {name}")
            return None

        service_type, service_value = self._services[name]
        if service_type == 'factory':
            logger.debug(f"Lazy initializing service: {name}")
            service_value = service_value()
            self._services[name] = ('instance', service_value)
            self._initialized.add(name)
        return service_value

    def has(self, name: str) -> bool:
        return name in self._services

    def remove(self, name: str) -> None:
        """Remove a service from the container, calling its cleanup() if it has one."""
        if name not in self._services:
            return
        service_type, service = self._services[name]
        if service_type == 'instance' and hasattr(service, 'cleanup'):
            try:
                service.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up service {name}: {e}", exc_info=True)
        del self._services[name]
        self._initialized.discard(name)
        logger.debug(f"Removed service: {name}")

    def clear(self) -> None:
        """Clear all services from the container and cleanup."""
        for name in list(self._services.keys()):
            self.remove(name)
        logger.debug("ServiceContainer cleared")

    def initialize_services(self, config: Optional[Any] = None) -> None:
        """Create and register the counter API client and controller.

        Args:
            config: Optional ConfigManager; defaults are used when None
        """
        from counter_gui.constants import BACKEND_URL_DEFAULT, BACKEND_TIMEOUT_DEFAULT, RECONNECT_POLICY_DEFAULT
        from counter_gui.models.controller_state import ReconnectPolicy
        from counter_gui.services.counter_api import CounterApiClient
        from counter_gui.services.counter_controller import CounterController

        if config is not None:
            base_url = config.backend_settings.base_url
            timeout = config.backend_settings.timeout
            policy_name = config.app_settings.reconnect_policy
        else:
            base_url, timeout, policy_name = BACKEND_URL_DEFAULT, BACKEND_TIMEOUT_DEFAULT, RECONNECT_POLICY_DEFAULT

        try:
            policy = ReconnectPolicy(policy_name)
        except ValueError:
            logger.warning(f"Unknown reconnect policy {policy_name!r}, using {RECONNECT_POLICY_DEFAULT}")
            policy = ReconnectPolicy(RECONNECT_POLICY_DEFAULT)

        api = CounterApiClient(base_url=base_url, timeout=timeout)
        self.register('counter_api', api)
        logger.info(f"Registered CounterApiClient with base_url={base_url}, timeout={timeout}s")

        self.register('counter_controller', CounterController(api, reconnect_policy=policy))
        logger.info(f"Registered CounterController with reconnect_policy={policy.value}")

    def get_counter_api(self):
        """Convenience method to get CounterApiClient."""
        return self.get('counter_api')

    def get_counter_controller(self):
        """Convenience method to get CounterController."""
        return self.get('counter_controller')

    def __repr__(self) -> str:
        services = ', '.join(self._services.keys())
        return f"ServiceContainer(services=[{services}])"
