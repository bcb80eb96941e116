"""
Service layer for the Counter GUI application.

This package contains service classes that encapsulate the client's logic,
separating it from the GUI layer for better testability.

Services:
- CounterApiClient: HTTP client for the counter backend
- CounterController: Counter state machine with local fallback
- ServiceContainer: Wires the services together from configuration
"""

from counter_gui.services.counter_api import CounterApiClient
from counter_gui.services.counter_controller import CounterController
from counter_gui.services.service_container import ServiceContainer

__all__ = ['CounterApiClient', 'CounterController', 'ServiceContainer']
