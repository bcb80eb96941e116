"""
Main window of the Counter GUI.

The window is a thin view over CounterController: buttons call controller
methods and every new ControllerState re-renders the labels.
"""
import logging
from typing import Optional

from PySide6 import QtCore, QtWidgets

from counter_gui.constants import WINDOW_WIDTH_DEFAULT, WINDOW_HEIGHT_DEFAULT, RESET_VALUE_DEFAULT
from counter_gui.models.controller_state import ControllerState
from counter_gui.services.counter_controller import CounterController

logger = logging.getLogger(__name__)

PAGE_INITIALIZING = 0
PAGE_COUNTER = 1


class CounterWindow(QtWidgets.QMainWindow):
    """Main application window showing one counter.

    Attributes:
        controller: CounterController driving the window
        config_manager: ConfigManager for window size/geometry (optional)
        service_container: ServiceContainer owning the services (optional)
        value_label: Large label with the current value
        status_label: 'Connected' or 'Local Mode'
        retry_btn: Shown only in local mode; re-runs initialization
        loading_label: 'Updating...' while an action is in flight
    """

    def __init__(self, controller: Optional[CounterController] = None, config_manager=None,
                 service_container=None):
        """Initialize the window.

        Args:
            controller: Controller to display; built from service_container when None
            config_manager: Optional ConfigManager for sizing and geometry
            service_container: Optional ServiceContainer; created when neither
                               controller nor container is given
        """
        super().__init__()
        self.setWindowTitle('Counter')
        self.config_manager = config_manager
        self.service_container = service_container

        if controller is None:
            if self.service_container is None:
                from counter_gui.services.service_container import ServiceContainer
                self.service_container = ServiceContainer()
                self.service_container.initialize_services(config_manager)
            controller = self.service_container.get_counter_controller()
        self.controller = controller

        if self.config_manager:
            saved_geometry = self.config_manager.restore_window_geometry()
            if saved_geometry:
                self.restoreGeometry(saved_geometry)
            else:
                self.resize(self.config_manager.ui_settings.window_width,
                            self.config_manager.ui_settings.window_height)
        else:
            self.resize(WINDOW_WIDTH_DEFAULT, WINDOW_HEIGHT_DEFAULT)

        self._build_central()
        self._unsubscribe = self.controller.subscribe(self.render)
        self.render(self.controller.state)

    def _build_central(self):
        self.pages = QtWidgets.QStackedWidget()

        # Initializing page
        init_page = QtWidgets.QWidget()
        init_layout = QtWidgets.QVBoxLayout(init_page)
        init_layout.addStretch()
        self.initializing_label = QtWidgets.QLabel('Initializing counter...')
        self.initializing_label.setAlignment(QtCore.Qt.AlignCenter)
        init_layout.addWidget(self.initializing_label)
        init_layout.addStretch()
        self.pages.addWidget(init_page)

        # Counter page
        counter_page = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(counter_page)

        title = QtWidgets.QLabel('<b>Counter</b>')
        title.setAlignment(QtCore.Qt.AlignCenter)
        layout.addWidget(title)

        status_row = QtWidgets.QHBoxLayout()
        status_row.addStretch()
        self.status_label = QtWidgets.QLabel()
        status_row.addWidget(self.status_label)
        self.retry_btn = QtWidgets.QPushButton('Retry')
        self.retry_btn.clicked.connect(self._on_retry)
        status_row.addWidget(self.retry_btn)
        status_row.addStretch()
        layout.addLayout(status_row)

        self.value_label = QtWidgets.QLabel('0')
        self.value_label.setAlignment(QtCore.Qt.AlignCenter)
        self.value_label.setStyleSheet('font-size: 48px;')
        layout.addWidget(self.value_label)
        caption = QtWidgets.QLabel('Current Value')
        caption.setAlignment(QtCore.Qt.AlignCenter)
        caption.setStyleSheet('color: gray;')
        layout.addWidget(caption)

        btn_row = QtWidgets.QHBoxLayout()
        self.decrement_btn = QtWidgets.QPushButton('−')
        self.decrement_btn.clicked.connect(self._on_decrement)
        self.increment_btn = QtWidgets.QPushButton('+')
        self.increment_btn.clicked.connect(self._on_increment)
        btn_row.addWidget(self.decrement_btn)
        btn_row.addWidget(self.increment_btn)
        layout.addLayout(btn_row)

        self.reset_btn = QtWidgets.QPushButton(f'Reset to {RESET_VALUE_DEFAULT}')
        self.reset_btn.clicked.connect(self._on_reset)
        layout.addWidget(self.reset_btn)

        self.loading_label = QtWidgets.QLabel('Updating...')
        self.loading_label.setAlignment(QtCore.Qt.AlignCenter)
        self.loading_label.setStyleSheet('color: gray;')
        layout.addWidget(self.loading_label)
        layout.addStretch()

        self.pages.addWidget(counter_page)
        self.setCentralWidget(self.pages)

    def start(self) -> None:
        """Run controller initialization (list-or-create)."""
        logger.info('Initializing counter from backend')
        self.controller.initialize()

    def render(self, state: ControllerState) -> None:
        """Update all widgets from a controller state."""
        self.pages.setCurrentIndex(PAGE_INITIALIZING if state.is_initializing else PAGE_COUNTER)
        self.value_label.setText(str(state.counter.value))
        if state.backend_connected:
            self.status_label.setText('Connected')
            self.status_label.setStyleSheet('color: green;')
        else:
            self.status_label.setText('Local Mode')
            self.status_label.setStyleSheet('color: #b8860b;')
        self.retry_btn.setHidden(state.backend_connected)
        self.loading_label.setHidden(not state.is_loading)

    def _on_increment(self):
        self.controller.increment()

    def _on_decrement(self):
        self.controller.decrement()

    def _on_reset(self):
        self.controller.reset(RESET_VALUE_DEFAULT)

    def _on_retry(self):
        logger.info('Retrying backend connection')
        self.controller.retry()

    def closeEvent(self, event):
        """Save geometry and release services on close."""
        if self.config_manager:
            try:
                self.config_manager.save_window_geometry(self.saveGeometry())
            except Exception as e:
                logger.warning(f"Failed to save window geometry: {e}", exc_info=True)
        self._unsubscribe()
        if self.service_container is not None:
            self.service_container.clear()
        super().closeEvent(event)
