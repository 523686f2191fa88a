"""
Navigation (route simulation) package.

Public API:
- Domain models: Route, SimulationProgress, NavigationState, NavigationSpeed, NavigationSnapshot
- Engine: RouteSimulator, SimulationPolicy, default_simulation_policy
- Command surface: NavigationController
- Input checks: validate_route, validate_point, RouteValidationError
"""
from .models import (
    Route,
    SimulationProgress,
    NavigationState,
    NavigationSpeed,
    NavigationSnapshot,
)
from .policy import SimulationPolicy, default_simulation_policy
from .observable import ObservableValue
from .simulator import RouteSimulator
from .controller import NavigationController
from .validation import validate_route, validate_point, RouteValidationError

__all__ = ["Route",
           "SimulationProgress",
           "NavigationState",
           "NavigationSpeed",
           "NavigationSnapshot",
           "SimulationPolicy",
           "default_simulation_policy",
           "ObservableValue",
           "RouteSimulator",
           "NavigationController",
           "validate_route",
           "validate_point",
           "RouteValidationError",
           ]
