# qbell/__init__.py
import importlib.metadata

from .errors import ConfigurationError, NormDriftError, QBellError, RandomSourceError
from .experiments import CATALOG, ExperimentName, run_catalog, run_experiment
from .quantum_backend import CX, Gate, H, QuantumGate, X
from .statevector import StateVector, apply_gate
from .measurement import measure
from .trials import Circuit, InitialLabel, TrialResult, run_trials, run_trials_parallel, submit_trials

__version__ = importlib.metadata.version("qbell")
