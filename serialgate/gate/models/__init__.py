from .gate_run import GateRun as GateRun
from .run_status import RunStatus as RunStatus
